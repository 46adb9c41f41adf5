from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

MAX_SEED = 1 << 64

INT_FIELDS = (
    "width",
    "height",
    "max_rooms",
    "room_min_size",
    "room_max_size",
    "bsp_max_depth",
    "concealment_patch_size",
    "concealment_spacing",
    "cellular_steps",
    "city_block_size",
    "city_street_width",
    "variant_count",
)
FLOAT_FIELDS = (
    "secret_room_chance",
    "concealment_per_room",
    "cellular_fill_prob",
    "park_frequency",
    "residential_frequency",
    "urban_frequency",
    "red_light_frequency",
    "retail_frequency",
)
BOOL_FIELDS = ("room_borders", "bsp_concealment")


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid size or count
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return _is_int(value) or isinstance(value, float)


class Algorithm(str, Enum):
    ROOMS = "rooms"
    BSP = "bsp"
    CELLULAR = "cellular"
    CITY = "city"

    @classmethod
    def parse(cls, value: Union[str, "Algorithm"]) -> "Algorithm":
        if isinstance(value, Algorithm):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise ConfigError([f"unknown algorithm {value!r} (expected one of: {choices})"]) from None


@dataclass(frozen=True)
class GenerationConfig:
    """Immutable parameter bag for one generation request.

    - ``seed`` None means the run draws its seed from the environment and is
      not reproducible (the chosen seed is logged).
    - Algorithm-specific fields are only validated for the selected algorithm.
    - Use ``dataclasses.replace`` to derive variants.
    """

    algorithm: Algorithm = Algorithm.ROOMS
    width: int = 80
    height: int = 50

    # Rooms and corridors
    max_rooms: int = 20
    room_min_size: int = 4
    room_max_size: int = 10
    room_borders: bool = False
    secret_room_chance: float = 0.08

    # Binary space partitioning
    bsp_max_depth: int = 5
    bsp_concealment: bool = True
    concealment_patch_size: int = 2
    concealment_spacing: int = 4
    concealment_per_room: float = 0.5

    # Cellular automata
    cellular_fill_prob: float = 0.45
    cellular_steps: int = 5

    # City blocks
    city_block_size: int = 10
    city_street_width: int = 2
    park_frequency: float = 0.15
    residential_frequency: float = 0.35
    urban_frequency: float = 0.25
    red_light_frequency: float = 0.10
    retail_frequency: float = 0.15

    # Terrain variant post-pass
    variant_count: int = 3

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        # Accept "bsp" etc. when built from YAML/CLI values
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))

    @property
    def secret_room_count(self) -> int:
        return int(self.max_rooms * self.secret_room_chance)

    @property
    def district_frequencies(self) -> Dict[str, float]:
        return {
            "park": self.park_frequency,
            "residential": self.residential_frequency,
            "urban": self.urban_frequency,
            "red_light": self.red_light_frequency,
            "retail": self.retail_frequency,
        }

    # ---- Validation ------------------------------------------------------
    def type_problems(self) -> List[str]:
        """Fields holding a value of the wrong type."""
        problems: List[str] = []
        for name in INT_FIELDS:
            value = getattr(self, name)
            if not _is_int(value):
                problems.append(f"{name} must be an integer, got {value!r}")
        for name in FLOAT_FIELDS:
            value = getattr(self, name)
            if not _is_number(value):
                problems.append(f"{name} must be a number, got {value!r}")
        for name in BOOL_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                problems.append(f"{name} must be true or false, got {value!r}")
        if self.seed is not None and not _is_int(self.seed):
            problems.append(f"seed must be an integer, got {self.seed!r}")
        return problems

    def validate(self) -> List[str]:
        """Return every violated constraint; an empty list means valid."""
        problems = self.type_problems()
        if problems:
            # Range rules below assume well-typed values
            return problems
        if self.width < 3 or self.height < 3:
            problems.append(f"map must be at least 3x3, got {self.width}x{self.height}")
        if self.seed is not None and not (0 <= self.seed < MAX_SEED):
            problems.append(f"seed must fit in 64 unsigned bits, got {self.seed}")
        if self.variant_count < 1:
            problems.append("variant_count must be >= 1")
        if not 0.0 <= self.secret_room_chance <= 1.0:
            problems.append("secret_room_chance must be between 0.0 and 1.0")

        shortest = min(self.width, self.height)
        algo = self.algorithm
        if algo in (Algorithm.ROOMS, Algorithm.BSP):
            if self.room_min_size < 1:
                problems.append("room_min_size must be >= 1")
            if self.room_min_size > self.room_max_size:
                problems.append(
                    f"room_min_size ({self.room_min_size}) exceeds room_max_size ({self.room_max_size})"
                )

        if algo is Algorithm.ROOMS:
            if self.max_rooms < 0:
                problems.append("max_rooms must be >= 0")
            if self.room_max_size + 3 > shortest:
                problems.append(
                    f"room_max_size ({self.room_max_size}) does not fit a {self.width}x{self.height} map"
                )
            if self.room_borders and self.room_min_size < 3:
                problems.append("room_borders requires room_min_size >= 3")
            if self.secret_room_count > 0 and shortest < 8:
                problems.append("secret rooms need a map of at least 8x8")
        elif algo is Algorithm.BSP:
            if self.bsp_max_depth < 0:
                problems.append("bsp_max_depth must be >= 0")
            if self.room_min_size + 2 > shortest:
                problems.append(
                    f"room_min_size ({self.room_min_size}) does not fit a {self.width}x{self.height} map"
                )
            if self.concealment_patch_size < 1:
                problems.append("concealment_patch_size must be >= 1")
            if self.concealment_spacing < 0:
                problems.append("concealment_spacing must be >= 0")
            if self.concealment_per_room < 0:
                problems.append("concealment_per_room must be >= 0")
        elif algo is Algorithm.CELLULAR:
            if not 0.0 <= self.cellular_fill_prob <= 1.0:
                problems.append("cellular_fill_prob must be between 0.0 and 1.0")
            if self.cellular_steps < 0:
                problems.append("cellular_steps must be >= 0")
        elif algo is Algorithm.CITY:
            if self.city_block_size < 1:
                problems.append("city_block_size must be >= 1")
            if self.city_street_width < 1:
                problems.append("city_street_width must be >= 1")
            freqs = self.district_frequencies
            for name, value in freqs.items():
                if value < 0:
                    problems.append(f"{name}_frequency must be >= 0")
            if sum(v for v in freqs.values() if v > 0) <= 0:
                problems.append("at least one district frequency must be > 0")
        return problems

    def ensure_valid(self) -> "GenerationConfig":
        problems = self.validate()
        if problems:
            logger.warning("Rejected generation config: %s", "; ".join(problems))
            raise ConfigError(problems)
        return self

    # ---- Serialization ---------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["algorithm"] = self.algorithm.value
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GenerationConfig":
        """Build a config from plain data. Missing keys fall back to defaults."""
        data = dict(data or {})
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError([f"unknown config key: {k}" for k in unknown])
        try:
            config = cls(**data)
        except TypeError as exc:
            raise ConfigError([str(exc)]) from exc
        problems = config.type_problems()
        if problems:
            raise ConfigError(problems)
        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "GenerationConfig":
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            try:
                raw = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError([f"{path}: invalid YAML: {exc}"]) from exc
        if not isinstance(raw, dict):
            raise ConfigError([f"{path}: top level must be a mapping"])
        # Allow the generation block to be nested under a "generation" key
        if "generation" in raw and isinstance(raw["generation"], dict):
            raw = raw["generation"]
        logger.info("Loaded generation config from %s", path)
        return cls.from_dict(raw)

    def save_yaml(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        logger.info("Saved generation config to %s", path)


__all__ = ["Algorithm", "GenerationConfig"]
