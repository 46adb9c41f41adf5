import dataclasses

import pytest
import yaml

from gridcrawl.config import Algorithm, GenerationConfig
from gridcrawl.exceptions import ConfigError, GridcrawlError


def test_defaults_are_valid():
    for algo in Algorithm:
        assert GenerationConfig(algorithm=algo).validate() == []


def test_algorithm_accepts_strings():
    cfg = GenerationConfig(algorithm="BSP")
    assert cfg.algorithm is Algorithm.BSP
    assert Algorithm.parse(" city ") is Algorithm.CITY


def test_unknown_algorithm_rejected():
    with pytest.raises(ConfigError) as exc:
        GenerationConfig(algorithm="maze")
    assert "maze" in str(exc.value)


def test_min_room_larger_than_max_is_reported():
    cfg = GenerationConfig(room_min_size=8, room_max_size=5)
    problems = cfg.validate()
    assert any("room_min_size" in p for p in problems)


def test_ensure_valid_raises_with_every_problem():
    cfg = GenerationConfig(width=2, height=2, variant_count=0)
    with pytest.raises(ConfigError) as exc:
        cfg.ensure_valid()
    err = exc.value
    assert isinstance(err, ValueError)
    assert isinstance(err, GridcrawlError)
    assert len(err.problems) >= 2


def test_room_too_large_for_map():
    cfg = GenerationConfig(width=10, height=10, max_rooms=1, room_min_size=3, room_max_size=9)
    assert any("does not fit" in p for p in cfg.validate())


def test_algorithm_specific_rules_only_apply_to_selected_algorithm():
    cfg = GenerationConfig(algorithm="cellular", room_min_size=9, room_max_size=2)
    assert cfg.validate() == []
    bad = dataclasses.replace(cfg, cellular_fill_prob=1.5)
    assert any("cellular_fill_prob" in p for p in bad.validate())


def test_city_needs_a_positive_frequency():
    cfg = GenerationConfig(
        algorithm="city",
        park_frequency=0.0,
        residential_frequency=0.0,
        urban_frequency=0.0,
        red_light_frequency=0.0,
        retail_frequency=0.0,
    )
    assert any("district frequency" in p for p in cfg.validate())


def test_negative_frequency_rejected():
    cfg = GenerationConfig(algorithm="city", park_frequency=-0.1)
    assert any("park_frequency" in p for p in cfg.validate())


def test_room_borders_need_room_for_a_wall_ring():
    cfg = GenerationConfig(room_borders=True, room_min_size=2)
    assert any("room_borders" in p for p in cfg.validate())


def test_secret_room_count():
    assert GenerationConfig(max_rooms=20, secret_room_chance=0.08).secret_room_count == 1
    assert GenerationConfig(max_rooms=1, secret_room_chance=0.08).secret_room_count == 0


def test_seed_range_checked():
    assert GenerationConfig(seed=0).validate() == []
    assert GenerationConfig(seed=-5).validate() != []
    assert GenerationConfig(seed=1 << 64).validate() != []


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(ConfigError) as exc:
        GenerationConfig.from_dict({"widht": 10})
    assert exc.value.problems == ["unknown config key: widht"]


def test_from_dict_missing_keys_use_defaults():
    cfg = GenerationConfig.from_dict({"algorithm": "bsp", "seed": 9})
    assert cfg.algorithm is Algorithm.BSP
    assert cfg.seed == 9
    assert cfg.width == GenerationConfig().width


def test_yaml_round_trip(tmp_path):
    cfg = GenerationConfig(algorithm="city", width=60, height=40, seed=77, park_frequency=0.5)
    path = tmp_path / "nested" / "gen.yaml"
    cfg.save_yaml(path)

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert raw["algorithm"] == "city"

    assert GenerationConfig.from_yaml(path) == cfg


def test_yaml_generation_block(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("generation:\n  algorithm: cellular\n  width: 30\n", encoding="utf-8")
    cfg = GenerationConfig.from_yaml(path)
    assert cfg.algorithm is Algorithm.CELLULAR
    assert cfg.width == 30


def test_yaml_must_be_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        GenerationConfig.from_yaml(path)


def test_missing_yaml_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        GenerationConfig.from_yaml(tmp_path / "nope.yaml")


def test_non_integer_size_is_rejected():
    with pytest.raises(ConfigError) as exc:
        GenerationConfig(width=20.5, height=20).ensure_valid()
    assert exc.value.problems == ["width must be an integer, got 20.5"]


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"max_rooms": True}, "max_rooms"),
        ({"cellular_steps": "3"}, "cellular_steps"),
        ({"park_frequency": "lots"}, "park_frequency"),
        ({"room_borders": 1}, "room_borders"),
        ({"seed": 1.5}, "seed"),
    ],
)
def test_wrong_field_types_are_reported(overrides, field):
    problems = GenerationConfig(**overrides).validate()
    assert len(problems) == 1
    assert problems[0].startswith(field)


def test_integer_frequencies_are_accepted():
    assert GenerationConfig(algorithm="city", park_frequency=1, retail_frequency=0).validate() == []


def test_from_dict_rejects_wrong_types():
    with pytest.raises(ConfigError) as exc:
        GenerationConfig.from_dict({"width": "wide"})
    assert exc.value.problems == ["width must be an integer, got 'wide'"]


def test_yaml_with_wrong_type_is_config_error(tmp_path):
    path = tmp_path / "gen.yaml"
    path.write_text("width: wide\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        GenerationConfig.from_yaml(path)


def test_malformed_yaml_is_config_error(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("width: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigError) as exc:
        GenerationConfig.from_yaml(path)
    assert "invalid YAML" in exc.value.problems[0]
