from __future__ import annotations

from typing import Iterable, List


class GridcrawlError(Exception):
    """Base exception for the gridcrawl package."""


class ConfigError(GridcrawlError, ValueError):
    """Raised when a generation request cannot be satisfied.

    ``problems`` lists every violated constraint so callers can report them
    all at once instead of fixing one value per run.
    """

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems) or "invalid configuration")
