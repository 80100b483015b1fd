"""
Error types for the gacha analyzer.

Normalization problems are collected and returned alongside the records that
did normalize; codec problems are raised once every violation is known.
"""

from __future__ import annotations

from typing import Any, List, Optional


class GachaError(Exception):
    """Base class for every error raised by the package."""


class SchemaNotFound(GachaError):
    """No schema is registered for the requested game."""

    def __init__(self, game: str):
        self.game = game
        super().__init__(f"no schema registered for game {game!r}")


class SchemaMismatch(GachaError):
    """A raw record could not be mapped onto a game's record fields."""

    def __init__(self, reason: str, index: Optional[int] = None, raw: Any = None):
        self.reason = reason
        self.index = index
        self.raw = raw
        where = f"record {index}: " if index is not None else ""
        super().__init__(f"{where}{reason}")


class MalformedContainer(GachaError):
    """Structural validation of an interchange container failed."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        summary = "; ".join(self.violations[:3])
        if len(self.violations) > 3:
            summary += f" (+{len(self.violations) - 3} more)"
        super().__init__(f"malformed container: {summary}")


class UnsupportedVersion(GachaError):
    """The container version is well formed but has no migration path."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"unsupported interchange version {version!r}")


class UnknownGame(GachaError):
    """The container holds a game block the registry does not know."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"unknown game block {key!r}")
