"""Tyre compound taxonomy for the race weekend engine.

The compound set is closed: soft, medium and hard.  Each compound carries
a lap-time multiplier (soft is quicker, hard is slower) and a hardness
score used when judging whether a pit plan matches its declared
aggressiveness.
"""

from __future__ import annotations

from enum import Enum


class TyreCompound(str, Enum):
    """Available dry-weather compounds."""

    SOFT = "soft"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def pace_factor(self) -> float:
        """Multiplier applied to the lap time (medium = 1.0)."""
        return _PACE_FACTORS[self]

    @property
    def hardness_score(self) -> int:
        """Aggressiveness score of the compound: soft 3, medium 2, hard 1."""
        return _HARDNESS_SCORES[self]

    @classmethod
    def parse(cls, value: TyreCompound | str) -> TyreCompound:
        """Coerce *value* into a compound.

        Args:
            value: A ``TyreCompound`` or its lower-case name.

        Returns:
            The matching compound.

        Raises:
            ValueError: If *value* names no known compound.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise ValueError(
                f"Unknown tyre compound {value!r}; expected one of: {valid}."
            ) from None


_PACE_FACTORS: dict[TyreCompound, float] = {
    TyreCompound.SOFT: 0.95,
    TyreCompound.MEDIUM: 1.00,
    TyreCompound.HARD: 1.05,
}

_HARDNESS_SCORES: dict[TyreCompound, int] = {
    TyreCompound.SOFT: 3,
    TyreCompound.MEDIUM: 2,
    TyreCompound.HARD: 1,
}

SOFT = TyreCompound.SOFT
MEDIUM = TyreCompound.MEDIUM
HARD = TyreCompound.HARD
