"""Pit strategy model for the race weekend engine.

A strategy is an ordered list of stints, each run on one compound for a
planned number of laps.  The laps each compound can last depend on how
hard the team intends to push, given by the durability table below.
The final stint runs whatever distance remains after the planned stops::

    final_stint_laps = total_laps - sum(stint.laps for stint in stints[:-1])
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from race_weekend.core.tyre import TyreCompound

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_TOTAL_LAPS: int = 60
REQUIRED_STOPS_THRESHOLD: int = 3  # a plan must make more stops than this
CONSISTENCY_TOLERANCE: float = 0.5
ESTIMATED_STOP_TIME: float = 2.5  # seconds


class Aggressiveness(str, Enum):
    """How hard a strategy pushes the tyres."""

    CHILL = "chill"
    MEDIUM = "medium"
    AGGRESSIVE = "aggressive"

    @property
    def score(self) -> int:
        return _AGGRESSIVENESS_SCORES[self]


_AGGRESSIVENESS_SCORES: dict[Aggressiveness, int] = {
    Aggressiveness.CHILL: 1,
    Aggressiveness.MEDIUM: 2,
    Aggressiveness.AGGRESSIVE: 3,
}


def _build_durability_table(
    rows: Mapping[Aggressiveness, Mapping[TyreCompound, int]],
) -> Mapping[Aggressiveness, Mapping[TyreCompound, int]]:
    """Freeze the durability table, checking it covers every key pair."""
    for level in Aggressiveness:
        if level not in rows:
            raise ValueError(f"Durability table is missing row {level.value!r}.")
        for compound in TyreCompound:
            if compound not in rows[level]:
                raise ValueError(
                    f"Durability table row {level.value!r} is missing "
                    f"compound {compound.value!r}."
                )
    return MappingProxyType(
        {level: MappingProxyType(dict(rows[level])) for level in Aggressiveness}
    )


# Maximum laps per stint, by aggressiveness and compound.
DURABILITY: Mapping[Aggressiveness, Mapping[TyreCompound, int]] = _build_durability_table(
    {
        Aggressiveness.CHILL: {
            TyreCompound.SOFT: 20,
            TyreCompound.MEDIUM: 35,
            TyreCompound.HARD: 45,
        },
        Aggressiveness.MEDIUM: {
            TyreCompound.SOFT: 15,
            TyreCompound.MEDIUM: 27,
            TyreCompound.HARD: 37,
        },
        Aggressiveness.AGGRESSIVE: {
            TyreCompound.SOFT: 10,
            TyreCompound.MEDIUM: 20,
            TyreCompound.HARD: 30,
        },
    }
)


def max_stint_laps(aggressiveness: Aggressiveness, compound: TyreCompound) -> int:
    """Durability lookup for one (aggressiveness, compound) pair."""
    return DURABILITY[aggressiveness][compound]


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Stint:
    """One tyre stint.

    Attributes:
        compound: Compound fitted for the stint.
        laps: Planned laps on that compound (>= 0).
    """

    compound: TyreCompound
    laps: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "compound", TyreCompound.parse(self.compound))
        if self.laps < 0:
            raise ValueError("Stint laps must be >= 0.")


@dataclass(frozen=True)
class StrategyAssessment:
    optimal: bool
    reason: str | None = None


@dataclass(frozen=True)
class StopRecord:
    """Outcome of :meth:`Strategy.record_stop`.

    Attributes:
        accepted: False once every planned stop has been recorded; the
            remaining fields then describe the state before the call.
        stop_number: 1-based number of the stop.
        time: Stationary time of the stop in seconds.
        lap: Planned lap of the stop.
        next_compound: Compound for the stint that follows.
        total_pit_time: Cumulative pit time after the stop.
    """

    accepted: bool
    stop_number: int
    time: float
    lap: int | None
    next_compound: TyreCompound | None
    total_pit_time: float


@dataclass(frozen=True)
class PlannedStop:
    stop_number: int
    lap: int
    compound: TyreCompound
    estimated_time: float


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------


class Strategy:
    """A pit plan with running stop counters.

    Attributes:
        stints: Planned stints, in race order.
        number_of_stops: Declared number of stops.  Normally
            ``len(stints) - 1``; a mismatching declaration makes the plan
            non-optimal rather than invalid.
        aggressiveness: How hard the plan pushes the tyres.
        total_laps: Race distance the plan covers.
        stops_completed: Stops recorded so far.
        total_pit_time: Stationary time accumulated so far, in seconds.
    """

    __slots__ = (
        "stints",
        "number_of_stops",
        "aggressiveness",
        "total_laps",
        "stops_completed",
        "total_pit_time",
    )

    def __init__(
        self,
        stints: Sequence[Stint],
        aggressiveness: Aggressiveness | str,
        number_of_stops: int | None = None,
        total_laps: int = DEFAULT_TOTAL_LAPS,
    ) -> None:
        if not stints:
            raise ValueError("A strategy needs at least one stint.")
        if total_laps <= 0:
            raise ValueError("total_laps must be > 0.")
        self.stints: tuple[Stint, ...] = tuple(stints)
        self.aggressiveness: Aggressiveness = Aggressiveness(aggressiveness)
        self.number_of_stops: int = (
            len(self.stints) - 1 if number_of_stops is None else number_of_stops
        )
        self.total_laps: int = total_laps
        self.stops_completed: int = 0
        self.total_pit_time: float = 0.0

    def __repr__(self) -> str:
        plan = ", ".join(f"{s.compound.value}x{s.laps}" for s in self.stints)
        return f"Strategy([{plan}], aggressiveness={self.aggressiveness.value})"

    # -- derived --------------------------------------------------------------

    def final_stint_laps(self) -> int:
        """Laps left for the last stint after every planned stop."""
        return self.total_laps - sum(stint.laps for stint in self.stints[:-1])

    def stop_laps(self) -> list[int]:
        """Planned lap of each stop (cumulative stint lengths)."""
        laps: list[int] = []
        running = 0
        for stint in self.stints[:-1]:
            running += stint.laps
            laps.append(running)
        return laps

    def _durability(self, compound: TyreCompound) -> int:
        return max_stint_laps(self.aggressiveness, compound)

    # -- validation -----------------------------------------------------------

    def assess(self) -> StrategyAssessment:
        """Check the plan against the durability table.

        A plan is optimal when its declared stops match its stints, it
        makes more than the required number of stops, and no stint,
        including the remainder run on the final compound, outlasts its
        tyres.
        """
        if self.number_of_stops != len(self.stints) - 1:
            return self._reject(
                f"declared {self.number_of_stops} stops for {len(self.stints)} stints"
            )
        if self.number_of_stops <= REQUIRED_STOPS_THRESHOLD:
            return self._reject(
                f"{self.number_of_stops} stops; more than "
                f"{REQUIRED_STOPS_THRESHOLD} are required"
            )
        for index, stint in enumerate(self.stints[:-1], start=1):
            limit = self._durability(stint.compound)
            if stint.laps > limit:
                return self._reject(
                    f"stint {index} runs {stint.laps} laps on {stint.compound.value}, "
                    f"limit is {limit}"
                )
        final = self.stints[-1]
        final_laps = self.final_stint_laps()
        limit = self._durability(final.compound)
        if final_laps > limit:
            return self._reject(
                f"final stint runs {final_laps} laps on {final.compound.value}, "
                f"limit is {limit}"
            )
        return StrategyAssessment(optimal=True)

    def is_optimal(self) -> bool:
        return self.assess().optimal

    def _reject(self, reason: str) -> StrategyAssessment:
        logger.info("Strategy %r is not optimal: %s", self, reason)
        return StrategyAssessment(optimal=False, reason=reason)

    def stops_evenly_distributed(self) -> bool:
        """True when every stint that ends in a stop fits its tyres.

        The declared stop count must also match the stints.
        """
        if self.number_of_stops != len(self.stints) - 1:
            return False
        return all(
            stint.laps <= self._durability(stint.compound)
            for stint in self.stints[:-1]
        )

    def aggressiveness_consistent(self) -> bool:
        """Compare the compound mix with the declared aggressiveness.

        The mean hardness score of the stints (soft 3, medium 2, hard 1)
        must lie within 0.5 of the aggressiveness score (aggressive 3,
        medium 2, chill 1).
        """
        mean_score = sum(s.compound.hardness_score for s in self.stints) / len(
            self.stints
        )
        return abs(mean_score - self.aggressiveness.score) <= CONSISTENCY_TOLERANCE

    # -- execution ------------------------------------------------------------

    def record_stop(self, time: float) -> StopRecord:
        """Record a completed pit stop.

        Args:
            time: Stationary time in seconds (>= 0).

        Returns:
            The stop just recorded.  Once all planned stops are recorded
            further calls are rejected and report the prior counters.

        Raises:
            ValueError: If *time* is negative.
        """
        if time < 0.0:
            raise ValueError("Pit stop time must be >= 0.")
        if self.stops_completed >= self.number_of_stops:
            logger.warning(
                "Strategy %r: all %d planned stops already recorded",
                self,
                self.number_of_stops,
            )
            return StopRecord(
                accepted=False,
                stop_number=self.stops_completed,
                time=time,
                lap=None,
                next_compound=None,
                total_pit_time=self.total_pit_time,
            )

        self.stops_completed += 1
        self.total_pit_time += time
        stop_laps = self.stop_laps()
        index = self.stops_completed - 1
        lap = stop_laps[index] if index < len(stop_laps) else None
        next_compound = (
            self.stints[self.stops_completed].compound
            if self.stops_completed < len(self.stints)
            else None
        )
        return StopRecord(
            accepted=True,
            stop_number=self.stops_completed,
            time=time,
            lap=lap,
            next_compound=next_compound,
            total_pit_time=self.total_pit_time,
        )

    def next_stop(self) -> PlannedStop | None:
        """The next planned stop, ``None`` once all are done."""
        stop_laps = self.stop_laps()
        index = self.stops_completed
        if index >= self.number_of_stops or index >= len(stop_laps):
            return None
        return PlannedStop(
            stop_number=index + 1,
            lap=stop_laps[index],
            compound=self.stints[index + 1].compound,
            estimated_time=ESTIMATED_STOP_TIME,
        )
