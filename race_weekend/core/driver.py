"""Driver model for the race weekend engine.

A driver contributes a multiplicative skill discount to every lap time
driven in their car::

    skill_factor = 1 - ((speed + consistency) / 200) * 0.1

so a driver with no skill leaves the lap untouched (1.0) and a perfect
driver removes 10 % of it (0.9).  Drivers also carry championship points,
which only ever increase, and season statistics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from race_weekend.core.circuit import WeatherCondition

if TYPE_CHECKING:
    from race_weekend.core.car import Car

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

POINTS_BY_POSITION: dict[int, int] = {1: 25, 2: 18, 3: 15}
FASTEST_LAP_POINTS: int = 1

MAX_SKILL_DISCOUNT: float = 0.1
AGGRESSIVE_STYLE_THRESHOLD: float = 70.0
WET_AGGRESSION_DELTA: float = -15.0
WET_CONSISTENCY_DELTA: float = 10.0

# Rating penalties applied in rain by rated_performance().
_RAIN_PENALTIES: dict[str, float] = {
    "speed": 10.0,
    "consistency": 5.0,
    "aggression": 15.0,
}


class DrivingStyle(str, Enum):
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"
    NEUTRAL = "neutral"


def _clamp_skill(value: float) -> float:
    return min(100.0, max(0.0, value))


# ---------------------------------------------------------------------------
# Value records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Skills:
    """Driver skill ratings, each within [0, 100]."""

    speed: float = 0.0
    consistency: float = 0.0
    aggression: float = 0.0

    def __post_init__(self) -> None:
        for name in ("speed", "consistency", "aggression"):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise ValueError(
                    f"Skill '{name}' must be between 0 and 100, got {value}."
                )

    @property
    def overall(self) -> float:
        return (self.speed + self.consistency + self.aggression) / 3.0


@dataclass(frozen=True)
class SkillProfile:
    """Skill ratings with their overall level (mean of the three).

    Returned by :meth:`Driver.set_skills` for the stored skills and by
    :meth:`Driver.rated_performance` for the skills as they play out in
    given conditions.
    """

    speed: float
    consistency: float
    aggression: float
    overall: float


@dataclass(frozen=True)
class StatsSnapshot:
    """Derived season counters, rebuilt by :meth:`Driver.refresh_stats`."""

    wins: int = 0
    podiums: int = 0
    fastest_laps: int = 0
    retirements: int = 0


@dataclass(frozen=True)
class StyleChange:
    """Outcome of :meth:`Driver.adapt_style`.

    The deltas are the changes actually applied after clamping to [0, 100].
    """

    previous_style: DrivingStyle
    new_style: DrivingStyle
    aggression_delta: float
    consistency_delta: float


@dataclass(frozen=True)
class ResultAward:
    """Outcome of :meth:`Driver.award_result`.

    Attributes:
        awarded: False when the position was not a podium position and
            nothing changed.
        position: Position that was offered.
        points: Points added by this call.
        championship_points: Points total after the call.
        stats: Statistics after the call.
    """

    awarded: bool
    position: int
    points: int
    championship_points: int
    stats: StatsSnapshot


@dataclass(frozen=True)
class DriverStatistics:
    """Read-only view of a driver for reporting."""

    name: str
    championship_points: int
    stats: StatsSnapshot
    skills: Skills
    style: DrivingStyle
    cars_driven: tuple[str, ...]


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


class Driver:
    """A racing driver.

    Attributes:
        name: Driver name.
        nationality: Nationality.
        championship_points: Season points, never decreasing.
        skills: Current skill ratings.
        style: Current driving style.
        wins: Race wins.
        podiums: Podium finishes (wins included).
        fastest_laps: Fastest laps credited.
        retirements: Races not finished.
        cars_driven: Models driven, in first-driven order.
    """

    __slots__ = (
        "name",
        "nationality",
        "championship_points",
        "skills",
        "style",
        "wins",
        "podiums",
        "fastest_laps",
        "retirements",
        "cars_driven",
        "_stats",
        "_car",
    )

    def __init__(
        self,
        name: str,
        nationality: str,
        championship_points: int = 0,
        skills: Skills | None = None,
        style: DrivingStyle | str = DrivingStyle.AGGRESSIVE,
    ) -> None:
        if not name:
            raise ValueError("Driver name must not be empty.")
        if championship_points < 0:
            raise ValueError("championship_points must be >= 0.")
        self.name: str = name
        self.nationality: str = nationality
        self.championship_points: int = championship_points
        self.skills: Skills = skills if skills is not None else Skills()
        self.style: DrivingStyle = DrivingStyle(style)
        self.wins: int = 0
        self.podiums: int = 0
        self.fastest_laps: int = 0
        self.retirements: int = 0
        self.cars_driven: list[str] = []
        self._stats: StatsSnapshot = StatsSnapshot()
        self._car: Car | None = None

    def __repr__(self) -> str:
        return f"Driver(name={self.name!r}, points={self.championship_points})"

    @property
    def car(self) -> Car | None:
        """Car currently linked to this driver."""
        return self._car

    @property
    def stats(self) -> StatsSnapshot:
        return self._stats

    # -- skills ---------------------------------------------------------------

    def set_skills(
        self, speed: float, consistency: float, aggression: float
    ) -> SkillProfile:
        """Replace the skill ratings.

        Raises:
            ValueError: If any rating is outside [0, 100]; nothing changes.
        """
        self.skills = Skills(speed=speed, consistency=consistency, aggression=aggression)
        return SkillProfile(
            speed=self.skills.speed,
            consistency=self.skills.consistency,
            aggression=self.skills.aggression,
            overall=self.skills.overall,
        )

    def skill_factor(self) -> float:
        """Lap-time multiplier in [0.9, 1.0]; higher skill is faster."""
        level = (self.skills.speed + self.skills.consistency) / 200.0
        return 1.0 - level * MAX_SKILL_DISCOUNT

    def rated_performance(self, condition: WeatherCondition | str) -> SkillProfile:
        """Skill ratings as they play out in *condition*.

        Rain costs speed, consistency and aggression.  The stored skills
        are not modified.
        """
        condition = WeatherCondition(condition)
        speed = self.skills.speed
        consistency = self.skills.consistency
        aggression = self.skills.aggression
        if condition is WeatherCondition.RAIN:
            speed = max(0.0, speed - _RAIN_PENALTIES["speed"])
            consistency = max(0.0, consistency - _RAIN_PENALTIES["consistency"])
            aggression = max(0.0, aggression - _RAIN_PENALTIES["aggression"])
        return SkillProfile(
            speed=speed,
            consistency=consistency,
            aggression=aggression,
            overall=(speed + consistency + aggression) / 3.0,
        )

    def adapt_style(
        self, condition: WeatherCondition | str, track_wet: bool = False
    ) -> StyleChange:
        """Adapt the driving style to the conditions.

        In the wet the driver turns conservative, trading 15 points of
        aggression for 10 points of consistency.  In the dry the style is
        aggressive above 70 aggression and neutral otherwise.

        Args:
            condition: Current weather condition.
            track_wet: Whether the surface is wet regardless of the sky.

        Returns:
            Previous and new style plus the skill deltas applied.
        """
        condition = WeatherCondition(condition)
        previous = self.style
        aggression_delta = 0.0
        consistency_delta = 0.0

        if condition.is_wet or track_wet:
            self.style = DrivingStyle.CONSERVATIVE
            aggression_delta = WET_AGGRESSION_DELTA
            consistency_delta = WET_CONSISTENCY_DELTA
        elif self.skills.aggression > AGGRESSIVE_STYLE_THRESHOLD:
            self.style = DrivingStyle.AGGRESSIVE
        else:
            self.style = DrivingStyle.NEUTRAL

        before = self.skills
        self.skills = replace(
            before,
            aggression=_clamp_skill(before.aggression + aggression_delta),
            consistency=_clamp_skill(before.consistency + consistency_delta),
        )
        self.refresh_stats()

        if previous is not self.style:
            logger.debug(
                "%s switched style %s -> %s", self.name, previous.value, self.style.value
            )
        return StyleChange(
            previous_style=previous,
            new_style=self.style,
            aggression_delta=self.skills.aggression - before.aggression,
            consistency_delta=self.skills.consistency - before.consistency,
        )

    # -- results --------------------------------------------------------------

    def refresh_stats(self) -> StatsSnapshot:
        """Rebuild the statistics snapshot from the counters."""
        self._stats = StatsSnapshot(
            wins=self.wins,
            podiums=self.podiums,
            fastest_laps=self.fastest_laps,
            retirements=self.retirements,
        )
        return self._stats

    def award_result(self, position: int) -> ResultAward:
        """Credit a podium finish.

        Position 1 counts as a win and a podium (25 points), 2 as a podium
        (18 points), 3 as a podium (15 points).  Any other position is
        rejected and the current statistics are reported unchanged.
        """
        points = POINTS_BY_POSITION.get(position)
        if points is None:
            logger.warning(
                "%s: position %r is not a podium position; nothing awarded",
                self.name,
                position,
            )
            return ResultAward(
                awarded=False,
                position=position,
                points=0,
                championship_points=self.championship_points,
                stats=self._stats,
            )

        if position == 1:
            self.wins += 1
        self.podiums += 1
        self.championship_points += points
        return ResultAward(
            awarded=True,
            position=position,
            points=points,
            championship_points=self.championship_points,
            stats=self.refresh_stats(),
        )

    def award_fastest_lap(self) -> StatsSnapshot:
        """Credit a fastest lap, worth one point whatever the finish."""
        self.fastest_laps += 1
        self.championship_points += FASTEST_LAP_POINTS
        return self.refresh_stats()

    def record_retirement(self) -> StatsSnapshot:
        self.retirements += 1
        return self.refresh_stats()

    def statistics(self) -> DriverStatistics:
        """Read-only view for reporting; does not mutate state."""
        return DriverStatistics(
            name=self.name,
            championship_points=self.championship_points,
            stats=StatsSnapshot(
                wins=self.wins,
                podiums=self.podiums,
                fastest_laps=self.fastest_laps,
                retirements=self.retirements,
            ),
            skills=self.skills,
            style=self.style,
            cars_driven=tuple(self.cars_driven),
        )
