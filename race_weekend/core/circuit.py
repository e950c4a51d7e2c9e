"""Circuit model for the race weekend engine.

A circuit holds the static facts of a venue (length, corners, DRS zones),
the current weather and the all-time lap record.  Corners and DRS zones
are appended during setup; weather and the lap record mutate during a
session through validated setters only.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

from race_weekend.core import fleet

if TYPE_CHECKING:
    from race_weekend.core.car import Car

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CornerDifficulty(str, Enum):
    """Difficulty grade of a single corner."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def score(self) -> int:
        return {"low": 1, "medium": 2, "high": 3}[self.value]


class WeatherCondition(str, Enum):
    """Weather condition types."""

    DRY = "dry"
    MIXED = "mixed"
    WET = "wet"
    RAIN = "rain"

    @property
    def is_wet(self) -> bool:
        return self in (WeatherCondition.WET, WeatherCondition.RAIN)


class DegradationClass(str, Enum):
    """How hard a venue is on tyres, relative to a normal circuit."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


_WEATHER_FACTORS: dict[WeatherCondition, float] = {
    WeatherCondition.DRY: 1.00,
    WeatherCondition.MIXED: 1.10,
    WeatherCondition.WET: 1.10,
    WeatherCondition.RAIN: 1.15,
}

_DEGRADATION_MULTIPLIERS: dict[DegradationClass, float] = {
    DegradationClass.LOW: 0.8,
    DegradationClass.NORMAL: 1.0,
    DegradationClass.HIGH: 1.2,
}

# Reference lap length used to scale per-lap consumption figures.
REFERENCE_LENGTH_KM: float = 5.0

CHALLENGING_MIN_CORNERS: int = 10
CHALLENGING_MIN_DRS_ZONES: int = 2
CHALLENGING_MIN_LENGTH_KM: float = 5.0
CHALLENGING_MIN_DIFFICULTY: float = 2.5

# ---------------------------------------------------------------------------
# Value records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Corner:
    """A single corner.

    Attributes:
        name: Corner name (e.g. "Loews Hairpin").
        max_speed: Maximum speed through the corner in km/h (> 0).
        difficulty: Difficulty grade.
    """

    name: str
    max_speed: float
    difficulty: CornerDifficulty

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Corner name must not be empty.")
        if self.max_speed <= 0.0:
            raise ValueError("Corner max_speed must be > 0.")
        if not isinstance(self.difficulty, CornerDifficulty):
            try:
                object.__setattr__(self, "difficulty", CornerDifficulty(self.difficulty))
            except ValueError:
                raise ValueError(
                    "Corner difficulty must be 'low', 'medium' or 'high'."
                ) from None


@dataclass(frozen=True)
class DrsZone:
    """A DRS activation zone.

    Attributes:
        name: Zone name.
        length_km: Zone length in kilometres (> 0).
    """

    name: str
    length_km: float

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("DRS zone name must not be empty.")
        if self.length_km <= 0.0:
            raise ValueError("DRS zone length must be a positive number.")


@dataclass(frozen=True)
class Weather:
    """Weather state of a circuit.

    Attributes:
        condition: Current condition.
        temperature_c: Air temperature in Celsius, within [-20, 60].
        humidity: Relative humidity in percent, within [0, 100].
    """

    condition: WeatherCondition = WeatherCondition.DRY
    temperature_c: float = 25.0
    humidity: float = 50.0

    def __post_init__(self) -> None:
        if not isinstance(self.condition, WeatherCondition):
            try:
                object.__setattr__(self, "condition", WeatherCondition(self.condition))
            except ValueError:
                valid = ", ".join(c.value for c in WeatherCondition)
                raise ValueError(
                    f"Weather condition must be one of: {valid}."
                ) from None
        if not -20.0 <= self.temperature_c <= 60.0:
            raise ValueError("temperature_c must be between -20 and 60.")
        if not 0.0 <= self.humidity <= 100.0:
            raise ValueError("humidity must be between 0 and 100.")

    @property
    def visibility(self) -> str:
        return "low" if self.condition is WeatherCondition.RAIN else "normal"


@dataclass(frozen=True)
class LapRecord:
    """Fastest lap ever set at a circuit."""

    time: float
    driver_name: str
    date: str


@dataclass(frozen=True)
class LapRecordUpdate:
    """Outcome of offering a lap to the record book."""

    time: float
    driver_name: str
    is_new_record: bool


@dataclass(frozen=True)
class NumberedCorner:
    corner: Corner
    number: int


@dataclass(frozen=True)
class NumberedDrsZone:
    zone: DrsZone
    number: int


@dataclass(frozen=True)
class WeatherReport:
    """Weather applied to a circuit, plus the derived visibility."""

    condition: WeatherCondition
    temperature_c: float
    humidity: float
    visibility: str


@dataclass(frozen=True)
class CircuitStatistics:
    """Read-only summary of a circuit for reporting."""

    name: str
    corner_count: int
    drs_zone_count: int
    length_km: float
    lap_record: LapRecord | None
    weather: Weather
    difficulty_level: str


# ---------------------------------------------------------------------------
# Circuit
# ---------------------------------------------------------------------------


class Circuit:
    """A race venue.

    Attributes:
        name: Circuit name.
        location: City or region.
        length_km: Lap length in kilometres (> 0).
        degradation: Tyre degradation class of the venue.
    """

    __slots__ = (
        "name",
        "location",
        "length_km",
        "degradation",
        "_corners",
        "_drs_zones",
        "_weather",
        "_lap_record",
    )

    def __init__(
        self,
        name: str,
        location: str,
        length_km: float,
        degradation: DegradationClass | str = DegradationClass.NORMAL,
        weather: Weather | None = None,
    ) -> None:
        if not name:
            raise ValueError("Circuit name must not be empty.")
        if length_km <= 0.0:
            raise ValueError("length_km must be > 0.")
        self.name: str = name
        self.location: str = location
        self.length_km: float = float(length_km)
        self.degradation: DegradationClass = DegradationClass(degradation)
        self._corners: list[Corner] = []
        self._drs_zones: list[DrsZone] = []
        self._weather: Weather = weather if weather is not None else Weather()
        self._lap_record: LapRecord | None = None

    def __repr__(self) -> str:
        return f"Circuit(name={self.name!r}, length_km={self.length_km})"

    # -- read accessors -------------------------------------------------------

    @property
    def corners(self) -> tuple[Corner, ...]:
        return tuple(self._corners)

    @property
    def drs_zones(self) -> tuple[DrsZone, ...]:
        return tuple(self._drs_zones)

    @property
    def weather(self) -> Weather:
        return self._weather

    @property
    def lap_record(self) -> LapRecord | None:
        return self._lap_record

    # -- setup ----------------------------------------------------------------

    def add_corner(
        self, name: str, max_speed: float, difficulty: CornerDifficulty | str
    ) -> NumberedCorner:
        """Append a corner to the lap.

        Raises:
            ValueError: If the difficulty is not low/medium/high or the
                speed is not positive.
        """
        corner = Corner(name=name, max_speed=max_speed, difficulty=difficulty)
        self._corners.append(corner)
        return NumberedCorner(corner=corner, number=len(self._corners))

    def add_drs_zone(self, name: str, length_km: float) -> NumberedDrsZone:
        """Append a DRS zone.

        Raises:
            ValueError: If the length is not positive.
        """
        zone = DrsZone(name=name, length_km=length_km)
        self._drs_zones.append(zone)
        return NumberedDrsZone(zone=zone, number=len(self._drs_zones))

    def set_weather(
        self,
        condition: WeatherCondition | str,
        temperature_c: float,
        humidity: float,
    ) -> WeatherReport:
        """Replace the current weather.

        The new values are validated as a whole before anything is stored,
        so a rejected call leaves the previous weather in place.

        Raises:
            ValueError: If any field is outside its declared range.
        """
        weather = Weather(
            condition=condition, temperature_c=temperature_c, humidity=humidity
        )
        self._weather = weather
        logger.debug("Weather at %s set to %s", self.name, weather)
        return WeatherReport(
            condition=weather.condition,
            temperature_c=weather.temperature_c,
            humidity=weather.humidity,
            visibility=weather.visibility,
        )

    # -- derived factors ------------------------------------------------------

    def difficulty_factor(self) -> float:
        """Mean corner difficulty score (low 1, medium 2, high 3).

        Returns 0.0 for a circuit without corners.
        """
        if not self._corners:
            return 0.0
        total = sum(corner.difficulty.score for corner in self._corners)
        return total / len(self._corners)

    def is_challenging(self) -> bool:
        """True for long, twisty circuits with at least two DRS zones."""
        return (
            len(self._corners) > CHALLENGING_MIN_CORNERS
            and len(self._drs_zones) >= CHALLENGING_MIN_DRS_ZONES
            and self.length_km > CHALLENGING_MIN_LENGTH_KM
            and self.difficulty_factor() >= CHALLENGING_MIN_DIFFICULTY
        )

    def weather_factor(self) -> float:
        """Lap-time multiplier for the current weather condition."""
        return _WEATHER_FACTORS[self._weather.condition]

    def length_factor(self) -> float:
        """Lap length relative to a 5 km reference lap."""
        return self.length_km / REFERENCE_LENGTH_KM

    def degradation_factor(self, cars: Sequence[Car]) -> float:
        """Venue degradation multiplier applied to the fleet-average wear.

        Only used when planning the race distance; live wear is integrated
        per car in :meth:`Car.apply_lap_wear`.

        Raises:
            ValueError: If *cars* is empty.
        """
        multiplier = _DEGRADATION_MULTIPLIERS[self.degradation]
        return fleet.average_wear_factor(cars) * multiplier

    # -- lap record -----------------------------------------------------------

    def record_lap(
        self, time: float, driver_name: str, on: date | None = None
    ) -> LapRecordUpdate:
        """Offer a lap to the record book.

        The record is replaced only if none exists yet or *time* is
        strictly lower than the stored one.  Call once per evaluated lap.

        Args:
            time: Lap time in seconds (> 0).
            driver_name: Driver who set the lap.
            on: Date of the lap, defaults to today.

        Returns:
            Whether the lap became the new record.

        Raises:
            ValueError: If *time* is not positive.
        """
        if time <= 0.0:
            raise ValueError("Lap time must be > 0.")
        is_new = self._lap_record is None or time < self._lap_record.time
        if is_new:
            when = on if on is not None else date.today()
            self._lap_record = LapRecord(
                time=time, driver_name=driver_name, date=when.isoformat()
            )
            logger.info(
                "New lap record at %s: %.3fs by %s", self.name, time, driver_name
            )
        return LapRecordUpdate(time=time, driver_name=driver_name, is_new_record=is_new)

    # -- reporting ------------------------------------------------------------

    def statistics(self) -> CircuitStatistics:
        """Snapshot of the circuit for reporting; does not mutate state."""
        difficulty = self.difficulty_factor()
        if difficulty >= 2.5:
            level = "high"
        elif difficulty >= 1.5:
            level = "medium"
        else:
            level = "low"
        return CircuitStatistics(
            name=self.name,
            corner_count=len(self._corners),
            drs_zone_count=len(self._drs_zones),
            length_km=self.length_km,
            lap_record=self._lap_record,
            weather=self._weather,
            difficulty_level=level,
        )
