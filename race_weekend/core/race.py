"""Race session orchestrator for the race weekend engine.

A race moves through four states::

    pending -> validated -> in_progress -> completed

Validation needs at least ten entrants, a circuit, weather and a date.
Starting fixes the race distance (see :func:`Race.calculate_total_laps`)
and each call to :meth:`Race.run_lap` then advances every running car by
one lap: lap time, wear, fuel, the circuit lap record and the session
fastest lap.  Planned pit stops from an attached :class:`Strategy` are
executed on their lap.  Qualifying and the final classification are
one-shot aggregations over all entrants.

Precondition failures of a single car (no driver, for instance) are
reported in the lap summary instead of aborting the session.
"""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from race_weekend.core import fleet
from race_weekend.core.car import Car, LapWear, PitStopResult
from race_weekend.core.circuit import Circuit, LapRecord, Weather
from race_weekend.core.driver import Driver
from race_weekend.core.errors import AssignmentError, PreconditionError, RaceStateError
from race_weekend.core.strategy import Strategy

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RaceSettings:
    """Planning constants for a race session.

    Attributes:
        target_duration_s: Target race duration in seconds.
        speed_ratio: Fraction of the fleet-average top speed held on
            average over a lap when planning the distance.
        fuel_allowance: Fuel units available for the race.
        fuel_per_lap: Fuel units burnt per lap on a 5 km reference lap.
        tyre_life_laps: Laps a set lasts on a 5 km reference lap at the
            normal degradation rate.
        min_entrants: Cars required to start.
        pit_stop_duration: Stationary time of a scheduled pit stop.
        q2_size: Cars advancing from Q1 to Q2.
        q3_size: Cars advancing from Q2 to Q3.
    """

    target_duration_s: float = 90 * 60
    speed_ratio: float = 0.8
    fuel_allowance: float = 110.0
    fuel_per_lap: float = 2.5
    tyre_life_laps: float = 40.0
    min_entrants: int = 10
    pit_stop_duration: float = 3.5
    q2_size: int = 15
    q3_size: int = 10

    def __post_init__(self) -> None:
        if self.target_duration_s <= 0.0:
            raise ValueError("target_duration_s must be > 0.")
        if not 0.0 < self.speed_ratio <= 1.0:
            raise ValueError("speed_ratio must be in (0, 1].")
        for name in ("fuel_allowance", "fuel_per_lap", "tyre_life_laps"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be > 0.")
        if self.min_entrants < 1:
            raise ValueError("min_entrants must be >= 1.")
        if self.pit_stop_duration < 0.0:
            raise ValueError("pit_stop_duration must be >= 0.")
        if not 0 < self.q3_size <= self.q2_size:
            raise ValueError("Qualifying cuts must satisfy 0 < q3_size <= q2_size.")


class RaceStatus(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RaceValidation:
    valid: bool
    problems: tuple[str, ...] = ()


@dataclass(frozen=True)
class RaceStart:
    """Outcome of :meth:`Race.start`.

    ``started`` is False when validation failed; ``problems`` then says
    why and the race stays where it was.
    """

    started: bool
    total_laps: int
    entrants: int
    weather: Weather | None
    problems: tuple[str, ...] = ()


@dataclass(frozen=True)
class FastestLap:
    driver_name: str
    car_number: int
    time: float
    lap: int


@dataclass(frozen=True)
class LapEntry:
    """One car's lap."""

    car_number: int
    driver_name: str
    lap_time: float
    wear: LapWear
    new_lap_record: bool
    pit_stop: PitStopResult | None = None


@dataclass(frozen=True)
class LapSummary:
    """Everything that happened on one lap of the race."""

    lap: int
    entries: tuple[LapEntry, ...]
    fastest_lap: FastestLap | None
    completed: bool
    diagnostics: tuple[str, ...] = ()


@dataclass(frozen=True)
class QualifyingEntry:
    driver_name: str
    car_number: int
    lap_time: float


@dataclass(frozen=True)
class QualifyingResult:
    """Qualifying buckets, each sorted by ascending lap time.

    Q2 holds the best cars of Q1 and Q3 the best cars of Q2.
    """

    q1: tuple[QualifyingEntry, ...]
    q2: tuple[QualifyingEntry, ...]
    q3: tuple[QualifyingEntry, ...]
    diagnostics: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassifiedEntry:
    """A line of the final classification.

    Attributes:
        position: 1-based finishing position.
        driver_name: Driver of the car.
        car_number: Race number.
        lap_time: Final lap time in seconds, ``None`` for retired cars.
        gap: Gap to the winner in seconds; ``None`` for the winner and
            for retired cars.
        retired: Whether the car retired.
    """

    position: int
    driver_name: str
    car_number: int
    lap_time: float | None
    gap: float | None
    retired: bool = False


@dataclass(frozen=True)
class PointsAward:
    driver_name: str
    position: int
    points: int


@dataclass(frozen=True)
class RaceClassification:
    results: tuple[ClassifiedEntry, ...]
    podium: tuple[ClassifiedEntry, ...]
    points: tuple[PointsAward, ...]
    lap_record: LapRecord | None
    fastest_lap: FastestLap | None
    diagnostics: tuple[str, ...] = field(default=())


# ---------------------------------------------------------------------------
# Race
# ---------------------------------------------------------------------------


class Race:
    """A single race session.

    Attributes:
        name: Event name (e.g. "Monaco Grand Prix").
        circuit: Venue, may be ``None`` until known.
        date: Race date.
        settings: Planning constants.
        weather: Weather snapshot for the session.
        total_laps: Race distance, fixed on start.
        lap: Laps completed.
        status: Lifecycle state.
    """

    def __init__(
        self,
        name: str,
        circuit: Circuit | None,
        date: datetime.date | None,
        settings: RaceSettings | None = None,
    ) -> None:
        if not name:
            raise ValueError("Race name must not be empty.")
        self.name: str = name
        self.circuit: Circuit | None = circuit
        self.date: datetime.date | None = date
        self.settings: RaceSettings = settings if settings is not None else RaceSettings()
        self.weather: Weather | None = None
        self.total_laps: int = 0
        self.lap: int = 0
        self.status: RaceStatus = RaceStatus.PENDING
        self._cars: list[Car] = []
        self._retired: list[Car] = []
        self._strategies: dict[int, Strategy] = {}
        self._qualifying: QualifyingResult | None = None
        self._classification: RaceClassification | None = None
        self._fastest_lap: FastestLap | None = None
        self._fastest_lap_driver: Driver | None = None

    def __repr__(self) -> str:
        return f"Race(name={self.name!r}, status={self.status.value}, lap={self.lap})"

    # -- read accessors -------------------------------------------------------

    @property
    def cars(self) -> tuple[Car, ...]:
        return tuple(self._cars)

    @property
    def running_cars(self) -> tuple[Car, ...]:
        return tuple(car for car in self._cars if car not in self._retired)

    @property
    def retired_cars(self) -> tuple[Car, ...]:
        return tuple(self._retired)

    @property
    def qualifying(self) -> QualifyingResult | None:
        return self._qualifying

    @property
    def results(self) -> RaceClassification | None:
        return self._classification

    @property
    def fastest_lap(self) -> FastestLap | None:
        return self._fastest_lap

    # -- setup ----------------------------------------------------------------

    def add_car(self, car: Car) -> int:
        """Enter *car* in the race.

        Returns:
            The number of entrants after the call.

        Raises:
            AssignmentError: If the car is already entered.
            RaceStateError: If the race has already started.
        """
        if self.status in (RaceStatus.IN_PROGRESS, RaceStatus.COMPLETED):
            raise RaceStateError(f"Cannot add cars to a race that is {self.status.value}.")
        if any(entrant is car for entrant in self._cars):
            raise AssignmentError(f"Car #{car.number} is already entered in {self.name}.")
        self._cars.append(car)
        return len(self._cars)

    def set_weather(self, weather: Weather) -> Weather:
        """Fix the session weather and apply it to the circuit."""
        self.weather = weather
        if self.circuit is not None:
            self.circuit.set_weather(
                weather.condition, weather.temperature_c, weather.humidity
            )
        return weather

    def set_strategy(self, car: Car, strategy: Strategy) -> None:
        """Attach a pit plan to an entered car.

        Raises:
            ValueError: If the car is not entered in this race.
        """
        if not any(entrant is car for entrant in self._cars):
            raise ValueError(f"Car #{car.number} is not entered in {self.name}.")
        self._strategies[car.number] = strategy

    # -- validation and planning ----------------------------------------------

    def _problems(self) -> list[str]:
        problems: list[str] = []
        running = len(self.running_cars)
        if running < self.settings.min_entrants:
            problems.append(
                f"{running} cars running, at least "
                f"{self.settings.min_entrants} required"
            )
        if self.circuit is None:
            problems.append("no circuit set")
        if self.weather is None:
            problems.append("no weather set")
        if self.date is None:
            problems.append("no date set")
        return problems

    def is_valid(self) -> bool:
        """True when the race meets the minimum requirements to start."""
        return not self._problems()

    def validate(self) -> RaceValidation:
        """Check the start requirements; a pending race becomes validated."""
        problems = self._problems()
        if not problems and self.status is RaceStatus.PENDING:
            self.status = RaceStatus.VALIDATED
            logger.info("%s validated with %d cars", self.name, len(self._cars))
        return RaceValidation(valid=not problems, problems=tuple(problems))

    def _require_circuit(self) -> Circuit:
        if self.circuit is None:
            raise PreconditionError(f"{self.name} has no circuit set.")
        return self.circuit

    def _attach_circuit(self) -> Circuit:
        circuit = self._require_circuit()
        for car in self._cars:
            car.attach_circuit(circuit)
        return circuit

    def calculate_total_laps(self) -> int:
        """Plan the race distance.

        The distance is the smallest of three limits::

            duration_laps = target_duration_s / lap_seconds
                lap_seconds = length_km / (avg_max_speed * speed_ratio) * 3600
            fuel_laps     = fuel_allowance / (fuel_per_lap * length_factor)
            tyre_laps     = tyre_life_laps * length_factor / degradation_factor

        rounded down, with a floor of one lap.

        Raises:
            PreconditionError: If no circuit is set.
            ValueError: If no cars are entered.
        """
        circuit = self._require_circuit()
        cars = self.running_cars
        s = self.settings

        avg_speed = fleet.average_max_speed(cars) * s.speed_ratio
        lap_seconds = circuit.length_km / avg_speed * 3600.0
        duration_laps = s.target_duration_s / lap_seconds

        length_factor = circuit.length_factor()
        fuel_laps = s.fuel_allowance / (s.fuel_per_lap * length_factor)
        tyre_laps = s.tyre_life_laps * length_factor / circuit.degradation_factor(cars)

        return max(1, math.floor(min(duration_laps, fuel_laps, tyre_laps)))

    def reference_lap_time(self) -> float:
        """Lap time of an average car of the field, in seconds.

        Raises:
            PreconditionError: If no circuit is set.
            ValueError: If no cars are entered or a car has no driver.
        """
        circuit = self._require_circuit()
        cars = self.running_cars
        base = circuit.length_km / fleet.average_max_speed(cars) * 3600.0
        return (
            base
            * fleet.average_skill_factor(cars)
            * fleet.average_tyre_factor(cars)
            * circuit.weather_factor()
            * fleet.average_wear_factor(cars)
        )

    # -- lifecycle ------------------------------------------------------------

    def start(self) -> RaceStart:
        """Validate and start the race.

        Returns:
            ``started=False`` with the problems found when the race cannot
            start; the caller may fix them and try again.

        Raises:
            RaceStateError: If the race is already running or finished.
        """
        if self.status in (RaceStatus.IN_PROGRESS, RaceStatus.COMPLETED):
            raise RaceStateError(f"{self.name} is already {self.status.value}.")
        validation = self.validate()
        if not validation.valid:
            logger.warning(
                "%s cannot start: %s", self.name, "; ".join(validation.problems)
            )
            return RaceStart(
                started=False,
                total_laps=0,
                entrants=len(self._cars),
                weather=self.weather,
                problems=validation.problems,
            )

        self._attach_circuit()
        self.total_laps = self.calculate_total_laps()
        self.lap = 0
        self.status = RaceStatus.IN_PROGRESS
        logger.info("%s started: %d laps, %d cars", self.name, self.total_laps, len(self._cars))
        return RaceStart(
            started=True,
            total_laps=self.total_laps,
            entrants=len(self._cars),
            weather=self.weather,
        )

    def run_lap(self) -> LapSummary:
        """Advance every running car by one lap.

        Raises:
            RaceStateError: If the race is not in progress.
        """
        if self.status is not RaceStatus.IN_PROGRESS:
            raise RaceStateError(
                f"Cannot run a lap while {self.name} is {self.status.value}."
            )
        circuit = self._require_circuit()
        self.lap += 1

        entries: list[LapEntry] = []
        diagnostics: list[str] = []
        for car in self.running_cars:
            driver = car.driver
            try:
                time = car.lap_time()
            except PreconditionError as exc:
                diagnostics.append(str(exc))
                continue

            car.last_lap_time = time
            avg_speed = circuit.length_km / time * 3600.0
            wear = car.apply_lap_wear(avg_speed)
            record = circuit.record_lap(time, driver.name, on=self.date)

            if self._fastest_lap is None or time < self._fastest_lap.time:
                self._fastest_lap = FastestLap(
                    driver_name=driver.name, car_number=car.number, time=time, lap=self.lap
                )
                self._fastest_lap_driver = driver

            entries.append(
                LapEntry(
                    car_number=car.number,
                    driver_name=driver.name,
                    lap_time=time,
                    wear=wear,
                    new_lap_record=record.is_new_record,
                    pit_stop=self._scheduled_pit_stop(car),
                )
            )

        if self.lap >= self.total_laps:
            self._complete()

        return LapSummary(
            lap=self.lap,
            entries=tuple(entries),
            fastest_lap=self._fastest_lap,
            completed=self.status is RaceStatus.COMPLETED,
            diagnostics=tuple(diagnostics),
        )

    def _scheduled_pit_stop(self, car: Car) -> PitStopResult | None:
        strategy = self._strategies.get(car.number)
        if strategy is None:
            return None
        # Zero-lap stints put several stops on the same lap; run them all.
        result: PitStopResult | None = None
        planned = strategy.next_stop()
        while planned is not None and planned.lap <= self.lap:
            result = car.pit_stop(
                planned.compound,
                100.0 - car.fuel,
                duration=self.settings.pit_stop_duration,
            )
            if not result.accepted:
                break
            strategy.record_stop(result.duration)
            planned = strategy.next_stop()
        return result

    def _complete(self) -> None:
        self.status = RaceStatus.COMPLETED
        if self._fastest_lap_driver is not None:
            self._fastest_lap_driver.award_fastest_lap()
        logger.info("%s completed after %d laps", self.name, self.lap)

    def run(self) -> list[LapSummary]:
        """Run laps until the race is completed.

        Starts the race first if needed.

        Raises:
            RaceStateError: If the race cannot start or is already over.
        """
        if self.status in (RaceStatus.PENDING, RaceStatus.VALIDATED):
            outcome = self.start()
            if not outcome.started:
                raise RaceStateError(
                    f"{self.name} cannot start: {'; '.join(outcome.problems)}"
                )
        summaries: list[LapSummary] = []
        while self.status is RaceStatus.IN_PROGRESS:
            summaries.append(self.run_lap())
        return summaries

    def retire_car(self, car: Car) -> None:
        """Withdraw a running car; it is classified behind all finishers.

        Raises:
            ValueError: If the car is not entered or already retired.
        """
        if not any(entrant is car for entrant in self._cars):
            raise ValueError(f"Car #{car.number} is not entered in {self.name}.")
        if car in self._retired:
            raise ValueError(f"Car #{car.number} has already retired.")
        self._retired.append(car)
        if car.driver is not None:
            car.driver.record_retirement()
        logger.info("Car #%d retired from %s on lap %d", car.number, self.name, self.lap)

    # -- sessions -------------------------------------------------------------

    def run_qualifying(self) -> QualifyingResult:
        """Time one lap per car and split the field into Q1, Q2 and Q3.

        Q1 lists every timed car by ascending lap time, Q2 keeps the best
        ``q2_size`` of Q1 and Q3 the best ``q3_size`` of Q2.

        Raises:
            PreconditionError: If no circuit is set.
        """
        self._attach_circuit()
        timed: list[QualifyingEntry] = []
        diagnostics: list[str] = []
        for car in self.running_cars:
            driver = car.driver
            try:
                time = car.lap_time()
            except PreconditionError as exc:
                diagnostics.append(str(exc))
                continue
            timed.append(
                QualifyingEntry(driver_name=driver.name, car_number=car.number, lap_time=time)
            )

        q1 = tuple(sorted(timed, key=lambda entry: entry.lap_time))
        q2 = q1[: self.settings.q2_size]
        q3 = q2[: self.settings.q3_size]
        self._qualifying = QualifyingResult(
            q1=q1, q2=q2, q3=q3, diagnostics=tuple(diagnostics)
        )
        return self._qualifying

    def starting_grid(self) -> list[str]:
        """Driver names in grid order: Q3, then the rest of Q2, then Q1."""
        if self._qualifying is None:
            return []
        grid: list[str] = []
        for bucket in (self._qualifying.q3, self._qualifying.q2, self._qualifying.q1):
            for entry in bucket:
                if entry.driver_name not in grid:
                    grid.append(entry.driver_name)
        return grid

    def finalize_race(self) -> RaceClassification:
        """Classify the field on final lap times and award podium points.

        Cars that never ran a lap are timed on the spot.  Positions 1-3
        receive 25, 18 and 15 points; everyone else is left untouched.
        Retired cars are listed after the finishers.  Calling this again
        returns the stored classification without awarding anything.

        Raises:
            PreconditionError: If no circuit is set.
        """
        if self._classification is not None:
            return self._classification
        circuit = self._attach_circuit()

        timed: list[tuple[float, Car, Driver]] = []
        diagnostics: list[str] = []
        for car in self.running_cars:
            driver = car.driver
            if driver is None:
                diagnostics.append(f"Car #{car.number} has no driver assigned.")
                continue
            time = car.last_lap_time
            if time is None:
                time = car.lap_time()
                car.last_lap_time = time
            timed.append((time, car, driver))
        timed.sort(key=lambda item: item[0])

        results: list[ClassifiedEntry] = []
        leader_time = timed[0][0] if timed else 0.0
        for position, (time, car, driver) in enumerate(timed, start=1):
            results.append(
                ClassifiedEntry(
                    position=position,
                    driver_name=driver.name,
                    car_number=car.number,
                    lap_time=time,
                    gap=None if position == 1 else time - leader_time,
                )
            )
        for car in self._retired:
            results.append(
                ClassifiedEntry(
                    position=len(results) + 1,
                    driver_name=car.driver.name if car.driver is not None else "",
                    car_number=car.number,
                    lap_time=None,
                    gap=None,
                    retired=True,
                )
            )

        podium = tuple(entry for entry in results[:3] if not entry.retired)
        points: list[PointsAward] = []
        for entry, (_, _, driver) in zip(podium, timed):
            award = driver.award_result(entry.position)
            points.append(
                PointsAward(
                    driver_name=entry.driver_name,
                    position=entry.position,
                    points=award.points,
                )
            )

        self._classification = RaceClassification(
            results=tuple(results),
            podium=podium,
            points=tuple(points),
            lap_record=circuit.lap_record,
            fastest_lap=self._fastest_lap,
            diagnostics=tuple(diagnostics),
        )
        logger.info(
            "%s classified: %s",
            self.name,
            ", ".join(f"P{e.position} {e.driver_name}" for e in podium),
        )
        return self._classification
