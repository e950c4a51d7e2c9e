"""Car performance model for the race weekend engine.

A car integrates wear and fuel lap by lap and turns its own state, its
driver's skill and the circuit conditions into a lap time::

    lap_time = base * skill_factor * wear_factor * weather_factor * tyre_factor

    base        = circuit.length_km / max_speed * 3600
    wear_factor = 1 + tyre_wear * 0.001

Wear and fuel are percentages clamped to [0, 100] by every accumulation
step.  The driver link is maintained by
:func:`race_weekend.core.assignment.assign_driver`, never set directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from race_weekend.core.circuit import Circuit
from race_weekend.core.errors import PreconditionError
from race_weekend.core.tyre import TyreCompound

if TYPE_CHECKING:
    from race_weekend.core.driver import Driver

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PIT_STOP_DURATION: float = 3.5  # seconds, estimated stationary time

TYRE_WEAR_PER_LAP: float = 0.5
ENGINE_WEAR_PER_LAP: float = 0.2
FUEL_PER_LAP: float = 0.3
WEAR_TIME_PENALTY: float = 0.001

READY_MAX_TYRE_WEAR: float = 30.0
READY_MIN_FUEL: float = 20.0
READY_MAX_ENGINE_WEAR: float = 40.0


class CarState(str, Enum):
    """Operational state of a car."""

    RACING = "racing"
    IN_PITS = "in_pits"
    RESERVE = "reserve"
    DEVELOPMENT = "development"


def _clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, value))


def _check_percent(name: str, value: float) -> None:
    if not 0.0 <= value <= 100.0:
        raise ValueError(f"{name} must be between 0 and 100, got {value}.")


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LapWear:
    """Per-lap deltas applied by :meth:`Car.apply_lap_wear`."""

    tyre_wear: float
    engine_wear: float
    fuel_used: float


@dataclass(frozen=True)
class PitStopResult:
    """Before/after view of a pit stop.

    Attributes:
        accepted: False when the stop was rejected and nothing changed.
        previous_compound: Compound fitted before the stop.
        new_compound: Compound fitted after the stop.
        previous_fuel: Fuel level before the stop.
        new_fuel: Fuel level after the stop.
        duration: Estimated stationary time in seconds (0 when rejected).
        diagnostic: Reason for a rejection, ``None`` otherwise.
    """

    accepted: bool
    previous_compound: TyreCompound
    new_compound: TyreCompound
    previous_fuel: float
    new_fuel: float
    duration: float
    diagnostic: str | None = None


@dataclass(frozen=True)
class WearSnapshot:
    """Read-only wear and fuel levels of a car."""

    tyre_wear: float
    fuel: float
    engine_wear: float
    state: CarState


# ---------------------------------------------------------------------------
# Car
# ---------------------------------------------------------------------------


class Car:
    """A race car with mutable wear, fuel and operational state.

    Attributes:
        number: Race number.
        manufacturer: Constructor / make.
        model: Chassis model name.
        compound: Tyre compound currently fitted.
        max_speed: Top speed in km/h (> 0).
        fuel: Fuel level in percent of a full tank.
        tyre_wear: Tyre wear in percent.
        engine_wear: Engine wear in percent.
        distance_km: Distance covered, never decreasing.
        state: Operational state, see :class:`CarState`.
        last_lap_time: Most recent lap time in seconds, ``None`` before the
            first lap.
    """

    __slots__ = (
        "number",
        "manufacturer",
        "model",
        "compound",
        "max_speed",
        "fuel",
        "tyre_wear",
        "engine_wear",
        "distance_km",
        "state",
        "last_lap_time",
        "circuit",
        "parts_history",
        "_driver",
    )

    def __init__(
        self,
        number: int,
        manufacturer: str,
        model: str,
        compound: TyreCompound | str,
        max_speed: float,
        fuel: float = 100.0,
    ) -> None:
        """Initialise a car in the ``reserve`` state with no driver.

        Raises:
            ValueError: If the compound is unknown, the top speed is not
                positive or the fuel level is outside [0, 100].
        """
        if max_speed <= 0.0:
            raise ValueError("max_speed must be > 0.")
        _check_percent("fuel", fuel)
        self.number: int = number
        self.manufacturer: str = manufacturer
        self.model: str = model
        self.compound: TyreCompound = TyreCompound.parse(compound)
        self.max_speed: float = float(max_speed)
        self.fuel: float = float(fuel)
        self.tyre_wear: float = 0.0
        self.engine_wear: float = 0.0
        self.distance_km: float = 0.0
        self.state: CarState = CarState.RESERVE
        self.last_lap_time: float | None = None
        self.circuit: Circuit | None = None
        self.parts_history: list[str] = []
        self._driver: Driver | None = None

    def __repr__(self) -> str:
        return (
            f"Car(number={self.number}, model={self.manufacturer} {self.model}, "
            f"state={self.state.value})"
        )

    @property
    def driver(self) -> Driver | None:
        """Driver currently linked to this car."""
        return self._driver

    def attach_circuit(self, circuit: Circuit) -> None:
        """Set the circuit used for lap-time and distance calculations."""
        self.circuit = circuit

    # -- configuration --------------------------------------------------------

    def configure_initial_wear(
        self, tyre_wear: float, engine_wear: float, fuel: float
    ) -> WearSnapshot:
        """Set starting wear and fuel levels.

        All three values are checked before any is stored.

        Raises:
            ValueError: If any value is outside [0, 100].
        """
        _check_percent("tyre_wear", tyre_wear)
        _check_percent("engine_wear", engine_wear)
        _check_percent("fuel", fuel)
        self.tyre_wear = float(tyre_wear)
        self.engine_wear = float(engine_wear)
        self.fuel = float(fuel)
        return self.wear_snapshot()

    def install_part(self, part: str) -> CarState:
        """Install a new part; the car enters the development state."""
        self.parts_history.append(part)
        self.state = CarState.DEVELOPMENT
        logger.info("Car #%d: installed %r, now in development", self.number, part)
        return self.state

    # -- factors --------------------------------------------------------------

    def tyre_factor(self) -> float:
        return self.compound.pace_factor

    def wear_factor(self) -> float:
        return 1.0 + self.tyre_wear * WEAR_TIME_PENALTY

    def base_lap_time(self) -> float:
        """Time in seconds to cover one lap at top speed.

        Raises:
            PreconditionError: If no circuit is attached.
        """
        if self.circuit is None:
            raise PreconditionError(f"Car #{self.number} has no circuit attached.")
        return (self.circuit.length_km / self.max_speed) * 3600.0

    def lap_time(self) -> float:
        """Compute the current lap time in seconds without changing state.

        Raises:
            PreconditionError: If no driver is assigned or no circuit is
                attached.
        """
        if self._driver is None:
            raise PreconditionError(f"Car #{self.number} has no driver assigned.")
        if self.circuit is None:
            raise PreconditionError(f"Car #{self.number} has no circuit attached.")
        return (
            self.base_lap_time()
            * self._driver.skill_factor()
            * self.wear_factor()
            * self.circuit.weather_factor()
            * self.tyre_factor()
        )

    # -- per-lap integration --------------------------------------------------

    def apply_lap_wear(self, avg_speed: float) -> LapWear:
        """Integrate one lap of tyre wear, engine wear and fuel burn.

        Wear is frozen while the car is in the pits; the call then returns
        zero deltas and leaves the car untouched.

        Args:
            avg_speed: Average speed over the lap in km/h (>= 0).

        Returns:
            The deltas actually applied after clamping.

        Raises:
            ValueError: If *avg_speed* is negative.
            PreconditionError: If no circuit is attached.
        """
        if avg_speed < 0.0:
            raise ValueError("avg_speed must be >= 0.")
        if self.circuit is None:
            raise PreconditionError(f"Car #{self.number} has no circuit attached.")
        if self.state is CarState.IN_PITS:
            return LapWear(tyre_wear=0.0, engine_wear=0.0, fuel_used=0.0)

        speed_factor = avg_speed / self.max_speed

        tyre_before = self.tyre_wear
        engine_before = self.engine_wear
        fuel_before = self.fuel

        self.tyre_wear = _clamp_percent(
            self.tyre_wear + TYRE_WEAR_PER_LAP * speed_factor * self.tyre_factor()
        )
        self.engine_wear = _clamp_percent(
            self.engine_wear + ENGINE_WEAR_PER_LAP * speed_factor
        )
        self.fuel = _clamp_percent(self.fuel - FUEL_PER_LAP * speed_factor)
        self.distance_km += self.circuit.length_km

        return LapWear(
            tyre_wear=self.tyre_wear - tyre_before,
            engine_wear=self.engine_wear - engine_before,
            fuel_used=fuel_before - self.fuel,
        )

    def is_race_ready(self) -> bool:
        """True when wear and fuel are within racing limits.

        A racing car must also have a driver.
        """
        has_crew = self.state is not CarState.RACING or self._driver is not None
        return (
            self.tyre_wear < READY_MAX_TYRE_WEAR
            and self.fuel > READY_MIN_FUEL
            and self.engine_wear < READY_MAX_ENGINE_WEAR
            and has_crew
        )

    # -- pit stop -------------------------------------------------------------

    def pit_stop(
        self,
        compound: TyreCompound | str,
        fuel_amount: float,
        duration: float = PIT_STOP_DURATION,
    ) -> PitStopResult:
        """Change tyres and refuel in one step.

        The car passes through ``in_pits`` and comes out ``racing``.  A car
        without a driver, or one in development, returns to the state it
        entered the pits in.

        Args:
            compound: Compound to fit; tyre wear resets to zero.
            fuel_amount: Fuel to add, capped at a full tank.
            duration: Stationary time reported for the stop.

        Returns:
            Before/after compound and fuel.  An unknown compound or a
            negative fuel amount is rejected with ``accepted=False`` and no
            state change.
        """
        try:
            new_compound = TyreCompound.parse(compound)
        except ValueError as exc:
            return self._reject_pit_stop(str(exc))
        if fuel_amount < 0.0:
            return self._reject_pit_stop("fuel_amount must be >= 0.")

        previous_state = self.state
        previous_compound = self.compound
        previous_fuel = self.fuel

        self.state = CarState.IN_PITS
        logger.debug("Car #%d entered the pits", self.number)

        self.compound = new_compound
        self.tyre_wear = 0.0
        self.fuel = min(100.0, self.fuel + fuel_amount)

        # Development is only left through reassignment.
        if previous_state is CarState.DEVELOPMENT or self._driver is None:
            self.state = previous_state
        else:
            self.state = CarState.RACING
        logger.info(
            "Car #%d pit stop: %s -> %s, fuel %.1f -> %.1f",
            self.number,
            previous_compound.value,
            new_compound.value,
            previous_fuel,
            self.fuel,
        )
        return PitStopResult(
            accepted=True,
            previous_compound=previous_compound,
            new_compound=self.compound,
            previous_fuel=previous_fuel,
            new_fuel=self.fuel,
            duration=duration,
        )

    def _reject_pit_stop(self, reason: str) -> PitStopResult:
        logger.warning("Car #%d pit stop rejected: %s", self.number, reason)
        return PitStopResult(
            accepted=False,
            previous_compound=self.compound,
            new_compound=self.compound,
            previous_fuel=self.fuel,
            new_fuel=self.fuel,
            duration=0.0,
            diagnostic=reason,
        )

    # -- reporting ------------------------------------------------------------

    def wear_snapshot(self) -> WearSnapshot:
        """Current wear and fuel levels; does not mutate state."""
        return WearSnapshot(
            tyre_wear=self.tyre_wear,
            fuel=self.fuel,
            engine_wear=self.engine_wear,
            state=self.state,
        )
