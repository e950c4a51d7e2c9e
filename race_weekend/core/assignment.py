"""Car/driver pairing for the race weekend engine.

The link between a :class:`Car` and a :class:`Driver` is bidirectional.
Both sides are only ever written here, together, so neither entity can
end up pointing at a partner that does not point back.  ``Car._driver``
and ``Driver._car`` are package-private: the entities expose them as
read-only ``driver`` / ``car`` properties and this module is the single
writer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from race_weekend.core.car import Car, CarState
from race_weekend.core.driver import Driver
from race_weekend.core.errors import AssignmentError

logger = logging.getLogger(__name__)

# Skill requirements per car state.
DEVELOPMENT_MIN_CONSISTENCY: float = 80.0
PIT_HANDOVER_MIN_SPEED: float = 70.0
PIT_HANDOVER_MIN_CONSISTENCY: float = 70.0

_AVAILABLE_STATES: frozenset[CarState] = frozenset(
    {CarState.RESERVE, CarState.IN_PITS, CarState.DEVELOPMENT}
)


@dataclass(frozen=True)
class Assignment:
    """Confirmation of a new car/driver link."""

    driver_name: str
    car_label: str
    car_number: int
    state: CarState


def can_drive(driver: Driver, car: Car) -> bool:
    """Check whether *driver* may take over *car*.

    The car must be free (no driver) and parked in reserve, in the pits or
    in development.  A development car needs a consistent driver
    (consistency >= 80); taking over a car in the pits needs speed and
    consistency of at least 70.  Reserve cars accept anyone.
    """
    if car.driver is not None or car.state not in _AVAILABLE_STATES:
        return False
    skills = driver.skills
    if car.state is CarState.DEVELOPMENT:
        return skills.consistency >= DEVELOPMENT_MIN_CONSISTENCY
    if car.state is CarState.IN_PITS:
        return (
            skills.speed >= PIT_HANDOVER_MIN_SPEED
            and skills.consistency >= PIT_HANDOVER_MIN_CONSISTENCY
        )
    return True


def assign_driver(driver: Driver, car: Car) -> Assignment:
    """Link *driver* and *car*; the car goes racing.

    Raises:
        AssignmentError: If the driver already has a car, or the car is
            taken, unavailable or beyond the driver's skills.
    """
    if driver.car is not None:
        raise AssignmentError(
            f"Driver '{driver.name}' already drives car #{driver.car.number}."
        )
    if not can_drive(driver, car):
        raise AssignmentError(
            f"Driver '{driver.name}' cannot take car #{car.number} "
            f"(state={car.state.value}, driver={car.driver!r})."
        )

    # Private on both entities; only this module writes the link.
    driver._car = car
    car._driver = driver
    car.state = CarState.RACING
    if car.model not in driver.cars_driven:
        driver.cars_driven.append(car.model)

    logger.info("%s assigned to car #%d", driver.name, car.number)
    return Assignment(
        driver_name=driver.name,
        car_label=f"{car.manufacturer} {car.model}",
        car_number=car.number,
        state=car.state,
    )


def release_driver(car: Car) -> Driver | None:
    """Unlink *car* from its driver and park it in reserve.

    Returns:
        The driver that was released, ``None`` if the car had none.
    """
    driver = car.driver
    if driver is not None:
        driver._car = None
        car._driver = None
        logger.info("%s released from car #%d", driver.name, car.number)
    car.state = CarState.RESERVE
    return driver
