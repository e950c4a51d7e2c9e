"""Pure reductions over a collection of cars.

Every function takes the car collection explicitly and raises
``ValueError`` when it is empty instead of dividing by zero.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from race_weekend.core.car import Car


def _require_cars(cars: Sequence[Car]) -> None:
    if len(cars) == 0:
        raise ValueError("At least one car is required to compute a fleet average.")


def average_max_speed(cars: Sequence[Car]) -> float:
    """Mean top speed of *cars* in km/h."""
    _require_cars(cars)
    return float(np.mean([car.max_speed for car in cars]))


def average_wear_factor(cars: Sequence[Car]) -> float:
    """Mean tyre-wear lap-time multiplier of *cars*."""
    _require_cars(cars)
    return float(np.mean([car.wear_factor() for car in cars]))


def average_tyre_factor(cars: Sequence[Car]) -> float:
    """Mean compound lap-time multiplier of *cars*."""
    _require_cars(cars)
    return float(np.mean([car.tyre_factor() for car in cars]))


def average_skill_factor(cars: Sequence[Car]) -> float:
    """Mean driver skill factor of *cars*.

    Raises:
        ValueError: If the collection is empty or a car has no driver.
    """
    _require_cars(cars)
    factors: list[float] = []
    for car in cars:
        if car.driver is None:
            raise ValueError(f"Car #{car.number} has no driver assigned.")
        factors.append(car.driver.skill_factor())
    return float(np.mean(factors))
