"""Core simulation modules for the race weekend engine."""

from race_weekend.core.assignment import (
    Assignment,
    assign_driver,
    can_drive,
    release_driver,
)
from race_weekend.core.car import Car, CarState, LapWear, PitStopResult, WearSnapshot
from race_weekend.core.circuit import (
    Circuit,
    Corner,
    CornerDifficulty,
    DegradationClass,
    DrsZone,
    LapRecord,
    Weather,
    WeatherCondition,
)
from race_weekend.core.driver import (
    Driver,
    DrivingStyle,
    ResultAward,
    Skills,
    StyleChange,
)
from race_weekend.core.errors import AssignmentError, PreconditionError, RaceStateError
from race_weekend.core.fleet import (
    average_max_speed,
    average_skill_factor,
    average_tyre_factor,
    average_wear_factor,
)
from race_weekend.core.race import (
    QualifyingResult,
    Race,
    RaceClassification,
    RaceSettings,
    RaceStart,
    RaceStatus,
)
from race_weekend.core.strategy import (
    DURABILITY,
    Aggressiveness,
    Stint,
    StopRecord,
    Strategy,
)
from race_weekend.core.tyre import HARD, MEDIUM, SOFT, TyreCompound

__all__ = [
    "Aggressiveness",
    "Assignment",
    "AssignmentError",
    "Car",
    "CarState",
    "Circuit",
    "Corner",
    "CornerDifficulty",
    "DURABILITY",
    "DegradationClass",
    "Driver",
    "DrivingStyle",
    "DrsZone",
    "HARD",
    "LapRecord",
    "LapWear",
    "MEDIUM",
    "PitStopResult",
    "PreconditionError",
    "QualifyingResult",
    "Race",
    "RaceClassification",
    "RaceSettings",
    "RaceStart",
    "RaceStateError",
    "RaceStatus",
    "ResultAward",
    "SOFT",
    "Skills",
    "Stint",
    "StopRecord",
    "Strategy",
    "StyleChange",
    "TyreCompound",
    "WearSnapshot",
    "Weather",
    "WeatherCondition",
    "assign_driver",
    "average_max_speed",
    "average_skill_factor",
    "average_tyre_factor",
    "average_wear_factor",
    "can_drive",
    "release_driver",
]
