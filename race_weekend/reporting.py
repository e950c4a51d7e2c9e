"""Tabular views over race session results.

Every helper reads the public accessors of the engine objects and returns a
fresh :class:`pandas.DataFrame`; none of them changes engine state.
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from race_weekend.core.car import Car
from race_weekend.core.driver import Driver
from race_weekend.core.race import LapSummary, QualifyingResult, RaceClassification


def qualifying_frame(result: QualifyingResult) -> pd.DataFrame:
    """One row per Q1 entrant with the furthest session reached.

    Columns: ``position``, ``driver``, ``car``, ``lap_time``, ``session``.
    """
    q2_cars = {entry.car_number for entry in result.q2}
    q3_cars = {entry.car_number for entry in result.q3}
    rows = []
    for position, entry in enumerate(result.q1, start=1):
        if entry.car_number in q3_cars:
            session = "Q3"
        elif entry.car_number in q2_cars:
            session = "Q2"
        else:
            session = "Q1"
        rows.append(
            {
                "position": position,
                "driver": entry.driver_name,
                "car": entry.car_number,
                "lap_time": entry.lap_time,
                "session": session,
            }
        )
    return pd.DataFrame(rows, columns=["position", "driver", "car", "lap_time", "session"])


def classification_frame(classification: RaceClassification) -> pd.DataFrame:
    """Final classification with points scored in this race.

    Columns: ``position``, ``driver``, ``car``, ``lap_time``, ``gap``,
    ``retired``, ``points``.
    """
    points = {award.driver_name: award.points for award in classification.points}
    rows = [
        {
            "position": entry.position,
            "driver": entry.driver_name,
            "car": entry.car_number,
            "lap_time": entry.lap_time,
            "gap": entry.gap,
            "retired": entry.retired,
            "points": points.get(entry.driver_name, 0),
        }
        for entry in classification.results
    ]
    return pd.DataFrame(
        rows,
        columns=["position", "driver", "car", "lap_time", "gap", "retired", "points"],
    )


def lap_history_frame(summaries: Sequence[LapSummary]) -> pd.DataFrame:
    """Long-format lap history: one row per car per lap."""
    rows = [
        {
            "lap": summary.lap,
            "car": entry.car_number,
            "driver": entry.driver_name,
            "lap_time": entry.lap_time,
            "tyre_wear_delta": entry.wear.tyre_wear,
            "engine_wear_delta": entry.wear.engine_wear,
            "fuel_used": entry.wear.fuel_used,
            "pitted": entry.pit_stop is not None and entry.pit_stop.accepted,
        }
        for summary in summaries
        for entry in summary.entries
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "lap",
            "car",
            "driver",
            "lap_time",
            "tyre_wear_delta",
            "engine_wear_delta",
            "fuel_used",
            "pitted",
        ],
    )


def wear_frame(cars: Sequence[Car]) -> pd.DataFrame:
    """Current wear and fuel of each car, indexed by car number."""
    rows = []
    for car in cars:
        snapshot = car.wear_snapshot()
        rows.append(
            {
                "car": car.number,
                "compound": car.compound.value,
                "tyre_wear": snapshot.tyre_wear,
                "engine_wear": snapshot.engine_wear,
                "fuel": snapshot.fuel,
                "state": snapshot.state.value,
                "distance_km": car.distance_km,
            }
        )
    frame = pd.DataFrame(
        rows,
        columns=[
            "car",
            "compound",
            "tyre_wear",
            "engine_wear",
            "fuel",
            "state",
            "distance_km",
        ],
    )
    return frame.set_index("car")


def standings_frame(drivers: Sequence[Driver]) -> pd.DataFrame:
    """Championship standings, highest points first."""
    rows = []
    for driver in drivers:
        stats = driver.statistics()
        rows.append(
            {
                "driver": stats.name,
                "points": stats.championship_points,
                "wins": stats.stats.wins,
                "podiums": stats.stats.podiums,
                "fastest_laps": stats.stats.fastest_laps,
                "retirements": stats.stats.retirements,
            }
        )
    frame = pd.DataFrame(
        rows,
        columns=["driver", "points", "wins", "podiums", "fastest_laps", "retirements"],
    )
    return frame.sort_values(
        ["points", "wins", "driver"], ascending=[False, False, True]
    ).reset_index(drop=True)
