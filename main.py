"""CLI entrypoint for the race weekend simulation engine."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from race_weekend import __version__
from race_weekend.config import find_circuit, load_circuits, load_settings
from race_weekend.core.assignment import assign_driver
from race_weekend.core.car import Car
from race_weekend.core.circuit import Weather, WeatherCondition
from race_weekend.core.driver import Driver, Skills
from race_weekend.core.race import Race
from race_weekend.core.strategy import Stint, Strategy
from race_weekend.core.tyre import TyreCompound
from race_weekend.reporting import (
    classification_frame,
    qualifying_frame,
    standings_frame,
    wear_frame,
)

# -- Demo field ---------------------------------------------------------------

_ENTRANTS: list[tuple[int, str, str, str, float, tuple[float, float, float]]] = [
    (1, "Max Verstappen", "Dutch", "Red Bull", 342.0, (97, 95, 88)),
    (11, "Sergio Perez", "Mexican", "Red Bull", 342.0, (88, 84, 70)),
    (16, "Charles Leclerc", "Monegasque", "Ferrari", 340.0, (95, 86, 80)),
    (55, "Carlos Sainz", "Spanish", "Ferrari", 340.0, (90, 89, 72)),
    (44, "Lewis Hamilton", "British", "Mercedes", 338.0, (95, 93, 78)),
    (63, "George Russell", "British", "Mercedes", 338.0, (91, 88, 74)),
    (4, "Lando Norris", "British", "McLaren", 339.0, (93, 90, 75)),
    (81, "Oscar Piastri", "Australian", "McLaren", 339.0, (90, 87, 71)),
    (14, "Fernando Alonso", "Spanish", "Aston Martin", 335.0, (92, 94, 82)),
    (18, "Lance Stroll", "Canadian", "Aston Martin", 335.0, (80, 76, 65)),
    (10, "Pierre Gasly", "French", "Alpine", 334.0, (86, 83, 70)),
    (31, "Esteban Ocon", "French", "Alpine", 334.0, (85, 84, 73)),
    (23, "Alexander Albon", "Thai", "Williams", 336.0, (87, 85, 66)),
    (2, "Logan Sargeant", "American", "Williams", 336.0, (74, 70, 60)),
    (22, "Yuki Tsunoda", "Japanese", "RB", 333.0, (85, 78, 77)),
    (3, "Daniel Ricciardo", "Australian", "RB", 333.0, (84, 80, 74)),
    (77, "Valtteri Bottas", "Finnish", "Sauber", 331.0, (84, 86, 60)),
    (24, "Zhou Guanyu", "Chinese", "Sauber", 331.0, (78, 80, 58)),
    (27, "Nico Hulkenberg", "German", "Haas", 332.0, (85, 85, 68)),
    (20, "Kevin Magnussen", "Danish", "Haas", 332.0, (82, 77, 84)),
]


def _build_field() -> tuple[list[Car], list[Driver]]:
    cars: list[Car] = []
    drivers: list[Driver] = []
    for number, name, nationality, team, top_speed, (speed, consistency, aggression) in _ENTRANTS:
        car = Car(
            number=number,
            manufacturer=team,
            model=f"{team} 2024",
            compound=TyreCompound.MEDIUM,
            max_speed=top_speed,
        )
        driver = Driver(
            name=name,
            nationality=nationality,
            skills=Skills(speed=speed, consistency=consistency, aggression=aggression),
        )
        assign_driver(driver, car)
        cars.append(car)
        drivers.append(driver)
    return cars, drivers


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simulate a race weekend.")
    parser.add_argument("--circuit", default="Monaco", help="circuit from the catalogue")
    parser.add_argument(
        "--weather",
        default=WeatherCondition.DRY.value,
        choices=[c.value for c in WeatherCondition],
    )
    parser.add_argument("--verbose", action="store_true", help="log engine events")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a demonstration race weekend."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    print(f"Race Weekend Simulation Engine v{__version__}")
    print("=" * 56)

    settings = load_settings()
    try:
        circuit = find_circuit(args.circuit)
    except KeyError:
        known = ", ".join(c.name for c in load_circuits())
        parser.error(f"unknown circuit {args.circuit!r}; choose from: {known}")
    stats = circuit.statistics()
    print(f"\nCircuit : {stats.name} ({circuit.location}), {stats.length_km} km")
    print(f"Corners : {stats.corner_count}  DRS zones: {stats.drs_zone_count}")
    print(f"Level   : {stats.difficulty_level}  challenging={circuit.is_challenging()}")

    cars, drivers = _build_field()
    race = Race(f"{circuit.name} Grand Prix", circuit, date.today(), settings=settings)
    for car in cars:
        race.add_car(car)
    race.set_weather(Weather(condition=args.weather, temperature_c=24.0, humidity=55.0))
    for driver in drivers:
        driver.adapt_style(race.weather.condition)

    # -- Qualifying -----------------------------------------------------------
    print("\nQualifying")
    print("-" * 56)
    print(qualifying_frame(race.run_qualifying()).to_string(index=False))

    # -- Race -----------------------------------------------------------------
    start = race.start()
    if not start.started:
        print(f"\nRace cannot start: {'; '.join(start.problems)}")
        return 1

    leader = cars[0]
    stint_laps = max(1, start.total_laps // 5)
    race.set_strategy(
        leader,
        Strategy(
            stints=[Stint(TyreCompound.MEDIUM, stint_laps)] * 4
            + [Stint(TyreCompound.HARD, start.total_laps - 4 * stint_laps)],
            aggressiveness="medium",
            total_laps=start.total_laps,
        ),
    )
    print(f"\nRace over {start.total_laps} laps")
    race.run()

    classification = race.finalize_race()
    print("-" * 56)
    print(classification_frame(classification).to_string(index=False))
    if classification.lap_record is not None:
        record = classification.lap_record
        print(f"\nLap record: {record.time:.3f}s by {record.driver_name} ({record.date})")

    print("\nWear after the race")
    print(wear_frame(race.cars).head(5).to_string())
    print("\nStandings")
    print(standings_frame(drivers).head(10).to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
