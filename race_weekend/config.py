"""Configuration loader for the race weekend engine."""

from pathlib import Path
from typing import Any

import yaml

from race_weekend.core.circuit import Circuit, CornerDifficulty, DegradationClass
from race_weekend.core.race import RaceSettings

DATA_DIR: Path = Path(__file__).resolve().parent / "data"
SETTINGS_PATH: Path = DATA_DIR / "settings.yaml"
CIRCUITS_PATH: Path = DATA_DIR / "circuits.yaml"

_SETTINGS_FIELDS: tuple[str, ...] = (
    "target_duration_s",
    "speed_ratio",
    "fuel_allowance",
    "fuel_per_lap",
    "tyre_life_laps",
    "min_entrants",
    "pit_stop_duration",
    "q2_size",
    "q3_size",
)

_INT_SETTINGS: frozenset[str] = frozenset({"min_entrants", "q2_size", "q3_size"})

_REQUIRED_CIRCUIT_FIELDS: tuple[str, ...] = ("name", "location", "length_km")


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def load_settings(path: Path | None = None) -> RaceSettings:
    """Load race planning constants from a YAML file.

    Keys missing from the file keep their :class:`RaceSettings` default.

    Args:
        path: Optional override for the settings file path.

    Returns:
        Validated :class:`RaceSettings`.

    Raises:
        FileNotFoundError: If the settings file does not exist.
        ValueError: If a key is unknown, not numeric, or out of range.
    """
    data = _read_yaml(path or SETTINGS_PATH) or {}
    section: dict[str, Any] = data.get("race") or {}

    values: dict[str, Any] = {}
    for key, val in section.items():
        if key not in _SETTINGS_FIELDS:
            raise ValueError(f"Unknown race setting '{key}'")
        if isinstance(val, bool) or not isinstance(val, (int, float)):
            raise ValueError(
                f"Race setting '{key}' must be numeric, got {type(val).__name__}"
            )
        values[key] = int(val) if key in _INT_SETTINGS else float(val)

    return RaceSettings(**values)


def load_circuits(path: Path | None = None) -> list[Circuit]:
    """Load the circuit catalogue from a YAML file.

    Each entry becomes a :class:`Circuit` with its corners and DRS zones
    appended in file order.

    Args:
        path: Optional override for the catalogue path.

    Returns:
        List of :class:`Circuit` objects.

    Raises:
        FileNotFoundError: If the catalogue does not exist.
        ValueError: If an entry is missing fields or has invalid values.
    """
    data = _read_yaml(path or CIRCUITS_PATH)
    entries: list[dict] = data["circuits"]
    circuits: list[Circuit] = []

    for idx, entry in enumerate(entries):
        # --- Validate required fields ---
        for key in _REQUIRED_CIRCUIT_FIELDS:
            if key not in entry:
                raise ValueError(
                    f"Circuit entry {idx} ({entry.get('name', '<unknown>')}) "
                    f"is missing required field '{key}'"
                )

        length = entry["length_km"]
        if isinstance(length, bool) or not isinstance(length, (int, float)):
            raise ValueError(
                f"Circuit entry {idx} ({entry['name']}): "
                f"'length_km' must be numeric, got {type(length).__name__}"
            )

        circuit = Circuit(
            name=str(entry["name"]),
            location=str(entry["location"]),
            length_km=float(length),
            degradation=DegradationClass(entry.get("degradation", "normal")),
        )
        for corner in entry.get("corners", []):
            circuit.add_corner(
                name=str(corner["name"]),
                max_speed=float(corner["max_speed"]),
                difficulty=CornerDifficulty(corner["difficulty"]),
            )
        for zone in entry.get("drs_zones", []):
            circuit.add_drs_zone(name=str(zone["name"]), length_km=float(zone["length_km"]))
        circuits.append(circuit)

    return circuits


def find_circuit(name: str, path: Path | None = None) -> Circuit:
    """Load the catalogue and return the circuit called *name*.

    Raises:
        KeyError: If no circuit has that name.
    """
    for circuit in load_circuits(path):
        if circuit.name.lower() == name.lower():
            return circuit
    raise KeyError(f"No circuit named {name!r} in the catalogue")
