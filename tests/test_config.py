"""Tests for YAML settings and circuit catalogue loading."""

from pathlib import Path

import pytest

from race_weekend.config import find_circuit, load_circuits, load_settings
from race_weekend.core.circuit import Circuit, DegradationClass
from race_weekend.core.race import RaceSettings

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def test_bundled_settings_match_defaults() -> None:
    """The shipped settings file restates the built-in defaults."""
    assert load_settings() == RaceSettings()


def test_partial_settings_keep_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("race:\n  min_entrants: 6\n  tyre_life_laps: 30\n", encoding="utf-8")
    settings = load_settings(path)
    assert settings.min_entrants == 6
    assert isinstance(settings.min_entrants, int)
    assert settings.tyre_life_laps == 30.0
    assert settings.fuel_allowance == RaceSettings().fuel_allowance


def test_empty_settings_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("race:\n", encoding="utf-8")
    assert load_settings(path) == RaceSettings()


def test_unknown_setting_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("race:\n  safety_car_rate: 0.2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown race setting"):
        load_settings(path)


def test_non_numeric_setting_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("race:\n  fuel_per_lap: lots\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be numeric"):
        load_settings(path)


def test_out_of_range_setting_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("race:\n  speed_ratio: 1.5\n", encoding="utf-8")
    with pytest.raises(ValueError, match="speed_ratio"):
        load_settings(path)


def test_missing_settings_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


# ---------------------------------------------------------------------------
# Circuit catalogue
# ---------------------------------------------------------------------------


def test_catalogue_loads_circuits() -> None:
    circuits = load_circuits()
    assert len(circuits) == 4
    for circuit in circuits:
        assert isinstance(circuit, Circuit)
        assert circuit.corners, f"{circuit.name} has no corners"
        assert circuit.drs_zones, f"{circuit.name} has no DRS zones"


def test_circuit_names_are_unique() -> None:
    names = [c.name for c in load_circuits()]
    assert len(set(names)) == len(names)


def test_monaco_entry() -> None:
    monaco = find_circuit("monaco")
    assert monaco.length_km == pytest.approx(3.337)
    assert monaco.degradation is DegradationClass.HIGH
    assert len(monaco.corners) == 12
    assert len(monaco.drs_zones) == 1
    assert not monaco.is_challenging()


def test_spa_is_challenging() -> None:
    assert find_circuit("Spa-Francorchamps").is_challenging()


def test_find_circuit_unknown_name() -> None:
    with pytest.raises(KeyError):
        find_circuit("Atlantis")


def test_circuit_entry_missing_length(tmp_path: Path) -> None:
    path = tmp_path / "circuits.yaml"
    path.write_text(
        "circuits:\n  - name: Nowhere\n    location: Void\n", encoding="utf-8"
    )
    with pytest.raises(ValueError, match="length_km"):
        load_circuits(path)


def test_circuit_entry_bad_difficulty(tmp_path: Path) -> None:
    path = tmp_path / "circuits.yaml"
    path.write_text(
        "circuits:\n"
        "  - name: Nowhere\n"
        "    location: Void\n"
        "    length_km: 4.0\n"
        "    corners:\n"
        "      - {name: T1, max_speed: 100, difficulty: extreme}\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        load_circuits(path)


def test_circuit_entry_defaults_to_normal_degradation(tmp_path: Path) -> None:
    path = tmp_path / "circuits.yaml"
    path.write_text(
        "circuits:\n  - name: Plain\n    location: Flat\n    length_km: 4.0\n",
        encoding="utf-8",
    )
    (circuit,) = load_circuits(path)
    assert circuit.degradation is DegradationClass.NORMAL
    assert circuit.corners == ()
