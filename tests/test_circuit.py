"""Tests for the circuit model: corners, DRS zones, weather, lap record."""

from datetime import date

import pytest

from race_weekend.core.car import Car
from race_weekend.core.circuit import (
    Circuit,
    CornerDifficulty,
    DegradationClass,
    Weather,
    WeatherCondition,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_circuit(
    length_km: float = 5.0, degradation: DegradationClass = DegradationClass.NORMAL
) -> Circuit:
    return Circuit(
        name="Test Circuit", location="Testville", length_km=length_km, degradation=degradation
    )


def _challenging_circuit(corners: int = 11) -> Circuit:
    circuit = _sample_circuit(length_km=5.5)
    for i in range(corners):
        circuit.add_corner(f"T{i + 1}", 120.0, "high")
    circuit.add_drs_zone("Main Straight", 0.8)
    circuit.add_drs_zone("Back Straight", 0.5)
    return circuit


def _sample_car(tyre_wear: float = 0.0) -> Car:
    car = Car(number=7, manufacturer="Test", model="T1", compound="medium", max_speed=320.0)
    car.configure_initial_wear(tyre_wear=tyre_wear, engine_wear=0.0, fuel=100.0)
    return car


# ---------------------------------------------------------------------------
# Construction and setup
# ---------------------------------------------------------------------------


def test_circuit_rejects_non_positive_length() -> None:
    with pytest.raises(ValueError, match="length_km"):
        Circuit(name="Nowhere", location="Void", length_km=0.0)


def test_add_corner_numbers_corners_in_order() -> None:
    circuit = _sample_circuit()
    first = circuit.add_corner("La Source", 70.0, "high")
    second = circuit.add_corner("Eau Rouge", 300.0, CornerDifficulty.MEDIUM)
    assert first.number == 1
    assert second.number == 2
    assert [c.name for c in circuit.corners] == ["La Source", "Eau Rouge"]
    assert second.corner.difficulty is CornerDifficulty.MEDIUM


def test_add_corner_rejects_unknown_difficulty() -> None:
    circuit = _sample_circuit()
    with pytest.raises(ValueError, match="difficulty"):
        circuit.add_corner("Mystery", 100.0, "extreme")
    assert circuit.corners == ()


def test_add_drs_zone_rejects_non_positive_length() -> None:
    circuit = _sample_circuit()
    with pytest.raises(ValueError, match="positive"):
        circuit.add_drs_zone("Nowhere", 0.0)
    zone = circuit.add_drs_zone("Main Straight", 0.8)
    assert zone.number == 1
    assert len(circuit.drs_zones) == 1


# ---------------------------------------------------------------------------
# Difficulty
# ---------------------------------------------------------------------------


def test_difficulty_factor_is_mean_corner_score() -> None:
    circuit = _sample_circuit()
    assert circuit.difficulty_factor() == 0.0
    circuit.add_corner("A", 100.0, "low")
    circuit.add_corner("B", 100.0, "medium")
    circuit.add_corner("C", 100.0, "high")
    circuit.add_corner("D", 100.0, "high")
    assert circuit.difficulty_factor() == pytest.approx(9 / 4)


def test_challenging_requires_all_conditions() -> None:
    assert _challenging_circuit(corners=11).is_challenging()
    # Exactly ten corners is not enough.
    assert not _challenging_circuit(corners=10).is_challenging()

    short = Circuit(name="Short", location="X", length_km=5.0)
    for i in range(12):
        short.add_corner(f"T{i}", 100.0, "high")
    short.add_drs_zone("A", 0.5)
    short.add_drs_zone("B", 0.5)
    assert not short.is_challenging(), "length must exceed 5 km"


def test_challenging_requires_high_average_difficulty() -> None:
    circuit = _sample_circuit(length_km=6.0)
    for i in range(12):
        circuit.add_corner(f"T{i}", 100.0, "medium")
    circuit.add_drs_zone("A", 0.5)
    circuit.add_drs_zone("B", 0.5)
    assert not circuit.is_challenging()


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------


def test_weather_factor_per_condition() -> None:
    circuit = _sample_circuit()
    assert circuit.weather_factor() == 1.00
    circuit.set_weather("wet", 18.0, 80.0)
    assert circuit.weather_factor() == pytest.approx(1.10)
    circuit.set_weather(WeatherCondition.RAIN, 15.0, 95.0)
    assert circuit.weather_factor() == pytest.approx(1.15)
    circuit.set_weather("mixed", 20.0, 70.0)
    assert circuit.weather_factor() == pytest.approx(1.10)


def test_set_weather_reports_visibility() -> None:
    circuit = _sample_circuit()
    report = circuit.set_weather("rain", 18.0, 85.0)
    assert report.visibility == "low"
    assert report.condition is WeatherCondition.RAIN
    assert circuit.set_weather("dry", 25.0, 40.0).visibility == "normal"


@pytest.mark.parametrize(
    ("condition", "temperature", "humidity"),
    [("snow", 20.0, 50.0), ("dry", -21.0, 50.0), ("dry", 61.0, 50.0), ("dry", 20.0, 101.0)],
)
def test_set_weather_rejects_out_of_range_and_keeps_previous(
    condition: str, temperature: float, humidity: float
) -> None:
    circuit = _sample_circuit()
    circuit.set_weather("wet", 18.0, 80.0)
    with pytest.raises(ValueError):
        circuit.set_weather(condition, temperature, humidity)
    assert circuit.weather == Weather(WeatherCondition.WET, 18.0, 80.0)


def test_default_weather_is_dry() -> None:
    weather = _sample_circuit().weather
    assert weather.condition is WeatherCondition.DRY
    assert weather.temperature_c == 25.0
    assert weather.humidity == 50.0


# ---------------------------------------------------------------------------
# Degradation
# ---------------------------------------------------------------------------


def test_degradation_factor_scales_fleet_wear_by_venue() -> None:
    cars = [_sample_car(tyre_wear=0.0), _sample_car(tyre_wear=100.0)]
    # Mean wear factor: (1.0 + 1.1) / 2 = 1.05
    assert _sample_circuit().degradation_factor(cars) == pytest.approx(1.05)
    high = _sample_circuit(degradation=DegradationClass.HIGH)
    assert high.degradation_factor(cars) == pytest.approx(1.05 * 1.2)
    low = _sample_circuit(degradation=DegradationClass.LOW)
    assert low.degradation_factor(cars) == pytest.approx(1.05 * 0.8)


def test_degradation_factor_rejects_empty_fleet() -> None:
    with pytest.raises(ValueError, match="At least one car"):
        _sample_circuit().degradation_factor([])


# ---------------------------------------------------------------------------
# Lap record
# ---------------------------------------------------------------------------


def test_first_lap_sets_record() -> None:
    circuit = _sample_circuit()
    update = circuit.record_lap(71.553, "Max Verstappen", on=date(2024, 5, 26))
    assert update.is_new_record
    assert circuit.lap_record is not None
    assert circuit.lap_record.time == 71.553
    assert circuit.lap_record.driver_name == "Max Verstappen"
    assert circuit.lap_record.date == "2024-05-26"


def test_record_lap_ignores_non_improving_times() -> None:
    circuit = _sample_circuit()
    circuit.record_lap(70.0, "A", on=date(2024, 5, 26))
    before = circuit.lap_record

    for time in (70.0, 70.5, 99.0, 70.0):
        update = circuit.record_lap(time, "B", on=date(2024, 5, 27))
        assert not update.is_new_record
        assert circuit.lap_record == before


def test_record_lap_replaces_on_strict_improvement() -> None:
    circuit = _sample_circuit()
    circuit.record_lap(70.0, "A")
    update = circuit.record_lap(69.999, "B")
    assert update.is_new_record
    assert circuit.lap_record is not None
    assert circuit.lap_record.driver_name == "B"


def test_record_lap_rejects_non_positive_time() -> None:
    with pytest.raises(ValueError):
        _sample_circuit().record_lap(0.0, "A")


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


def test_statistics_summarise_without_mutation() -> None:
    circuit = _challenging_circuit()
    circuit.record_lap(80.0, "A")
    stats = circuit.statistics()
    assert stats.corner_count == 11
    assert stats.drs_zone_count == 2
    assert stats.difficulty_level == "high"
    assert stats.lap_record == circuit.lap_record
    assert circuit.statistics() == stats


def test_statistics_difficulty_levels() -> None:
    circuit = _sample_circuit()
    circuit.add_corner("A", 100.0, "low")
    assert circuit.statistics().difficulty_level == "low"
    circuit.add_corner("B", 100.0, "high")
    assert circuit.statistics().difficulty_level == "medium"
