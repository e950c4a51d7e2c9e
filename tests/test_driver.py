"""Tests for the driver model: skills, style, points and statistics."""

import pytest

from race_weekend.core.circuit import WeatherCondition
from race_weekend.core.driver import (
    Driver,
    DrivingStyle,
    SkillProfile,
    Skills,
    StatsSnapshot,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _sample_driver(
    speed: float = 80.0, consistency: float = 60.0, aggression: float = 75.0
) -> Driver:
    return Driver(
        name="Charles Leclerc",
        nationality="Monegasque",
        skills=Skills(speed=speed, consistency=consistency, aggression=aggression),
    )


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("speed", "consistency", "expected"),
    [(0.0, 0.0, 1.0), (100.0, 100.0, 0.9), (80.0, 60.0, 0.93)],
)
def test_skill_factor(speed: float, consistency: float, expected: float) -> None:
    driver = _sample_driver(speed=speed, consistency=consistency)
    assert driver.skill_factor() == pytest.approx(expected)


def test_skill_factor_stays_within_bounds() -> None:
    for speed in range(0, 101, 25):
        for consistency in range(0, 101, 25):
            factor = _sample_driver(speed=speed, consistency=consistency).skill_factor()
            assert 0.9 <= factor <= 1.0


def test_set_skills_reports_overall() -> None:
    driver = _sample_driver()
    profile = driver.set_skills(90.0, 60.0, 30.0)
    assert profile.overall == pytest.approx(60.0)
    assert driver.skills == Skills(speed=90.0, consistency=60.0, aggression=30.0)


def test_set_skills_rejects_out_of_range() -> None:
    driver = _sample_driver()
    before = driver.skills
    with pytest.raises(ValueError, match="aggression"):
        driver.set_skills(50.0, 50.0, 101.0)
    assert driver.skills == before


def test_rated_performance_penalises_rain_only() -> None:
    driver = _sample_driver(speed=80.0, consistency=60.0, aggression=10.0)
    dry = driver.rated_performance("dry")
    assert (dry.speed, dry.consistency, dry.aggression) == (80.0, 60.0, 10.0)

    rain = driver.rated_performance(WeatherCondition.RAIN)
    assert (rain.speed, rain.consistency, rain.aggression) == (70.0, 55.0, 0.0)
    assert rain.overall == pytest.approx(125.0 / 3.0)
    # Stored skills are unchanged.
    assert driver.skills.aggression == 10.0


def test_set_skills_and_rated_performance_share_a_record() -> None:
    driver = _sample_driver(speed=80.0, consistency=60.0, aggression=40.0)
    assert driver.rated_performance("dry") == SkillProfile(80.0, 60.0, 40.0, 60.0)
    assert driver.set_skills(80.0, 60.0, 40.0) == driver.rated_performance("dry")


# ---------------------------------------------------------------------------
# Driving style
# ---------------------------------------------------------------------------


def test_new_driver_defaults() -> None:
    driver = Driver(name="Rookie", nationality="Unknown")
    assert driver.style is DrivingStyle.AGGRESSIVE
    assert driver.championship_points == 0
    assert driver.skills == Skills()
    assert driver.car is None


def test_adapt_style_wet_turns_conservative() -> None:
    driver = _sample_driver(consistency=60.0, aggression=80.0)
    change = driver.adapt_style("wet")
    assert change.previous_style is DrivingStyle.AGGRESSIVE
    assert change.new_style is DrivingStyle.CONSERVATIVE
    assert change.aggression_delta == -15.0
    assert change.consistency_delta == 10.0
    assert driver.skills.aggression == 65.0
    assert driver.skills.consistency == 70.0


def test_adapt_style_clamps_and_reports_applied_deltas() -> None:
    driver = _sample_driver(consistency=95.0, aggression=10.0)
    change = driver.adapt_style("rain")
    assert driver.skills.consistency == 100.0
    assert driver.skills.aggression == 0.0
    assert change.consistency_delta == 5.0
    assert change.aggression_delta == -10.0


def test_adapt_style_track_wet_overrides_dry_sky() -> None:
    driver = _sample_driver(aggression=90.0)
    change = driver.adapt_style("dry", track_wet=True)
    assert change.new_style is DrivingStyle.CONSERVATIVE


@pytest.mark.parametrize(
    ("aggression", "expected"),
    [(71.0, DrivingStyle.AGGRESSIVE), (70.0, DrivingStyle.NEUTRAL), (20.0, DrivingStyle.NEUTRAL)],
)
def test_adapt_style_dry(aggression: float, expected: DrivingStyle) -> None:
    driver = _sample_driver(aggression=aggression)
    change = driver.adapt_style(WeatherCondition.DRY)
    assert change.new_style is expected
    assert change.aggression_delta == 0.0
    assert driver.skills.aggression == aggression


# ---------------------------------------------------------------------------
# Results and points
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(("position", "points"), [(1, 25), (2, 18), (3, 15)])
def test_award_result_podium_points(position: int, points: int) -> None:
    driver = _sample_driver()
    award = driver.award_result(position)
    assert award.awarded
    assert award.points == points
    assert driver.championship_points == points
    assert driver.podiums == 1
    assert driver.wins == (1 if position == 1 else 0)
    assert award.stats == driver.stats


@pytest.mark.parametrize("position", [0, 4, 10, -1])
def test_award_result_rejects_non_podium(position: int) -> None:
    driver = _sample_driver()
    driver.award_result(2)
    award = driver.award_result(position)
    assert not award.awarded
    assert award.points == 0
    assert driver.championship_points == 18
    assert driver.podiums == 1


def test_championship_points_never_decrease() -> None:
    driver = _sample_driver()
    previous = driver.championship_points
    for position in (1, 5, 3, 0, 2):
        driver.award_result(position)
        assert driver.championship_points >= previous
        previous = driver.championship_points
    assert driver.championship_points == 25 + 15 + 18


def test_award_fastest_lap_adds_one_point() -> None:
    driver = _sample_driver()
    stats = driver.award_fastest_lap()
    assert stats.fastest_laps == 1
    assert driver.championship_points == 1


def test_record_retirement() -> None:
    driver = _sample_driver()
    assert driver.record_retirement().retirements == 1


def test_refresh_stats_is_idempotent() -> None:
    driver = _sample_driver()
    driver.award_result(1)
    first = driver.refresh_stats()
    assert driver.refresh_stats() == first
    assert first == StatsSnapshot(wins=1, podiums=1, fastest_laps=0, retirements=0)


def test_statistics_is_read_only_view() -> None:
    driver = _sample_driver()
    driver.award_result(1)
    stats = driver.statistics()
    assert stats.championship_points == 25
    assert stats.stats.wins == 1
    assert stats.cars_driven == ()
    assert driver.statistics() == stats


def test_driver_rejects_negative_points() -> None:
    with pytest.raises(ValueError, match="championship_points"):
        Driver(name="A", nationality="B", championship_points=-1)
