"""Config loading and profile overlay tests."""

from pathlib import Path

from matchsim.config.settings import Settings, get_settings, load_config
from matchsim.models.event import EventKind

PROJECT_CONFIG = Path(__file__).resolve().parent.parent / "config"


def test_defaults_without_config():
    s = Settings.from_dict({})
    assert s.match_duration == 90
    assert (s.spacing_min, s.spacing_max) == (8, 18)
    assert s.resolution_offset == 4
    assert s.distribution == {
        EventKind.GOAL: 0.20,
        EventKind.BETTING_OPPORTUNITY: 0.45,
        EventKind.COMMENTARY: 0.35,
    }
    assert s.opening_odds == {"home": 1.85, "draw": 3.50, "away": 4.20}
    assert s.starting_balance == 1000
    assert s.multiplier_award_chance == 0.8
    assert not s.classic_mode
    assert s.betting_timeout_ms == 10_000
    assert s.logging_level == "INFO"


def test_shipped_profiles():
    default = get_settings(config_dir=PROJECT_CONFIG)
    assert default.match_duration == 90
    assert default.home_team == "Quantum Strikers"
    dev = get_settings("dev", config_dir=PROJECT_CONFIG)
    assert dev.match_duration == 45
    assert dev.logging_level == "DEBUG"
    # Keys the overlay does not mention come from default.toml
    assert dev.spacing_max == 18
    assert dev.distribution[EventKind.BETTING_OPPORTUNITY] == 0.45


def test_profile_overlay_deep_merges(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[match]\nduration_minutes = 90\nhome_team = "A"\n\n[match.distribution]\ngoal = 1\ncommentary = 1\n'
    )
    (tmp_path / "fast.toml").write_text("[match]\nduration_minutes = 30\n\n[wallet]\nclassic_mode = true\n")
    raw = load_config("fast", tmp_path)
    assert raw["match"]["duration_minutes"] == 30
    assert raw["match"]["home_team"] == "A"
    s = Settings.from_dict(raw)
    assert s.classic_mode
    assert s.distribution == {EventKind.GOAL: 1.0, EventKind.COMMENTARY: 1.0}


def test_missing_profile_or_default(tmp_path):
    assert load_config("anything", tmp_path) == {}
    (tmp_path / "default.toml").write_text("[odds]\nhome = 2.1\n")
    assert load_config("missing", tmp_path) == {"odds": {"home": 2.1}}
