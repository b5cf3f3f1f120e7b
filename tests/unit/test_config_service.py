from wctracker.config import ClockStart, Config
from wctracker.errors import ConfigValidationError
from wctracker.services.config_service import apply_config_updates


def test_no_options_changes_nothing():
    cfg = Config()

    result = apply_config_updates(cfg, None)

    assert result.changed is False
    assert result.rejected == []
    assert cfg == Config()


def test_none_values_are_skipped():
    cfg = Config()

    result = apply_config_updates(cfg, {"interval": None, "clockStart": None})

    assert result.changed is False
    assert result.rejected == []


def test_valid_values_are_applied():
    cfg = Config()

    result = apply_config_updates(cfg, {"interval": "3", "clock_start": "6:30"})

    assert result.interval_set is True
    assert result.clock_start_set is True
    assert cfg.interval == 3
    assert cfg.clock_start == ClockStart(6, 30)


def test_same_value_is_not_a_change():
    cfg = Config(interval=2)

    result = apply_config_updates(cfg, {"interval": 2, "clockStart": "4:00"})

    assert result.changed is False


def test_invalid_values_keep_previous_settings():
    cfg = Config(interval=2, clock_start=ClockStart(5, 0))

    result = apply_config_updates(
        cfg, {"interval": "-4", "clockStart": "99", "theme": "dark"}
    )

    assert result.changed is False
    assert cfg.interval == 2
    assert cfg.clock_start == ClockStart(5, 0)
    assert [error.key for error in result.rejected] == ["interval", "clockStart", "theme"]
    assert all(isinstance(error, ConfigValidationError) for error in result.rejected)
    assert "interval" in str(result.rejected[0])
    assert "theme" in str(result.rejected[2])


def test_mixed_valid_and_invalid_values():
    cfg = Config()

    result = apply_config_updates(cfg, {"interval": 5, "clockStart": "late"})

    assert result.interval_set is True
    assert result.clock_start_set is False
    assert cfg.interval == 5
    assert len(result.rejected) == 1
