"""
SETTINGS AND COMMAND LINE TESTS
"""

import logging

import pytest
from pydantic import ValidationError

from lane_shooter.app import build_settings, frame_time, parse_args, run
from lane_shooter.exceptions import SettingsError
from lane_shooter.settings import GameSettings, LaneSettings
from lane_shooter.utils import configure_logging, logger


class TestGameSettings:
    def test_defaults(self):
        settings = GameSettings()
        assert settings.launcher.position == (400, 500)
        assert settings.launcher.floor_y == 515
        assert settings.lanes.count * settings.lanes.width == settings.window.width

    def test_from_dict_overrides(self):
        settings = GameSettings.from_dict(
            {"lanes": {"count": 8, "width": 100}, "shots": {"cooldown_ms": 500}}
        )
        assert settings.lanes.count == 8
        assert settings.lanes.width == 100
        assert settings.lanes.spawn_cooldown_ms == 1000
        assert settings.shots.cooldown_ms == 500
        assert settings.shots.speed == 150.0

    def test_to_dict_sections(self):
        data = GameSettings().to_dict()
        assert set(data) == {"window", "launcher", "shots", "lanes", "enemies"}
        assert data["enemies"] == {"min_speed": 10.0, "max_speed": 50.0, "reward": 10}
        assert GameSettings.from_dict(data) == GameSettings()

    def test_settings_are_frozen(self):
        settings = GameSettings()
        with pytest.raises(ValidationError):
            settings.lanes.count = 3

    @pytest.mark.parametrize(
        "data",
        [
            {"audio": {"enable": True}},
            {"lanes": {"colour": "red"}},
            {"lanes": {"count": 0}},
            {"lanes": {"width": -5}},
            {"lanes": {"spawn_chance": 1.5}},
            {"lanes": {"count": "many"}},
            {"shots": {"cooldown_ms": -1}},
            {"shots": {"speed": 0}},
            {"enemies": {"min_speed": 60}},
            {"window": {"fps": 0}},
        ],
    )
    def test_invalid_settings(self, data):
        with pytest.raises(SettingsError):
            GameSettings.from_dict(data)

    def test_settings_error_is_value_error(self):
        with pytest.raises(ValueError):
            GameSettings.from_dict({"lanes": {"spawn_chance": -0.1}})

    def test_sections_validate_on_construction(self):
        with pytest.raises(ValueError):
            LaneSettings(spawn_chance=-0.1)


class TestCommandLine:
    def test_defaults(self):
        args = parse_args([])
        assert args.fps == 60
        assert args.seed is None
        assert args.log_level == "INFO"
        assert build_settings(args) == GameSettings()

    def test_lanes_span_window(self):
        settings = build_settings(parse_args(["--lanes", "8", "--fps", "30"]))
        assert settings.lanes.count == 8
        assert settings.lanes.width == 100
        assert settings.window.fps == 30

    @pytest.mark.parametrize(
        "argv",
        [
            ["--lanes", "0"],
            ["--lanes", "-2"],
            ["--lanes", "two"],
            ["--fps", "0"],
            ["--log-level", "LOUD"],
        ],
    )
    def test_bad_arguments_exit_with_usage(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(argv)
        assert excinfo.value.code == 2
        assert "usage: lane-shooter" in capsys.readouterr().err

    def test_bad_arguments_stop_before_the_window_opens(self, capsys):
        with pytest.raises(SystemExit):
            run(["--log-level", "verbose"])
        assert "invalid choice" in capsys.readouterr().err

    def test_log_level_is_case_insensitive(self):
        assert parse_args(["--log-level", "debug"]).log_level == "DEBUG"

    def test_frame_time_is_capped(self):
        assert frame_time(16.0) == pytest.approx(0.016)
        assert frame_time(5000.0) == 0.25


class TestLogging:
    @pytest.fixture(autouse=True)
    def _restore_level(self):
        level = logger.level
        yield
        logger.setLevel(level)

    def test_configure_by_name(self):
        assert configure_logging("warning") is logger
        assert logger.level == logging.WARNING

    def test_unknown_level_name(self):
        with pytest.raises(ValueError, match="unknown log level"):
            configure_logging("LOUD")
