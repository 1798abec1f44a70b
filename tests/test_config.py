"""Tests for configuration, settings and the error types."""

import logging

import pytest
from pydantic import ValidationError

from friemon.core.errors import (
    ErrorKind,
    ExpiredError,
    FriemonError,
    NotFoundError,
    ValidationFailedError,
)
from friemon.core.settings import GameSettings
from friemon.utils.config import Config


class TestConfig:
    def test_defaults(self):
        cfg = Config()
        assert cfg.challenge_ttl_seconds == 300
        assert cfg.finished_battle_max_age_seconds == 600
        assert cfg.log_level == "WARNING"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("FRIEMON_CHALLENGE_TTL", "60")
        monkeypatch.setenv("FRIEMON_FINISHED_BATTLE_MAX_AGE", "30")
        monkeypatch.setenv("FRIEMON_LOG_LEVEL", "debug")
        cfg = Config.from_env()
        assert cfg.challenge_ttl_seconds == 60
        assert cfg.finished_battle_max_age_seconds == 30
        assert cfg.log_level == "DEBUG"

    def test_from_env_without_overrides(self, monkeypatch):
        for name in ("FRIEMON_CHALLENGE_TTL", "FRIEMON_FINISHED_BATTLE_MAX_AGE", "FRIEMON_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        assert Config.from_env() == Config()

    def test_invalid_ttl(self):
        with pytest.raises(ValidationError):
            Config(challenge_ttl_seconds=0)

    def test_configure_logging(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
        Config(log_level="debug").configure_logging()
        assert calls["level"] == logging.DEBUG


class TestGameSettings:
    def test_defaults(self):
        s = GameSettings()
        assert s.max_turns == 25
        assert s.turn_time_limit == 60
        assert s.team_size == 3
        assert s.allow_duplicates is False
        assert s.level_cap == 100
        assert s.critical_hits_enabled and s.status_effects_enabled
        assert s.type_effectiveness_enabled and s.stat_stages_enabled
        assert s.elo_enabled and s.elo_k_factor == 32
        assert not s.show_damage_calculation
        assert not s.show_accuracy_rolls

    def test_team_size_bounds(self):
        with pytest.raises(ValidationError):
            GameSettings(team_size=0)
        with pytest.raises(ValidationError):
            GameSettings(team_size=7)

    def test_max_turns_positive(self):
        with pytest.raises(ValidationError):
            GameSettings(max_turns=0)


class TestErrors:
    def test_kinds(self):
        assert NotFoundError("x").kind == ErrorKind.NOT_FOUND
        assert ExpiredError("x").kind == ErrorKind.EXPIRED
        assert issubclass(ValidationFailedError, FriemonError)

    def test_str_includes_details(self):
        err = ValidationFailedError("Move not found", {"move_id": 99})
        assert str(err) == "Move not found (move_id=99)"
        assert err.message == "Move not found"
        assert err.details == {"move_id": 99}

    def test_str_without_details(self):
        assert str(NotFoundError("Battle not found")) == "Battle not found"
