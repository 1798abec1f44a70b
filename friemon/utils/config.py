"""Configuration management for Friemon."""

import logging
import os

from pydantic import BaseModel, Field


class Config(BaseModel):
    """Engine configuration."""

    # Challenges
    challenge_ttl_seconds: int = Field(default=300, ge=1)

    # Housekeeping
    finished_battle_max_age_seconds: int = Field(default=600, ge=0)

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Config":
        """Build a config, overriding defaults from FRIEMON_* environment variables."""
        values: dict[str, object] = {}
        ttl = os.getenv("FRIEMON_CHALLENGE_TTL")
        if ttl:
            values["challenge_ttl_seconds"] = int(ttl)
        max_age = os.getenv("FRIEMON_FINISHED_BATTLE_MAX_AGE")
        if max_age:
            values["finished_battle_max_age_seconds"] = int(max_age)
        level = os.getenv("FRIEMON_LOG_LEVEL")
        if level:
            values["log_level"] = level.upper()
        return cls(**values)

    def configure_logging(self) -> None:
        """Send log records to stderr at the configured level."""
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.WARNING),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# Global config instance
config = Config.from_env()
