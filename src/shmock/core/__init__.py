"""shmock core — configuration."""

from shmock.core.config import Config, config_properties

__all__ = ["Config", "config_properties"]
