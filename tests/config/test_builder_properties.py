"""Tests for BuilderProperties binding."""

import pytest

from shmock.config.properties import BuilderProperties, LoggingProperties
from shmock.core.config import Config


class TestBuilderProperties:
    def test_defaults(self):
        props = Config.from_defaults().bind(BuilderProperties)
        assert props.class_prefix == "Shmock"
        assert props.require_concrete is True
        assert props.check_signatures is True
        assert props.publish is True

    def test_env_override_is_coerced(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SHMOCK_BUILDER_PUBLISH", "false")
        props = Config.from_defaults().bind(BuilderProperties)
        assert props.publish is False

    def test_prefix_must_be_an_identifier(self):
        config = Config({"shmock": {"builder": {"class_prefix": "not valid"}}})
        with pytest.raises(ValueError):
            config.bind(BuilderProperties)


class TestLoggingProperties:
    def test_defaults(self):
        props = Config({}).bind(LoggingProperties)
        assert props.format == "console"
        assert props.level == {"root": "INFO"}

    def test_reads_section(self):
        config = Config({"shmock": {"logging": {"format": "json", "level": {"root": "DEBUG"}}}})
        props = config.bind(LoggingProperties)
        assert props.format == "json"
        assert props.level == {"root": "DEBUG"}
