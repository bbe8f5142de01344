# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Config — layered settings for shmock, bound onto typed property classes."""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast, get_type_hints

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

T = TypeVar("T")

DEFAULTS_RESOURCE = "shmock-defaults.yaml"
ENV_PREFIX = "SHMOCK_"

_PREFIX_ATTR = "__shmock_config_prefix__"
_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_MAX_PLACEHOLDER_DEPTH = 10
_TRUTHY = frozenset({"true", "1", "yes", "on"})
_MISSING = object()


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Declare the configuration section a properties class binds to.

    The class may be a dataclass or a pydantic model::

        @config_properties(prefix="shmock.builder")
        class BuilderProperties(BaseModel):
            class_prefix: str = "Shmock"
    """

    def mark(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return mark


def env_key(key: str) -> str:
    """Environment variable overriding *key*: ``shmock.builder.publish`` -> ``SHMOCK_BUILDER_PUBLISH``."""
    return ENV_PREFIX + key.removeprefix("shmock.").upper().replace(".", "_").replace("-", "_")


class Config:
    """Nested settings with dot-notation lookup.

    A value is taken from, in order:

    1. the ``SHMOCK_*`` environment variable named by :func:`env_key`
    2. the loaded data (packaged defaults, then a YAML or TOML file)
    3. the caller's default, or the property class default when binding
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Names of the layers merged into this config, lowest priority first."""
        return list(self._loaded_sources)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_defaults(cls) -> Config:
        """Config holding only the defaults packaged with shmock."""
        return cls._layered([(f"{DEFAULTS_RESOURCE} (defaults)", _read_defaults())])

    @classmethod
    def from_file(cls, path: str | Path, load_defaults: bool = True) -> Config:
        """Load *path* (``.toml``, otherwise YAML) over the packaged defaults.

        A file that does not exist contributes nothing.
        """
        path = Path(path)
        layers: list[tuple[str, dict[str, Any]]] = []
        if load_defaults:
            layers.append((f"{DEFAULTS_RESOURCE} (defaults)", _read_defaults()))
        if path.exists():
            layers.append((str(path), _read_file(path)))
        return cls._layered(layers)

    @classmethod
    def _layered(cls, layers: list[tuple[str, dict[str, Any]]]) -> Config:
        data: dict[str, Any] = {}
        for _, layer in layers:
            data = _merge(data, layer)
        config = cls(data)
        config._loaded_sources = [name for name, _ in layers]
        return config

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Value at dot-notation *key*, or *default*.

        Strings may hold ``${NAME}`` placeholders, resolved from the
        environment first and then from other keys; ``${NAME:fallback}``
        supplies a fallback.
        """
        override = os.environ.get(env_key(key))
        if override is not None:
            return override

        value = self._lookup(key)
        if value is _MISSING:
            return default
        if isinstance(value, str) and "${" in value:
            return self._expand(value)
        return value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """The mapping stored under *prefix*, or an empty dict."""
        section = self._lookup(prefix)
        return section if isinstance(section, dict) else {}

    def _lookup(self, key: str) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return _MISSING
            node = node[part]
        return node

    def _expand(self, value: str, depth: int = 0) -> str:
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ValueError(f"Placeholders in {value!r} nest too deeply; check for a reference cycle")

        def substitute(match: re.Match[str]) -> str:
            name, sep, fallback = match.group(1).partition(":")
            from_env = os.environ.get(name)
            if from_env is not None:
                return from_env
            found = self._lookup(name)
            if found is not _MISSING:
                text = str(found)
                return self._expand(text, depth + 1) if "${" in text else text
            if sep:
                return fallback
            raise ValueError(f"Cannot resolve placeholder '${{{match.group(1)}}}' from the environment or config")

        return _PLACEHOLDER.sub(substitute, value)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def bind(self, config_cls: type[T]) -> T:
        """Build *config_cls* from its ``@config_properties`` section.

        Pydantic models are validated with ``model_validate``; a failure is
        reported as :class:`ValueError`. Dataclass fields get string values
        coerced to ``int``, ``float`` or ``bool``.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ValueError(f"{config_cls.__name__} is not decorated with @config_properties")

        if isinstance(config_cls, type) and issubclass(config_cls, BaseModel):
            values = self._section_values(prefix, list(config_cls.model_fields))
            try:
                return cast(T, config_cls.model_validate(values))
            except ValidationError as exc:
                raise ValueError(f"Invalid '{prefix}' settings for {config_cls.__name__}:\n{exc}") from exc

        fields = [f.name for f in dataclasses.fields(config_cls)]  # type: ignore[arg-type]
        hints = get_type_hints(config_cls)
        values = self._section_values(prefix, fields)
        return config_cls(**{name: _coerce(value, hints.get(name)) for name, value in values.items()})

    def _section_values(self, prefix: str, names: list[str]) -> dict[str, Any]:
        values = dict(self.get_section(prefix))
        for name in names:
            value = self.get(f"{prefix}.{name}")
            if value is not None:
                values[name] = value
        return values


def _coerce(value: Any, expected: Any) -> Any:
    if not isinstance(value, str):
        return value
    if expected is bool:
        return value.lower() in _TRUTHY
    if expected in (int, float):
        return expected(value)
    return value


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_file(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with path.open("rb") as f:
            return tomllib.load(f)
    with path.open() as f:
        return yaml.safe_load(f) or {}


def _read_defaults() -> dict[str, Any]:
    resource = importlib.resources.files("shmock.resources").joinpath(DEFAULTS_RESOURCE)
    return yaml.safe_load(resource.read_text(encoding="utf-8")) or {}
