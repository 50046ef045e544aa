#!/usr/bin/env python3
"""
HARBORWRIGHT CONFIG STORE
-------------------------
Read-only lookup of operator tunables (e.g. the bcrypt cost used for the
registry htpasswd file). Values come from a mapping, a flat YAML file or
the process environment, and stores can be layered.

The store is never mutated after construction, so concurrent reads from
parallel reconciliations are safe.

Author: Harborwright Team
Date: 2026-10-19
"""

import os
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from ruamel.yaml import YAML, YAMLError

from harborwright.core.errors import ConfigLookupError, ConfigValueError, ItemNotFoundError

logger = logging.getLogger("harborwright.config")

CONFIG_REGISTRY_ENCRYPTION_COST_KEY = "registry-encryption-cost"

ENV_PREFIX = "HARBORWRIGHT_"


class ConfigStore:
    """
    Immutable key/value store for tunables.

    Keys are kebab-case ("registry-encryption-cost").
    """

    def __init__(self, items: Optional[Mapping[str, Any]] = None):
        self._items = MappingProxyType(dict(items or {}))

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ConfigStore":
        """Loads a flat YAML mapping. Nested values are rejected."""
        path = Path(path)
        try:
            data = YAML(typ="safe").load(path.read_text(encoding="utf-8"))
        except (OSError, YAMLError) as e:
            raise ConfigLookupError(f"cannot read config file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigLookupError(f"config file {path} must contain a mapping")

        for key, value in data.items():
            if isinstance(value, (dict, list)):
                raise ConfigValueError(f"config item '{key}' must be a scalar", key=str(key))

        logger.debug(f"Loaded {len(data)} config item(s) from {path}")
        return cls({str(k): v for k, v in data.items()})

    @classmethod
    def from_environ(cls, prefix: str = ENV_PREFIX,
                     environ: Optional[Mapping[str, str]] = None) -> "ConfigStore":
        """
        HARBORWRIGHT_REGISTRY_ENCRYPTION_COST=12 -> registry-encryption-cost: "12"
        """
        environ = os.environ if environ is None else environ
        items: Dict[str, str] = {}
        for name, value in environ.items():
            if not name.startswith(prefix) or name == prefix:
                continue
            key = name[len(prefix):].lower().replace("_", "-")
            items[key] = value
        return cls(items)

    def merged(self, other: "ConfigStore") -> "ConfigStore":
        """Returns a new store where `other` overrides this one."""
        combined = dict(self._items)
        combined.update(other._items)
        return ConfigStore(combined)

    def keys(self):
        return self._items.keys()

    def get_item_value(self, key: str) -> Any:
        try:
            return self._items[key]
        except KeyError:
            raise ItemNotFoundError(f"config item '{key}' not found", key=key) from None

    def get_item_value_int(self, key: str) -> int:
        value = self.get_item_value(key)

        # bool is an int subclass, "true" is not a cost
        if isinstance(value, bool):
            raise ConfigValueError(f"config item '{key}' is not an integer: {value!r}", key=key)
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            raise ConfigValueError(f"config item '{key}' is not an integer: {value!r}", key=key) from None
