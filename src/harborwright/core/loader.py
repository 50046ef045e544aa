#!/usr/bin/env python3
"""
HARBORWRIGHT LOADER
-------------------
Reads a Harbor resource (YAML) into the frozen Harbor model. Only the
sections the registry derivation consumes are read; unknown keys are
ignored so full Harbor manifests can be fed in unchanged.

Author: Harborwright Team
Date: 2026-10-19
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from ruamel.yaml import YAML, YAMLError

from harborwright.core.errors import SpecLoadError
from harborwright.core.models import (
    DEFAULT_REDIS_PORT,
    STORAGE_DRIVERS,
    ComponentSpec,
    ExternalRedisSpec,
    Harbor,
    HarborSpec,
    ImageChartStorage,
    LogLevel,
    ObjectMeta,
    RegistryComponentSpec,
    StorageMiddleware,
    StorageRedirect,
)


def _mapping(value: Any, path: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise SpecLoadError(f"{path} must be a mapping")
    return value


def _section(data: Dict[str, Any], key: str, where: str) -> Dict[str, Any]:
    return _mapping(data.get(key), f"{where}{key}")


def _string(data: Dict[str, Any], key: str, where: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise SpecLoadError(f"{where}{key} must be a string")
    return value


def _component(data: Dict[str, Any], where: str) -> ComponentSpec:
    pull_secrets = []
    for item in data.get("imagePullSecrets") or []:
        pull_secrets.append(item.get("name") if isinstance(item, dict) else str(item))

    return ComponentSpec(
        replicas=data.get("replicas"),
        image=data.get("image"),
        image_pull_policy=data.get("imagePullPolicy"),
        image_pull_secrets=tuple(pull_secrets),
        service_account_name=data.get("serviceAccountName"),
        node_selector=dict(_section(data, "nodeSelector", where)),
        tolerations=tuple(data.get("tolerations") or ()),
        resources=dict(_section(data, "resources", where)),
    )


def _registry(spec: Dict[str, Any]) -> RegistryComponentSpec:
    data = _section(spec, "registry", "spec.")
    middlewares = []
    for i, item in enumerate(data.get("storageMiddlewares") or []):
        if not isinstance(item, dict) or not item.get("name"):
            raise SpecLoadError("spec.registry.storageMiddlewares entries need a name")
        options = _section(item, "options", f"spec.registry.storageMiddlewares[{i}].")
        middlewares.append(StorageMiddleware(name=item["name"], options=dict(options)))

    return RegistryComponentSpec(
        component=_component(data, "spec.registry."),
        storage_middlewares=tuple(middlewares),
        relative_urls=data.get("relativeURLs"),
    )


def _storage(spec: Dict[str, Any]) -> ImageChartStorage:
    persistence = _section(spec, "persistence", "spec.")
    data = _section(persistence, "imageChartStorage", "spec.persistence.")
    if not data:
        return ImageChartStorage()

    chosen = [d for d in STORAGE_DRIVERS if d in data]
    if len(chosen) > 1:
        raise SpecLoadError(f"spec.persistence.imageChartStorage sets several drivers: {', '.join(chosen)}")

    redirect = _section(data, "redirect", "spec.persistence.imageChartStorage.")
    if chosen:
        driver = chosen[0]
        options = _section(data, driver, "spec.persistence.imageChartStorage.")
    else:
        # unknown drivers are reported during resolution, not here
        driver = data.get("driver", "filesystem")
        options = _section(data, "options", "spec.persistence.imageChartStorage.")

    return ImageChartStorage(
        driver=driver,
        options=dict(options),
        redirect=StorageRedirect(disable=bool(redirect.get("disable", False))),
    )


def _redis(spec: Dict[str, Any]) -> ExternalRedisSpec:
    data = _section(spec, "redis", "spec.")
    try:
        port = int(data.get("port", DEFAULT_REDIS_PORT))
        database = data.get("database")
        database = None if database is None else int(database)
    except (TypeError, ValueError) as e:
        raise SpecLoadError(f"spec.redis: {e}") from e

    return ExternalRedisSpec(
        dsn=_string(data, "dsn", "spec.redis."),
        host=_string(data, "host", "spec.redis."),
        port=port,
        database=database,
        password_ref=_string(data, "passwordRef", "spec.redis."),
    )


def parse_harbor(data: Any) -> Harbor:
    """Builds a Harbor from an already-parsed document."""
    if not isinstance(data, dict):
        raise SpecLoadError("Harbor document must be a mapping")

    metadata = _section(data, "metadata", "")
    name, namespace = metadata.get("name"), metadata.get("namespace")
    if not name or not namespace:
        raise SpecLoadError("metadata.name and metadata.namespace are required")

    spec = _section(data, "spec", "")
    try:
        log_level = LogLevel(spec.get("logLevel", LogLevel.INFO.value))
    except ValueError:
        raise SpecLoadError(f"spec.logLevel: unknown level '{spec.get('logLevel')}'") from None

    return Harbor(
        metadata=ObjectMeta(name=str(name), namespace=str(namespace)),
        spec=HarborSpec(
            registry=_registry(spec),
            image_chart_storage=_storage(spec),
            log_level=log_level,
            redis=_redis(spec),
        ),
    )


def load_harbor(source: Union[str, Path]) -> Harbor:
    """Loads a Harbor from a file path or from YAML text."""
    if isinstance(source, Path) or (isinstance(source, str) and "\n" not in source and Path(source).is_file()):
        try:
            text = Path(source).read_text(encoding="utf-8-sig")
        except OSError as e:
            raise SpecLoadError(f"cannot read {source}: {e}") from e
    else:
        text = source

    try:
        data = YAML(typ="safe").load(text)
    except YAMLError as e:
        raise SpecLoadError(f"invalid YAML: {e}") from e

    return parse_harbor(data)
