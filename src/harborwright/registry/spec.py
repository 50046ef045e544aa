#!/usr/bin/env python3
"""
HARBORWRIGHT REGISTRY SPEC - Component Derivation
-------------------------------------------------
Derives the Registry component specification from a Harbor.

Sizing, storage middlewares, relative URL behaviour, the storage driver
and the redis connection come from the Harbor. Everything else is fixed:
access log on, validation off, htpasswd realm, redis blob descriptor
cache. Secrets are referenced by name only.

Author: Harborwright Team
Date: 2026-10-19
"""

import logging
from typing import Any

from harborwright.core.errors import DerivationError, HarborwrightError
from harborwright.core.models import (
    REGISTRY_REDIS,
    Harbor,
    ObjectMeta,
    Registry,
    RegistryAuthenticationHTPasswdSpec,
    RegistryHTTPSpec,
    RegistryLogSpec,
    RegistrySpec,
    RegistryStorageCacheSpec,
    RegistryStorageSpec,
    RegistryValidationSpec,
)
from harborwright.core.naming import normalize_name
from harborwright.secrets.derivation import registry_auth_secret_name, registry_http_secret_name

logger = logging.getLogger("harborwright.registry")

REGISTRY_AUTH_REALM = "harbor-registry-basic-realm"
REGISTRY_BLOB_DESCRIPTOR_CACHE = "redis"


def get_registry(ctx: Any, harbor: Harbor) -> Registry:
    name = normalize_name(ctx, harbor.name)
    authentication_secret_name = registry_auth_secret_name(ctx, harbor)
    http_secret_name = registry_http_secret_name(ctx, harbor)

    try:
        redis_dsn = harbor.spec.redis_dsn(REGISTRY_REDIS)
    except HarborwrightError as e:
        raise DerivationError("redis", e) from e

    storage = harbor.spec.image_chart_storage
    try:
        driver = storage.registry()
    except HarborwrightError as e:
        raise DerivationError("storage", e) from e

    spec = RegistrySpec(
        component=harbor.spec.registry.component,
        log=RegistryLogSpec(
            level=harbor.spec.log_level.registry(),
            access_log_disabled=False,
        ),
        authentication=RegistryAuthenticationHTPasswdSpec(
            realm=REGISTRY_AUTH_REALM,
            secret_ref=authentication_secret_name,
        ),
        validation=RegistryValidationSpec(disabled=True),
        storage_middlewares=harbor.spec.registry.storage_middlewares,
        http=RegistryHTTPSpec(
            secret_ref=http_secret_name,
            relative_urls=harbor.spec.registry.relative_urls,
        ),
        storage=RegistryStorageSpec(
            driver=driver,
            cache=RegistryStorageCacheSpec(blobdescriptor=REGISTRY_BLOB_DESCRIPTOR_CACHE),
            redirect=storage.redirect,
        ),
        redis=redis_dsn,
    )

    logger.info(f"Derived registry spec {harbor.namespace}/{name} (storage: {driver.kind})")
    return Registry(metadata=ObjectMeta(name=name, namespace=harbor.namespace), spec=spec)
