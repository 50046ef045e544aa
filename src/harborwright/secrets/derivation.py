#!/usr/bin/env python3
"""
HARBORWRIGHT SECRET DERIVATION
------------------------------
Builds the two registry secrets of a Harbor:

- "<harbor>-registry-basicauth": htpasswd file + plaintext password.
  Mutable, it may be rotated in place.
- "<harbor>-registry-http": the registry HTTP shared secret.
  Immutable, a changed value must produce a new object.

Names are deterministic; values are generated fresh on every call and
never read back from previous state.

Author: Harborwright Team
Date: 2026-10-19
"""

import logging
from typing import Any

from harborwright.core.config import CONFIG_REGISTRY_ENCRYPTION_COST_KEY, ConfigStore
from harborwright.core.errors import DerivationError, HarborwrightError, ItemNotFoundError
from harborwright.core.models import (
    HTPASSWD_FILE_NAME,
    SECRET_TYPE_HTPASSWD,
    SECRET_TYPE_SINGLE,
    SHARED_SECRET_KEY,
    GeneratedSecret,
    Harbor,
    ObjectMeta,
)
from harborwright.core.naming import normalize_name
from harborwright.secrets.policy import (
    DEFAULT_BCRYPT_COST,
    REGISTRY_AUTH_PASSWORD,
    REGISTRY_HTTP_SECRET,
    generate_password,
    hash_password,
)

logger = logging.getLogger("harborwright.secrets")

# Username the registry expects in its htpasswd file
REGISTRY_AUTHENTICATION_USERNAME = "harbor_registry_user"

AUTH_SECRET_SUFFIXES = ("registry", "basicauth")
HTTP_SECRET_SUFFIXES = ("registry", "http")

AUTH_SECRET_IMMUTABLE = False
HTTP_SECRET_IMMUTABLE = True


def registry_auth_secret_name(ctx: Any, harbor: Harbor) -> str:
    return normalize_name(ctx, harbor.name, *AUTH_SECRET_SUFFIXES)


def registry_http_secret_name(ctx: Any, harbor: Harbor) -> str:
    return normalize_name(ctx, harbor.name, *HTTP_SECRET_SUFFIXES)


def get_encryption_cost(config: ConfigStore) -> int:
    """
    bcrypt cost from the config store. A missing key falls back to
    DEFAULT_BCRYPT_COST; any other lookup failure propagates.
    """
    try:
        return config.get_item_value_int(CONFIG_REGISTRY_ENCRYPTION_COST_KEY)
    except ItemNotFoundError:
        logger.warning(
            f"Config item '{CONFIG_REGISTRY_ENCRYPTION_COST_KEY}' not set, "
            f"using default bcrypt cost {DEFAULT_BCRYPT_COST}"
        )
        return DEFAULT_BCRYPT_COST


def get_registry_authentication_secret(ctx: Any, harbor: Harbor, config: ConfigStore) -> GeneratedSecret:
    name = registry_auth_secret_name(ctx, harbor)

    try:
        password = generate_password(REGISTRY_AUTH_PASSWORD)
    except HarborwrightError as e:
        raise DerivationError("cannot generate password", e) from e

    try:
        cost = get_encryption_cost(config)
    except HarborwrightError as e:
        raise DerivationError("cannot get encryption cost", e) from e

    try:
        hashed = hash_password(password, cost)
    except HarborwrightError as e:
        raise DerivationError("cannot encrypt password", e) from e

    logger.info(f"Derived registry authentication secret {harbor.namespace}/{name}")
    return GeneratedSecret(
        metadata=ObjectMeta(name=name, namespace=harbor.namespace),
        type=SECRET_TYPE_HTPASSWD,
        immutable=AUTH_SECRET_IMMUTABLE,
        string_data={
            HTPASSWD_FILE_NAME: f"{REGISTRY_AUTHENTICATION_USERNAME}:{hashed}",
            SHARED_SECRET_KEY: password,
        },
    )


def get_registry_http_secret(ctx: Any, harbor: Harbor) -> GeneratedSecret:
    name = registry_http_secret_name(ctx, harbor)

    try:
        secret = generate_password(REGISTRY_HTTP_SECRET)
    except HarborwrightError as e:
        raise DerivationError("cannot generate secret", e) from e

    logger.info(f"Derived registry http secret {harbor.namespace}/{name}")
    return GeneratedSecret(
        metadata=ObjectMeta(name=name, namespace=harbor.namespace),
        type=SECRET_TYPE_SINGLE,
        immutable=HTTP_SECRET_IMMUTABLE,
        string_data={SHARED_SECRET_KEY: secret},
    )
