#!/usr/bin/env python3
"""
HARBORWRIGHT ENGINE - Registry Reconciler
-----------------------------------------
Drives one reconciliation pass of the registry component of a Harbor
through four linear stages:

    derive secrets -> register secrets -> derive registry -> register registry

The registry node is registered with both secret nodes as dependencies.
A failing stage aborts the pass with a DerivationError naming the stage;
nodes registered before the failure are left to the engine, which
converges on the next pass.

Author: Harborwright Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass
from typing import Any, Tuple

from harborwright.core.config import ConfigStore
from harborwright.core.errors import DerivationError, GraphRegistrationError, HarborwrightError
from harborwright.core.models import GeneratedSecret, Harbor
from harborwright.graph.composition import add_component_node, add_secret_node
from harborwright.graph.resources import (
    RegistryAuthSecret,
    RegistryHTTPSecret,
    RegistryResource,
    ResourceManager,
)
from harborwright.registry.spec import get_registry
from harborwright.secrets.derivation import (
    get_registry_authentication_secret,
    get_registry_http_secret,
)

logger = logging.getLogger("harborwright.engine")


@dataclass(frozen=True)
class RegistryResources:
    """Handles produced by a pass, for callers adding further dependents."""
    auth_secret: RegistryAuthSecret
    http_secret: RegistryHTTPSecret
    registry: RegistryResource


class RegistryReconciler:
    """
    Composes the registry objects of a Harbor into the engine's graph.

    Holds no per-pass state: one instance can serve concurrent passes for
    different Harbors.
    """

    def __init__(self, graph: ResourceManager, config: ConfigStore):
        self.graph = graph
        self.config = config

    def get_registry_configurations(self, ctx: Any, harbor: Harbor) -> Tuple[GeneratedSecret, GeneratedSecret]:
        """Stage 1: builds the authentication and http secrets."""
        try:
            auth_secret = get_registry_authentication_secret(ctx, harbor, self.config)
        except HarborwrightError as e:
            cause = DerivationError("cannot get secret", e)
            raise DerivationError("authentication secret", cause) from cause

        try:
            http_secret = get_registry_http_secret(ctx, harbor)
        except HarborwrightError as e:
            cause = DerivationError("cannot get secret", e)
            raise DerivationError("http secret", cause) from cause

        return auth_secret, http_secret

    def add_registry_configurations(self, ctx: Any, auth_secret: GeneratedSecret,
                                    http_secret: GeneratedSecret) -> Tuple[RegistryAuthSecret, RegistryHTTPSecret]:
        """Stage 2: registers both secrets, authentication first."""
        try:
            auth_res = add_secret_node(ctx, self.graph, auth_secret)
        except HarborwrightError as e:
            raise DerivationError("authentication secret", e) from e

        try:
            http_res = add_secret_node(ctx, self.graph, http_secret)
        except HarborwrightError as e:
            raise DerivationError("http secret", e) from e

        return RegistryAuthSecret(auth_res), RegistryHTTPSecret(http_res)

    def add_registry(self, ctx: Any, harbor: Harbor, auth_secret: RegistryAuthSecret,
                     http_secret: RegistryHTTPSecret) -> RegistryResource:
        """Stages 3 and 4: derives the registry and registers it after both secrets."""
        try:
            registry = get_registry(ctx, harbor)
        except HarborwrightError as e:
            raise DerivationError("cannot get registry", e) from e

        expected = registry.spec.secret_refs()
        actual = (auth_secret.name, http_secret.name)
        if expected != actual:
            err = GraphRegistrationError(
                f"registry references secrets {expected} but dependencies are {actual}"
            )
            raise DerivationError("cannot add basic resource", err)

        return RegistryResource(add_component_node(ctx, self.graph, registry, auth_secret, http_secret))

    def reconcile(self, ctx: Any, harbor: Harbor) -> RegistryResources:
        """Runs the full pass for `harbor`."""
        logger.info(f"[{harbor.namespace}/{harbor.name}] Deriving registry secrets")
        try:
            auth_secret, http_secret = self.get_registry_configurations(ctx, harbor)

            logger.info(f"[{harbor.namespace}/{harbor.name}] Registering registry secrets")
            auth_res, http_res = self.add_registry_configurations(ctx, auth_secret, http_secret)

            logger.info(f"[{harbor.namespace}/{harbor.name}] Deriving and registering registry")
            registry_res = self.add_registry(ctx, harbor, auth_res, http_res)
        except DerivationError as e:
            logger.error(f"[{harbor.namespace}/{harbor.name}] Registry reconciliation aborted: {e}")
            raise

        return RegistryResources(auth_secret=auth_res, http_secret=http_res, registry=registry_res)
