"""Wires derived objects into the engine's resource graph."""

from typing import Any

from harborwright.core.errors import DerivationError, HarborwrightError
from harborwright.core.models import GeneratedSecret, Registry
from harborwright.graph.resources import Resource, ResourceManager


def add_secret_node(ctx: Any, graph: ResourceManager, secret: GeneratedSecret) -> Resource:
    try:
        return graph.add_secret_to_manage(ctx, secret)
    except HarborwrightError as e:
        raise DerivationError("cannot add secret", e) from e


def add_component_node(ctx: Any, graph: ResourceManager, registry: Registry,
                       *dependencies: Resource) -> Resource:
    """Registers `registry` so that it is applied after every dependency."""
    try:
        return graph.add_basic_resource(ctx, registry, *dependencies)
    except HarborwrightError as e:
        raise DerivationError("cannot add basic resource", e) from e
