#!/usr/bin/env python3
"""
HARBORWRIGHT RESOURCE GRAPH
---------------------------
The contract between derivation code and the reconciliation engine that
owns the dependency graph:

- Resource: opaque handle to a registered object and its dependencies.
- ResourceManager: the two registration operations the engine exposes.
- InMemoryGraph: a ResourceManager that only records registrations. Used
  by the command line and by tests; it schedules and applies nothing.

Author: Harborwright Team
Date: 2026-10-19
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, NewType, Protocol, Tuple

from harborwright.core.errors import ContextCancelledError, GraphRegistrationError
from harborwright.core.models import GeneratedSecret

logger = logging.getLogger("harborwright.graph")


@dataclass(frozen=True, eq=False)
class Resource:
    """
    Handle issued by the graph. Identity is the handle object itself;
    `dependencies` are handles issued earlier by the same graph.
    """
    kind: str
    namespace: str
    name: str
    obj: Any = field(repr=False)
    dependencies: Tuple["Resource", ...] = ()

    @property
    def key(self) -> Tuple[str, str, str]:
        return self.kind, self.namespace, self.name


RegistryAuthSecret = NewType("RegistryAuthSecret", Resource)
RegistryHTTPSecret = NewType("RegistryHTTPSecret", Resource)
RegistryResource = NewType("RegistryResource", Resource)


class ResourceManager(Protocol):
    """
    Registration capability of the engine. Implementations raise
    GraphRegistrationError when they refuse a node.
    """

    def add_secret_to_manage(self, ctx: Any, secret: GeneratedSecret) -> Resource:
        ...

    def add_basic_resource(self, ctx: Any, obj: Any, *dependencies: Resource) -> Resource:
        ...


class InMemoryGraph:
    """
    Records nodes in registration order. A node is accepted only when
    every dependency was issued by this graph, so the recorded order is
    always a valid apply order.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._nodes: List[Resource] = []
        self._by_key: Dict[Tuple[str, str, str], Resource] = {}

    def add_secret_to_manage(self, ctx: Any, secret: GeneratedSecret) -> Resource:
        return self._add(ctx, secret, ())

    def add_basic_resource(self, ctx: Any, obj: Any, *dependencies: Resource) -> Resource:
        return self._add(ctx, obj, dependencies)

    def _add(self, ctx: Any, obj: Any, dependencies: Tuple[Resource, ...]) -> Resource:
        if ctx is not None and ctx.done():
            raise ContextCancelledError(f"context {ctx.reconcile_id} is done")

        node = Resource(
            kind=obj.kind,
            namespace=obj.namespace,
            name=obj.name,
            obj=obj,
            dependencies=tuple(dependencies),
        )

        with self._lock:
            for dep in node.dependencies:
                if self._by_key.get(dep.key) is not dep:
                    raise GraphRegistrationError(
                        f"{node.kind} {node.namespace}/{node.name}: dependency "
                        f"{dep.kind} {dep.namespace}/{dep.name} is not registered"
                    )
            if node.key in self._by_key:
                raise GraphRegistrationError(
                    f"{node.kind} {node.namespace}/{node.name} is already registered"
                )
            self._by_key[node.key] = node
            self._nodes.append(node)

        logger.info(
            f"Registered {node.kind} {node.namespace}/{node.name} "
            f"({len(node.dependencies)} dependencies)"
        )
        return node

    def nodes(self) -> List[Resource]:
        with self._lock:
            return list(self._nodes)

    def objects(self) -> List[Any]:
        return [n.obj for n in self.nodes()]

    def get(self, kind: str, namespace: str, name: str) -> Resource:
        with self._lock:
            try:
                return self._by_key[(kind, namespace, name)]
            except KeyError:
                raise GraphRegistrationError(f"{kind} {namespace}/{name} is not registered") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)
