#!/usr/bin/env python3
"""
HARBORWRIGHT VALIDATOR - The Judge
----------------------------------
Final gate before a batch of derived objects leaves the process. It checks
that secret material and the specification consuming it stay separate:

1. Every manifest carries apiVersion, kind, metadata.name and namespace.
2. Registry secret references name Secrets present in the same batch.
3. No Secret value appears anywhere inside a non-Secret manifest.

Author: Harborwright Team
Date: 2026-10-19
"""

import logging
from typing import Any, Iterable, List, Set, Tuple

logger = logging.getLogger("harborwright.validator")

REQUIRED_FIELDS = ["apiVersion", "kind", "metadata"]


class ManifestValidator:
    """Validates rendered manifests (see `to_manifest()` on the models)."""

    def validate(self, objects: Iterable[Any]) -> Tuple[bool, List[str]]:
        manifests = [o.to_manifest() if hasattr(o, "to_manifest") else o for o in objects]
        problems: List[str] = []

        for doc in manifests:
            problems.extend(self._check_identity(doc))

        secrets = [m for m in manifests if isinstance(m, dict) and m.get("kind") == "Secret"]
        others = [m for m in manifests if isinstance(m, dict) and m.get("kind") != "Secret"]

        secret_names = {(self._meta(s, "namespace"), self._meta(s, "name")) for s in secrets}
        secret_values: Set[str] = set()
        for s in secrets:
            for value in (s.get("stringData") or {}).values():
                if value:
                    secret_values.add(str(value))

        for doc in others:
            problems.extend(self._check_references(doc, secret_names))
            problems.extend(self._check_no_inlined_values(doc, secret_values))

        for p in problems:
            logger.error(f"Validation Failed: {p}")
        return not problems, problems

    def _meta(self, doc: Any, key: str) -> Any:
        return (doc.get("metadata") or {}).get(key)

    def _label(self, doc: Any) -> str:
        return f"{doc.get('kind', '?')} {self._meta(doc, 'namespace')}/{self._meta(doc, 'name')}"

    def _check_identity(self, doc: Any) -> List[str]:
        if not isinstance(doc, dict):
            return ["manifest is not a mapping"]

        missing = [f for f in REQUIRED_FIELDS if f not in doc]
        if missing:
            return [f"missing required top-level field(s) {', '.join(missing)}"]

        missing = [k for k in ("name", "namespace") if not self._meta(doc, k)]
        if missing:
            return [f"{doc['kind']}: missing metadata.{', metadata.'.join(missing)}"]
        return []

    def _check_references(self, doc: Any, secret_names: Set[Tuple[Any, Any]]) -> List[str]:
        if doc.get("kind") != "Registry":
            return []

        spec = doc.get("spec") or {}
        refs = {
            "authentication.htpasswd.secretRef": ((spec.get("authentication") or {}).get("htpasswd") or {}).get("secretRef"),
            "http.secretRef": (spec.get("http") or {}).get("secretRef"),
        }

        problems = []
        namespace = self._meta(doc, "namespace")
        for path, ref in refs.items():
            if not ref:
                problems.append(f"{self._label(doc)}: {path} is empty")
            elif (namespace, ref) not in secret_names:
                problems.append(f"{self._label(doc)}: {path} '{ref}' does not name a Secret of this batch")
        return problems

    def _check_no_inlined_values(self, doc: Any, secret_values: Set[str]) -> List[str]:
        problems = []
        for path, value in self._walk(doc, ""):
            if isinstance(value, str) and any(v in value for v in secret_values):
                # never echo the value itself
                problems.append(f"{self._label(doc)}: secret material inlined at '{path}'")
        return problems

    def _walk(self, node: Any, path: str):
        if isinstance(node, dict):
            for key, value in node.items():
                yield from self._walk(value, f"{path}.{key}" if path else str(key))
        elif isinstance(node, list):
            for i, value in enumerate(node):
                yield from self._walk(value, f"{path}[{i}]")
        else:
            yield path, node
