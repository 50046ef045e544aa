#!/usr/bin/env python3
"""
HARBORWRIGHT EXPORTER - Manifest Output
---------------------------------------
Renders derived objects as multi-document YAML, in the order they were
registered in the graph. Secret values are redacted unless asked for.

Author: Harborwright Team
Date: 2026-10-19
"""

import io
from typing import Any, Iterable

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

REDACTED = "<redacted>"


class ManifestExporter:
    """
    Converts model objects (anything with `to_manifest()`) into YAML text.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = ["apiVersion", "kind", "metadata", "type", "immutable", "spec", "stringData"]

    def _get_sorted_map(self, data: CommentedMap) -> CommentedMap:
        """Top-level keys in preferred order, unknown keys after them."""
        keys = list(data.keys())

        def sort_logic(key):
            if key in self.preferred_order:
                return self.preferred_order.index(key)
            return len(self.preferred_order) + keys.index(key)

        sorted_map = CommentedMap()
        for key in sorted(keys, key=sort_logic):
            sorted_map[key] = data[key]
        return sorted_map

    def _redact(self, doc: CommentedMap) -> CommentedMap:
        if doc.get("kind") != "Secret" or "stringData" not in doc:
            return doc
        redacted = CommentedMap(doc)
        redacted["stringData"] = CommentedMap((k, REDACTED) for k in doc["stringData"])
        return redacted

    def export(self, objects: Iterable[Any], redact: bool = True) -> str:
        stream = io.StringIO()
        written = 0

        for obj in objects:
            doc = obj.to_manifest() if hasattr(obj, "to_manifest") else obj
            if not doc:
                continue
            if redact:
                doc = self._redact(doc)

            if written:
                stream.write("---\n")
            self.yaml.dump(self._get_sorted_map(doc), stream)
            written += 1

        return stream.getvalue()
