#!/usr/bin/env python3
"""
HARBORWRIGHT NAMING
-------------------
Deterministic object names derived from the owning Harbor's name and a
list of role suffixes, e.g. ("demo", "registry", "http") -> "demo-registry-http".

Names must be valid DNS-1123 labels. Over-long names are truncated and
suffixed with a short digest of the full name so that two different
inputs never collapse onto the same truncated name.

Author: Harborwright Team
Date: 2026-10-19
"""

import hashlib
import re
from typing import Any

NAME_SEPARATOR = "-"
MAX_NAME_LENGTH = 63
DIGEST_LENGTH = 8

_INVALID_CHARS = re.compile(r"[^a-z0-9-]+")


def normalize_name(ctx: Any, name: str, *suffixes: str) -> str:
    """
    Joins `name` and `suffixes` into a DNS-1123 label.

    `ctx` is the reconciliation context; it is accepted for signature
    compatibility with the engine and not consulted.
    """
    parts = [name, *suffixes]
    raw = NAME_SEPARATOR.join(p for p in parts if p)
    label = _INVALID_CHARS.sub(NAME_SEPARATOR, raw.lower()).strip(NAME_SEPARATOR)

    if len(label) <= MAX_NAME_LENGTH:
        return label

    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]
    keep = MAX_NAME_LENGTH - DIGEST_LENGTH - len(NAME_SEPARATOR)
    return f"{label[:keep].rstrip(NAME_SEPARATOR)}{NAME_SEPARATOR}{digest}"
