#!/usr/bin/env python3
"""
HARBORWRIGHT RECONCILE CONTEXT
------------------------------
The execution context handed down by the owning engine for one
reconciliation pass. Derivation code never inspects it; it only forwards
it to the naming function and to the resource graph, which decide what
cancellation means for them.

Author: Harborwright Team
Date: 2026-10-19
"""

import time
import threading
import uuid
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ReconcileContext:
    """
    Cancellation and deadline carrier for a single pass.

    Safe to share between threads: the only mutable member is the
    cancellation Event.
    """
    reconcile_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    deadline: Optional[float] = None       # time.monotonic() value, None = no deadline
    cancelled: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def with_timeout(cls, seconds: float) -> "ReconcileContext":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self):
        self.cancelled.set()

    def done(self) -> bool:
        """True once cancelled or past the deadline."""
        if self.cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline
