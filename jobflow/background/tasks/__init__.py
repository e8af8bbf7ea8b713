"""
Background tasks package.
"""

from .sweeps import (
    cleanup_outbox_events_task,
    expire_stale_bids_task,
    expire_unpaid_assignments_task,
    release_due_warranty_holds_task,
)

__all__ = [
    "cleanup_outbox_events_task",
    "expire_stale_bids_task",
    "expire_unpaid_assignments_task",
    "release_due_warranty_holds_task",
]
