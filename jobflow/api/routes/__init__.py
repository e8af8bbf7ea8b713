"""
API routes package.
"""

from . import bids, disputes, health, jobs, webhooks

__all__ = ["bids", "disputes", "health", "jobs", "webhooks"]
