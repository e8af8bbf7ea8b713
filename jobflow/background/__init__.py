"""
Background processing: Celery beat sweeps and the in-process outbox worker.
"""
