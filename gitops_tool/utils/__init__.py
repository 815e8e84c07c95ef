# gitops_tool/utils/__init__.py
"""Utility functions for gitops-tool"""

from .async_utils import (
    run_async,
    sync_to_async,
    TaskPool,
)

__all__ = [
    "run_async",
    "sync_to_async",
    "TaskPool",
]
