# gitops_tool/cli/commands/__init__.py
"""CLI commands"""

from . import create_prs
from . import resolve

__all__ = [
    "create_prs",
    "resolve",
]
