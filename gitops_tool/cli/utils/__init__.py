"""CLI utility functions"""

from .output import console, print_error, format_run_result

__all__ = [
    'console',
    'print_error',
    'format_run_result',
]
