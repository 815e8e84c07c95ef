"""External command execution

Every failure is fatal: a non-zero exit raises CommandError carrying the
combined output. Nothing is retried.
"""

import asyncio
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..api.exceptions import CommandError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def run_command(command: Sequence[str],
                cwd: Optional[PathLike] = None,
                error_class: type = CommandError) -> str:
    """
    Run a command to completion

    Args:
        command: Program and arguments
        cwd: Working directory
        error_class: CommandError subclass raised on failure

    Returns:
        Captured stdout
    """
    args: List[str] = [str(part) for part in command]
    logger.debug(f"Executing: {' '.join(args)}")
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True
        )
    except FileNotFoundError as e:
        raise error_class(args, 127, str(e)) from e

    if result.returncode != 0:
        output = (result.stderr or result.stdout or "").strip()
        raise error_class(args, result.returncode, output)
    return result.stdout


async def run_command_async(command: Sequence[str],
                            cwd: Optional[PathLike] = None) -> str:
    """Async variant of run_command used by the push workers"""
    args: List[str] = [str(part) for part in command]
    logger.info(f"Executing: {' '.join(args)}")
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT
        )
    except FileNotFoundError as e:
        raise CommandError(args, 127, str(e)) from e

    stdout, _ = await process.communicate()
    output = stdout.decode(errors="replace").strip() if stdout else ""
    if process.returncode != 0:
        raise CommandError(args, process.returncode, output)
    if output:
        logger.debug(output)
    return output
