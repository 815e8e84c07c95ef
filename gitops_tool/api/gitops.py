"""Programmatic entry points"""

from pathlib import Path
from typing import Dict, Optional, Union

from ..core.image_resolver import ImageResolver
from ..models.config import GitopsConfig
from ..models.result import RunResult
from ..services.gitops_service import GitopsService
from ..utils.async_utils import run_async


def create_prs(config: GitopsConfig, **dependencies) -> RunResult:
    """
    Run the full promotion for ``config``

    This is a convenience function that creates a GitopsService and runs
    it to completion from synchronous code.

    Args:
        config: Run configuration
        **dependencies: Collaborators forwarded to GitopsService
            (query_engine, hosting, workdir_factory, ...)

    Returns:
        RunResult: Run summary

    Raises:
        GitopsToolError: If any step fails
    """
    service = GitopsService(config, **dependencies)
    return run_async(service.run())


def resolve(images: Dict[str, str],
            stream: Optional[str] = None,
            infile: Optional[Union[str, Path]] = None,
            outfile: Optional[Union[str, Path]] = None) -> str:
    """
    Resolve image placeholders in a manifest stream or file

    Args:
        images: Placeholder reference to registry reference mapping
        stream: Manifest text, used when ``infile`` is not given
        infile: Manifest file to read
        outfile: File to write the result to, if any

    Returns:
        Resolved manifest text

    Raises:
        ValueError: If neither stream nor infile is specified
        ResolveError: If a document cannot be resolved
    """
    if stream is None and infile is None:
        raise ValueError("Must specify either stream or infile")

    if infile is not None:
        stream = Path(infile).read_text(encoding="utf-8")

    output = ImageResolver(images).resolve_stream(stream)

    if outfile is not None:
        Path(outfile).write_text(output, encoding="utf-8")
    return output
