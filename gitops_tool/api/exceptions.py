"""Exception definitions for gitops-tool API"""

from typing import List, Optional

from ..constants import ErrorCode


class GitopsToolError(Exception):
    """Base exception for gitops-tool"""

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.error_code = error_code


class ConfigError(GitopsToolError):
    """Configuration error"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.CONFIG_ERROR)


class QueryError(GitopsToolError):
    """Build graph query failed or returned malformed output"""

    def __init__(self, message: str, query: Optional[str] = None):
        super().__init__(message, ErrorCode.QUERY_FAILED)
        self.query = query


class ResolveError(GitopsToolError):
    """Manifest image resolution error"""
    pass


class ManifestDecodeError(ResolveError):
    """Manifest stream could not be decoded"""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.MANIFEST_DECODE_FAILED)


class MissingIdentityError(ResolveError):
    """Document is missing metadata.name or kind"""

    def __init__(self, field_name: str, document: object):
        message = f"Missing {field_name} in object {document!r}"
        super().__init__(message, ErrorCode.MANIFEST_IDENTITY_MISSING)
        self.field_name = field_name


class UnresolvedImageError(ResolveError):
    """Build target image reference without a registry mapping"""

    def __init__(self, image: str):
        super().__init__(f"Unresolved image found: {image}", ErrorCode.UNRESOLVED_IMAGE)
        self.image = image


class CommandError(GitopsToolError):
    """External command failed"""

    def __init__(self, command: List[str], returncode: int, output: str = ""):
        message = f"Command {' '.join(command)} failed with exit code {returncode}"
        if output:
            message = f"{message}:\n{output}"
        super().__init__(message, ErrorCode.COMMAND_FAILED)
        self.command = command
        self.returncode = returncode
        self.output = output


class GitError(CommandError):
    """Git command failed"""

    def __init__(self, command: List[str], returncode: int, output: str = ""):
        super().__init__(command, returncode, output)
        self.error_code = ErrorCode.GIT_FAILED


class HostingError(GitopsToolError):
    """Hosting provider API error"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message, ErrorCode.HOSTING_FAILED)
        self.status_code = status_code
        self.body = body
