"""pagesync — push a static build directory to a Pages asset store.

Public API:
    deploy(settings, git) -> DeployResult
    scan_directory(root) -> list[FileRecord]
"""

__version__ = "0.1.0"

from pagesync.sync.pipeline import deploy
from pagesync.sync.scanner import scan_directory
from pagesync.sync.types import DeployResult, FileRecord, GitMetadata

__all__ = [
    "__version__",
    "deploy",
    "scan_directory",
    "DeployResult",
    "FileRecord",
    "GitMetadata",
]
