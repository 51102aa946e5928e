"""Asset synchronization: scan, diff, pack, upload, deploy.

Public API:
    scan_directory(root) -> list[FileRecord]
    pack_buckets(files) -> list[Bucket]
    deploy(settings, git) -> DeployResult
"""

from pagesync.sync.packer import pack_buckets
from pagesync.sync.pipeline import deploy
from pagesync.sync.scanner import scan_directory
from pagesync.sync.types import Bucket, DeployResult, FileRecord, GitMetadata

__all__ = [
    "deploy",
    "pack_buckets",
    "scan_directory",
    "Bucket",
    "DeployResult",
    "FileRecord",
    "GitMetadata",
]
