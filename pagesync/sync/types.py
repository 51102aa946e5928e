"""Types for the sync pipeline.

A FileRecord describes one local asset; a Bucket groups records into a
single upload request while packing.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pagesync.client.types import Deployment, Project

# Per-request limits enforced by the asset store
MAX_BUCKET_BYTES = 50 * 1024 * 1024  # 50 MiB
MAX_BUCKET_ITEMS = 5000

# Number of buckets the packer starts with before growing
INITIAL_BUCKET_COUNT = 3

# Filenames with platform meaning; never uploaded as content assets
RESERVED_FILENAMES = frozenset({
    "_worker.js",
    "_redirects",
    "_headers",
    "_routes.json",
})

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class FileRecord:
    """A single local file discovered by the scanner.

    absolute_path: Location on disk (e.g. "/home/runner/work/site/dist/img/logo.png").
    public_path: Path in the served tree, always "/"-prefixed (e.g. "/img/logo.png").
    size: Byte length; only used for packing.
    mime_type: Guessed from the extension.
    fingerprint: 32 hex chars, see pagesync.sync.hasher.
    """

    absolute_path: Path
    public_path: str
    size: int
    mime_type: str
    fingerprint: str


@dataclass
class Bucket:
    """Accumulator for one upload request."""

    files: list[FileRecord] = field(default_factory=list)
    size: int = 0

    def can_accept(
        self,
        record: FileRecord,
        max_bytes: int = MAX_BUCKET_BYTES,
        max_items: int = MAX_BUCKET_ITEMS,
    ) -> bool:
        return (
            self.size + record.size <= max_bytes
            and len(self.files) + 1 <= max_items
        )

    def add(self, record: FileRecord) -> None:
        self.files.append(record)
        self.size += record.size

    def __len__(self) -> int:
        return len(self.files)


@dataclass
class GitMetadata:
    """Provenance attached to a deployment."""

    branch: str
    commit_hash: str
    commit_message: str = ""
    commit_dirty: bool = False


@dataclass
class DeployResult:
    """Outcome of one pipeline run, handed back to the caller.

    alias_url is the production custom domain or the branch preview
    subdomain, depending on which branch was deployed.
    """

    deployment: Deployment
    project: Project
    environment_name: str
    is_production: bool
    alias_url: Optional[str]
    files_total: int = 0
    files_uploaded: int = 0
    bucket_count: int = 0

    def to_dict(self) -> dict:
        return {
            "deployment_id": self.deployment.id,
            "deployment_url": self.deployment.url,
            "environment": self.environment_name,
            "is_production": self.is_production,
            "alias_url": self.alias_url,
            "files_total": self.files_total,
            "files_uploaded": self.files_uploaded,
            "bucket_count": self.bucket_count,
        }
