"""Deployment submitter — registers the scanned tree as a deployment.

The manifest covers every scanned file, uploaded this run or not.
Two optional control files (_redirects, _headers) are read from the
root of the upload directory and attached when present.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pagesync.client.pages import PagesClient
from pagesync.client.types import Deployment
from pagesync.sync.types import FileRecord, GitMetadata

logger = logging.getLogger(__name__)

# Control files attached to the deployment request, in this order
CONTROL_FILES = ("_redirects", "_headers")


def build_manifest(files: list[FileRecord]) -> dict[str, str]:
    """Map each public path to its fingerprint."""
    return {f.public_path: f.fingerprint for f in sorted(files, key=lambda f: f.public_path)}


def read_control_file(root: Path, name: str) -> Optional[bytes]:
    """Return the contents of *root*/*name*, or None if it does not exist.

    Only absence is tolerated. A control file that exists but cannot be
    read (permissions, it is a directory) raises, since deploying
    without it would silently change routing.
    """
    try:
        return (Path(root) / name).read_bytes()
    except FileNotFoundError:
        return None


def build_form_fields(files: list[FileRecord], git: GitMetadata) -> dict[str, str]:
    return {
        "manifest": json.dumps(build_manifest(files)),
        "branch": git.branch,
        "commit_hash": git.commit_hash,
        "commit_message": git.commit_message,
        "commit_dirty": "true" if git.commit_dirty else "false",
    }


async def submit_deployment(
    client: PagesClient,
    account_id: str,
    project_name: str,
    root: Path,
    files: list[FileRecord],
    git: GitMetadata,
) -> Deployment:
    """Create the deployment record. Its success is the end of the run."""
    attachments: dict[str, bytes] = {}
    for name in CONTROL_FILES:
        content = read_control_file(root, name)
        if content is not None:
            attachments[name] = content

    fields = build_form_fields(files, git)

    logger.info(
        "Creating deployment for %s on branch %s (%d files, control files: %s)",
        project_name,
        git.branch,
        len(files),
        ", ".join(attachments) or "none",
    )

    deployment = await client.create_deployment(account_id, project_name, fields, attachments)
    logger.info("Created deployment %s at %s", deployment.id, deployment.url)
    return deployment
