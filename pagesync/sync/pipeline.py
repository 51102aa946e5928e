"""Deploy pipeline — drives one run from scan to deployment.

Stages run strictly in order:

    Scan -> Diff -> Pack -> Upload -> Register -> Submit

Each stage fails the run on its first error; nothing is retried and
nothing is resumed. Re-running from scratch after a failure is safe
because the diff stage skips whatever already reached the store.
"""

import asyncio
import time
from pathlib import Path
from typing import Optional

import structlog

from pagesync.client.pages import PagesClient
from pagesync.client.types import Deployment, Project
from pagesync.core.config import Settings
from pagesync.sync.deployment import submit_deployment
from pagesync.sync.packer import pack_buckets
from pagesync.sync.scanner import scan_directory
from pagesync.sync.types import DeployResult, GitMetadata
from pagesync.sync.uploader import register_fingerprints, select_uploads, upload_buckets

events = structlog.get_logger("pagesync.pipeline")


async def deploy(
    settings: Settings,
    git: GitMetadata,
    client: Optional[PagesClient] = None,
) -> DeployResult:
    """Run the full pipeline and return the created deployment.

    *client* is injectable for tests; by default one is built from
    *settings* and closed when the run ends.
    """
    owns_client = client is None
    if client is None:
        client = PagesClient(
            settings.api_token,
            base_url=settings.api_base_url,
            user_agent=settings.user_agent,
            timeout=settings.http_timeout_seconds,
        )

    try:
        return await _run(settings, git, client)
    finally:
        if owns_client:
            await client.aclose()


async def _run(settings: Settings, git: GitMetadata, client: PagesClient) -> DeployResult:
    start = time.monotonic()
    root = Path(settings.directory).resolve()

    project = await client.get_project(settings.account_id, settings.project_name)
    events.info(
        "project_loaded",
        project=project.name,
        production_branch=project.production_branch,
    )

    # 1. Scan
    files = await asyncio.to_thread(scan_directory, root, settings.hash_workers)
    events.info("scan_complete", directory=str(root), files=len(files))

    # 2. Diff
    jwt = await client.get_upload_token(settings.account_id, settings.project_name)
    missing = await client.check_missing(jwt, {f.fingerprint for f in files})
    to_upload = select_uploads(files, missing)
    events.info(
        "diff_complete",
        files=len(files),
        missing=len(to_upload),
        already_stored=len({f.fingerprint for f in files}) - len(to_upload),
    )

    # 3. Pack
    buckets = pack_buckets(to_upload)

    # 4. Upload
    uploaded = await upload_buckets(client, jwt, buckets)

    # 5. Register
    await register_fingerprints(client, jwt, files)

    # 6. Submit
    deployment = await submit_deployment(
        client,
        settings.account_id,
        settings.project_name,
        root,
        files,
        git,
    )

    is_production = is_production_branch(project, git.branch)
    result = DeployResult(
        deployment=deployment,
        project=project,
        environment_name=environment_name(project, git.branch, is_production),
        is_production=is_production,
        alias_url=resolve_alias_url(project, deployment, is_production),
        files_total=len(files),
        files_uploaded=uploaded,
        bucket_count=len(buckets),
    )

    events.info(
        "deploy_complete",
        deployment_id=deployment.id,
        url=deployment.url,
        alias_url=result.alias_url,
        uploaded=uploaded,
        duration_seconds=round(time.monotonic() - start, 3),
    )
    return result


def is_production_branch(project: Project, branch: str) -> bool:
    return bool(project.production_branch) and project.production_branch == branch


def environment_name(project: Project, branch: str, is_production: bool) -> str:
    """Human-readable environment, e.g. "site (Preview - feature/x)"."""
    name = project.name
    if is_production:
        return f"{name} (Production)"
    return f"{name} (Preview - {branch})"


def resolve_alias_url(
    project: Project,
    deployment: Deployment,
    is_production: bool,
) -> Optional[str]:
    """Stable URL for the deployed branch.

    Production uses the last attached domain (usually the custom one);
    previews use "<branch>.<project subdomain>" as reported by the store.
    """
    if is_production:
        if not project.domains:
            return deployment.url or None
        return _with_scheme(project.domains[-1])

    if not deployment.branch or not project.subdomain:
        return deployment.url or None
    return f"https://{deployment.branch}.{project.subdomain}"


def _with_scheme(host: str) -> str:
    if host.startswith(("http://", "https://")):
        return host
    return f"https://{host}"
