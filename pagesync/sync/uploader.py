"""Batch uploader — sends packed buckets to the asset store.

One request per non-empty bucket, all in flight at once. Buckets are
independent, so there is no ordering between them. If any bucket fails
the stage fails; buckets that already landed stay in the store, which
is safe because the next run's check-missing call skips them.
"""

import asyncio
import base64
import logging

from pagesync.client.pages import PagesClient
from pagesync.sync.types import Bucket, FileRecord

logger = logging.getLogger(__name__)


async def upload_buckets(
    client: PagesClient,
    jwt: str,
    buckets: list[Bucket],
) -> int:
    """Upload every non-empty bucket concurrently.

    Returns the number of files uploaded. Re-raises the first failure
    once every request has settled.
    """
    pending = [b for b in buckets if b.files]
    if not pending:
        logger.info("Nothing to upload")
        return 0

    results = await asyncio.gather(
        *(
            _upload_bucket(client, jwt, number, bucket)
            for number, bucket in enumerate(pending)
        ),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        logger.error(
            "%d of %d buckets failed to upload",
            len(failures), len(pending),
        )
        raise failures[0]

    uploaded = sum(len(b.files) for b in pending)
    logger.info("Uploaded %d files in %d buckets", uploaded, len(pending))
    return uploaded


async def register_fingerprints(
    client: PagesClient,
    jwt: str,
    files: list[FileRecord],
) -> None:
    """Mark every scanned fingerprint as known to the store.

    Covers fingerprints that were already present too; re-registering
    is idempotent on the store side.
    """
    if not files:
        return
    fingerprints = sorted({f.fingerprint for f in files})
    await client.upsert_hashes(jwt, fingerprints)
    logger.info("Registered %d fingerprints", len(fingerprints))


def select_uploads(files: list[FileRecord], missing: set[str]) -> list[FileRecord]:
    """Pick one file per missing fingerprint.

    Files with identical content and extension share a fingerprint and
    therefore one stored asset; the first in scan order is the one sent.
    """
    chosen: dict[str, FileRecord] = {}
    for record in files:
        if record.fingerprint in missing:
            chosen.setdefault(record.fingerprint, record)
    return list(chosen.values())


def build_payload(bucket: Bucket) -> list[dict]:
    """Build the request body for one bucket. File read errors propagate."""
    return [
        {
            "key": record.fingerprint,
            "value": base64.b64encode(record.absolute_path.read_bytes()).decode("ascii"),
            "metadata": {"contentType": record.mime_type},
            "base64": True,
        }
        for record in bucket.files
    ]


async def _upload_bucket(
    client: PagesClient,
    jwt: str,
    number: int,
    bucket: Bucket,
) -> None:
    payload = await asyncio.to_thread(build_payload, bucket)
    logger.debug(
        "Uploading bucket %d: %d files, %d bytes",
        number, len(bucket.files), bucket.size,
    )
    await client.upload_assets(jwt, payload)
