"""Bucket packer: groups the files to upload into bounded requests.

First-fit with a rotating start offset, over files sorted largest
first. This is a heuristic, not an optimal bin packing.

Rotation: file number i starts its search at bucket i % len(buckets)
and wraps around. Without it every file would be tried against bucket 0
first, so the largest files would all stack into one request while the
other initial buckets sat empty, and the concurrent upload would
degrade into one big serial request.
"""

import logging
from typing import Iterable, Optional

from pagesync.errors import BucketSizeError
from pagesync.sync.types import (
    INITIAL_BUCKET_COUNT,
    MAX_BUCKET_BYTES,
    MAX_BUCKET_ITEMS,
    Bucket,
    FileRecord,
)

logger = logging.getLogger(__name__)


def pack_buckets(
    files: Iterable[FileRecord],
    max_bytes: int = MAX_BUCKET_BYTES,
    max_items: int = MAX_BUCKET_ITEMS,
    initial_buckets: int = INITIAL_BUCKET_COUNT,
) -> list[Bucket]:
    """Partition *files* into non-empty buckets within both limits.

    Raises:
        BucketSizeError: A single file is larger than *max_bytes*. Checked
            for every file before any packing happens.
    """
    # Largest first; sorted() is stable so equal sizes keep input order
    ordered = sorted(files, key=lambda f: f.size, reverse=True)

    for record in ordered:
        if record.size > max_bytes:
            raise BucketSizeError(record.public_path, record.size, max_bytes)

    buckets = [Bucket() for _ in range(max(initial_buckets, 1))]

    for index, record in enumerate(ordered):
        bucket = _find_bucket(buckets, record, index, max_bytes, max_items)
        if bucket is None:
            bucket = Bucket()
            buckets.append(bucket)
        bucket.add(record)

    packed = [b for b in buckets if b.files]
    logger.info(
        "Packed %d files (%d bytes) into %d buckets",
        len(ordered), sum(b.size for b in packed), len(packed),
    )
    return packed


def _find_bucket(
    buckets: list[Bucket],
    record: FileRecord,
    index: int,
    max_bytes: int,
    max_items: int,
) -> Optional[Bucket]:
    """Return the first bucket, starting at the rotated offset, with room."""
    count = len(buckets)
    start = index % count
    for step in range(count):
        bucket = buckets[(start + step) % count]
        if bucket.can_accept(record, max_bytes, max_items):
            return bucket
    return None
