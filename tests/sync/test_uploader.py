"""Unit tests for the batch uploader.

The PagesClient is replaced with an AsyncMock; file contents come from
real temp files.
"""

import base64
from unittest.mock import AsyncMock

import pytest

from pagesync.client.pages import PagesClient
from pagesync.errors import PagesAPIError
from pagesync.sync.scanner import scan_directory
from pagesync.sync.types import Bucket
from pagesync.sync.uploader import (
    build_payload,
    register_fingerprints,
    select_uploads,
    upload_buckets,
)


@pytest.fixture
def records(tmp_path):
    (tmp_path / "index.html").write_bytes(b"<p>home</p>")
    (tmp_path / "app.css").write_bytes(b"p{}")
    (tmp_path / "copy.css").write_bytes(b"p{}")
    return scan_directory(tmp_path)


@pytest.fixture
def client():
    return AsyncMock(spec=PagesClient)


def _bucket(*records):
    bucket = Bucket()
    for record in records:
        bucket.add(record)
    return bucket


class TestSelectUploads:
    def test_one_file_per_missing_fingerprint(self, records):
        # app.css and copy.css share content and extension
        missing = {r.fingerprint for r in records}

        chosen = select_uploads(records, missing)

        assert [r.public_path for r in chosen] == ["/app.css", "/index.html"]

    def test_only_missing_fingerprints(self, records):
        index = next(r for r in records if r.public_path == "/index.html")
        assert select_uploads(records, {index.fingerprint}) == [index]

    def test_nothing_missing(self, records):
        assert select_uploads(records, set()) == []


class TestBuildPayload:
    def test_payload_shape(self, records):
        index = next(r for r in records if r.public_path == "/index.html")
        (item,) = build_payload(_bucket(index))
        assert item == {
            "key": index.fingerprint,
            "value": base64.b64encode(b"<p>home</p>").decode(),
            "metadata": {"contentType": "text/html"},
            "base64": True,
        }

    def test_missing_file_raises(self, records, tmp_path):
        (tmp_path / "index.html").unlink()
        with pytest.raises(FileNotFoundError):
            build_payload(_bucket(*records))


class TestUploadBuckets:
    @pytest.mark.asyncio
    async def test_one_request_per_non_empty_bucket(self, client, records):
        buckets = [_bucket(records[0]), Bucket(), _bucket(*records[1:])]

        uploaded = await upload_buckets(client, "jwt-1", buckets)

        assert uploaded == 3
        assert client.upload_assets.await_count == 2
        sizes = sorted(len(call.args[1]) for call in client.upload_assets.await_args_list)
        assert sizes == [1, 2]
        assert all(call.args[0] == "jwt-1" for call in client.upload_assets.await_args_list)

    @pytest.mark.asyncio
    async def test_no_buckets_makes_no_requests(self, client):
        assert await upload_buckets(client, "jwt", []) == 0
        assert await upload_buckets(client, "jwt", [Bucket(), Bucket()]) == 0
        client.upload_assets.assert_not_called()

    @pytest.mark.asyncio
    async def test_any_failure_fails_the_stage(self, client, records):
        client.upload_assets.side_effect = [
            None,
            PagesAPIError(500, "internal error"),
        ]
        buckets = [_bucket(records[0]), _bucket(records[1])]

        with pytest.raises(PagesAPIError) as exc_info:
            await upload_buckets(client, "jwt", buckets)

        assert exc_info.value.body == "internal error"
        # Both buckets were attempted; nothing is cancelled or rolled back
        assert client.upload_assets.await_count == 2


class TestRegisterFingerprints:
    @pytest.mark.asyncio
    async def test_registers_all_unique_fingerprints(self, client, records):
        await register_fingerprints(client, "jwt", records)

        client.upsert_hashes.assert_awaited_once()
        jwt, hashes = client.upsert_hashes.await_args.args
        assert jwt == "jwt"
        # app.css and copy.css share content and extension
        assert hashes == sorted({r.fingerprint for r in records})
        assert len(hashes) == 2

    @pytest.mark.asyncio
    async def test_empty_scan_skips_request(self, client):
        await register_fingerprints(client, "jwt", [])
        client.upsert_hashes.assert_not_called()
