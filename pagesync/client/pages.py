"""Pages API client.

Wraps one httpx.AsyncClient for the whole run. Account-scoped calls
authenticate with the caller's API token; the asset endpoints
(check-missing, upload, upsert-hashes) use the short-lived upload JWT
handed out by get_upload_token().

Every response is an envelope {"success": ..., "result": ...}; methods
return the unwrapped result. Any non-2xx status raises PagesAPIError
with the body text attached; a request that gets no response at all
(timeout, connection failure) raises PagesTransportError.
"""

import json
import logging
from typing import Any, Optional

import httpx

from pagesync import __version__
from pagesync.client.types import Deployment, Project
from pagesync.errors import PagesAPIError, PagesTransportError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_USER_AGENT = f"pagesync/{__version__}"

# Timeout for every API call, in seconds
DEFAULT_TIMEOUT = 60.0


class PagesClient:
    """Async client for the Pages project, asset and deployment endpoints.

    Use as an async context manager so the connection pool is closed:

        async with PagesClient(token) as client:
            project = await client.get_project(account_id, name)
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_token = api_token
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": user_agent},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "PagesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Account-scoped endpoints (API token)
    # ------------------------------------------------------------------

    async def get_project(self, account_id: str, project_name: str) -> Project:
        result = await self._request(
            "GET",
            _project_path(account_id, project_name),
            token=self._api_token,
        )
        return Project.from_api(result)

    async def get_upload_token(self, account_id: str, project_name: str) -> str:
        result = await self._request(
            "GET",
            f"{_project_path(account_id, project_name)}/upload-token",
            token=self._api_token,
        )
        return result["jwt"]

    async def create_deployment(
        self,
        account_id: str,
        project_name: str,
        fields: dict[str, str],
        files: dict[str, bytes],
    ) -> Deployment:
        """POST the manifest and metadata as multipart form data.

        *fields* become plain form fields; *files* become file parts named
        after their key (e.g. "_redirects").
        """
        # A None filename makes httpx emit a plain form field, which keeps
        # the request multipart even when no control files are attached.
        multipart: dict[str, tuple] = {
            name: (None, value.encode("utf-8")) for name, value in fields.items()
        }
        for name, content in files.items():
            multipart[name] = (name, content, "application/octet-stream")

        result = await self._request(
            "POST",
            f"{_project_path(account_id, project_name)}/deployments",
            token=self._api_token,
            multipart=multipart,
        )
        return Deployment.from_api(result)

    # ------------------------------------------------------------------
    # Asset endpoints (upload JWT)
    # ------------------------------------------------------------------

    async def check_missing(self, jwt: str, fingerprints: set[str]) -> set[str]:
        """Return the subset of *fingerprints* the store does not hold yet."""
        if not fingerprints:
            return set()

        result = await self._request(
            "POST",
            "/pages/assets/check-missing",
            token=jwt,
            body={"hashes": sorted(fingerprints)},
        )
        # Never trust the store to add keys we did not ask about
        return set(result or []) & fingerprints

    async def upload_assets(self, jwt: str, payload: list[dict]) -> None:
        await self._request("POST", "/pages/assets/upload", token=jwt, body=payload)

    async def upsert_hashes(self, jwt: str, fingerprints: list[str]) -> None:
        await self._request(
            "POST",
            "/pages/assets/upsert-hashes",
            token=jwt,
            body={"hashes": fingerprints},
        )

    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        token: str,
        body: Any = None,
        multipart: Optional[dict] = None,
    ) -> Any:
        kwargs: dict[str, Any] = {"headers": {"Authorization": f"Bearer {token}"}}
        if body is not None:
            kwargs["json"] = body
        if multipart is not None:
            kwargs["files"] = multipart

        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise PagesTransportError(method, path, exc) from exc
        logger.debug("%s %s -> %d", method, path, response.status_code)

        if not response.is_success:
            raise PagesAPIError(
                response.status_code,
                response.text,
                method=method,
                path=path,
            )

        return _unwrap(response, method, path)


def _project_path(account_id: str, project_name: str) -> str:
    return f"/accounts/{account_id}/pages/projects/{project_name}"


def _unwrap(response: httpx.Response, method: str, path: str) -> Any:
    if not response.content:
        return None
    try:
        payload = response.json()
    except json.JSONDecodeError as exc:
        raise PagesAPIError(
            response.status_code,
            response.text,
            method=method,
            path=path,
        ) from exc
    if isinstance(payload, dict) and "result" in payload:
        return payload["result"]
    return payload
