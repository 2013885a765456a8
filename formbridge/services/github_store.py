"""
FormBridge - GitHub Contents API Store
=======================================

What:  ContentStore implementation backed by the GitHub REST "contents" endpoints.
How:   One pooled httpx.AsyncClient with the bearer token in its default headers.
       GET  /repos/{owner}/{repo}/contents/{path}  → base64 content + sha
       PUT  /repos/{owner}/{repo}/contents/{path}  → {message, content, sha?, branch?}
Who:   Built once in the application lifespan from Settings.content_store_config().

Status mapping:
    200/201           → success
    404               → RemoteNotFoundError (or None with missing_ok)
    409               → RemoteWriteConflictError (sha does not match)
    422 mentioning sha → RemoteWriteConflictError (file appeared, no sha sent)
    anything else     → RemoteStoreError with the response body in its context
    httpx.HTTPError   → RemoteStoreError with status_code None
"""

import base64
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from formbridge.config import ContentStoreConfig
from formbridge.exceptions import (
    RemoteNotFoundError,
    RemoteStoreError,
    RemoteWriteConflictError,
)
from formbridge.services.content_store import ContentStore, StoredFile, WriteResult

logger = logging.getLogger(__name__)

GITHUB_JSON = "application/vnd.github+json"
GITHUB_RAW = "application/vnd.github.raw"
API_VERSION = "2022-11-28"


class GitHubContentStore(ContentStore):
    """
    Reads and writes files in a single fixed repository.

    Args:
        config:    Credential, repository coordinates and timeout
        transport: Optional httpx transport (tests pass an httpx.MockTransport)
    """

    def __init__(
        self,
        config: ContentStoreConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.client = httpx.AsyncClient(
            base_url=config.api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": GITHUB_JSON,
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": "formbridge",
            },
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )
        logger.info(
            "GitHubContentStore initialized for %s/%s (branch=%s)",
            config.owner,
            config.repo,
            config.branch or "default",
        )

    def contents_url(self, path: str) -> str:
        """Resource address for a repository path; segments are escaped, '/' is kept."""
        escaped = quote(path.strip("/"), safe="/")
        return f"/repos/{quote(self.config.owner)}/{quote(self.config.repo)}/contents/{escaped}"

    async def read(self, path: str, missing_ok: bool = False) -> Optional[StoredFile]:
        params = {"ref": self.config.branch} if self.config.branch else None
        response = await self._request("GET", path, params=params)

        if response.status_code == 404:
            if missing_ok:
                logger.info("Content store: %s does not exist yet", path)
                return None
            raise RemoteNotFoundError(path=path, context={"response": _body(response)})
        self._raise_for_status(response, path)

        data = response.json()
        if isinstance(data, list):
            raise RemoteStoreError(
                message=f"'{path}' is a directory, not a file",
                path=path,
                status_code=response.status_code,
            )

        sha = data["sha"]
        if data.get("encoding") == "base64" and data.get("content") is not None:
            # GitHub wraps the base64 payload at 60 columns; b64decode drops the newlines
            content = base64.b64decode(data["content"])
        else:
            # Files above the inline size limit come back with encoding "none"
            content = await self._read_raw(path, params)

        logger.debug("Content store: read %s (%d bytes, sha=%s)", path, len(content), sha[:7])
        return StoredFile(path=path, content=content, sha=sha)

    async def write(
        self,
        path: str,
        content: bytes,
        message: str,
        sha: Optional[str] = None,
    ) -> WriteResult:
        body: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
        }
        if sha:
            body["sha"] = sha
        if self.config.branch:
            body["branch"] = self.config.branch

        response = await self._request("PUT", path, json=body)

        if response.status_code == 409:
            raise RemoteWriteConflictError(
                path=path, sha=sha, status_code=409, context={"response": _body(response)}
            )
        if response.status_code == 422 and "sha" in str(_body(response)).lower():
            raise RemoteWriteConflictError(
                path=path, sha=sha, status_code=422, context={"response": _body(response)}
            )
        self._raise_for_status(response, path)

        data = response.json()
        result = WriteResult(
            path=path,
            sha=data.get("content", {}).get("sha", ""),
            commit_sha=data.get("commit", {}).get("sha"),
        )
        logger.info(
            "Content store: %s %s (%d bytes, commit=%s)",
            "updated" if sha else "created",
            path,
            len(content),
            (result.commit_sha or "?")[:7],
        )
        return result

    async def check(self) -> bool:
        """GET the repository metadata; True when the token can see the repository."""
        try:
            response = await self.client.get(
                f"/repos/{quote(self.config.owner)}/{quote(self.config.repo)}"
            )
        except httpx.HTTPError as e:
            logger.warning("Content store health check failed: %s", str(e))
            return False
        if response.status_code != 200:
            logger.warning("Content store health check returned HTTP %d", response.status_code)
            return False
        return True

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("GitHubContentStore closed")

    async def _read_raw(self, path: str, params: Optional[Dict[str, str]]) -> bytes:
        response = await self._request("GET", path, params=params, headers={"Accept": GITHUB_RAW})
        self._raise_for_status(response, path)
        return response.content

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        start_time = time.perf_counter()
        try:
            response = await self.client.request(method, self.contents_url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Content store %s %s failed: %s", method, path, str(e))
            raise RemoteStoreError(
                message=f"Could not reach the content store ({type(e).__name__})",
                path=path,
                context={"method": method, "error": str(e)},
            ) from e

        logger.debug(
            "Content store %s %s → %d in %.0fms",
            method,
            path,
            response.status_code,
            (time.perf_counter() - start_time) * 1000,
        )
        return response

    @staticmethod
    def _raise_for_status(response: httpx.Response, path: str) -> None:
        if response.is_success:
            return
        context: Dict[str, Any] = {"response": _body(response)}
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is not None:
            context["rate_limit_remaining"] = remaining
        raise RemoteStoreError(
            message=f"Content store returned HTTP {response.status_code} for '{path}'",
            path=path,
            status_code=response.status_code,
            context=context,
        )


def _body(response: httpx.Response) -> Any:
    """Response payload for logging: parsed JSON when possible, else text."""
    try:
        return response.json()
    except ValueError:
        return response.text
