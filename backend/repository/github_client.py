"""
GitHub REST API client

Async HTTP client for the handful of read-only endpoints the analyzer needs:
repository metadata, git trees, README and file contents.

API Base URL: https://api.github.com
Auth: optional ``Authorization: token <GITHUB_TOKEN>`` header
"""

import base64
import logging
from typing import Any

import httpx

from errors import AuthFailed, NotFound, RateLimited, UpstreamError

logger = logging.getLogger(__name__)

GITHUB_BASE_URL = "https://api.github.com"
USER_AGENT = "Doc-Creator-App"


class GitHubClient:
    """Async HTTP client for the GitHub REST API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = GITHUB_BASE_URL,
        timeout: float = 30.0,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def _request(self, path: str, params: dict | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises:
            NotFound: 404 (missing, or private without a token).
            RateLimited: 403.
            AuthFailed: 401.
            UpstreamError: any other error status or transport failure.
        """
        url = f"{self.base_url}{path}"
        logger.info(f"GitHub API request: GET {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self._headers(), params=params)
        except httpx.HTTPError as e:
            logger.error(f"GitHub API transport error for {url}: {e}")
            raise UpstreamError() from e

        if response.status_code >= 400:
            logger.error(
                f"GitHub API error {response.status_code} for {url}: {response.text[:500]}"
            )
            if response.status_code == 404:
                raise NotFound(
                    "Repository not found. Please check the URL and ensure the repository is public."
                )
            if response.status_code == 403:
                raise RateLimited()
            if response.status_code == 401:
                raise AuthFailed()
            raise UpstreamError()

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"GitHub API returned non-JSON body for {url}")
            raise UpstreamError() from e

    async def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        """Repository metadata (name, owner, default_branch, language, ...)."""
        return await self._request(f"/repos/{owner}/{repo}")

    async def get_tree(self, owner: str, repo: str, ref: str) -> list[dict[str, Any]]:
        """Recursive git tree for ``ref``. Returns the raw tree entries."""
        result = await self._request(
            f"/repos/{owner}/{repo}/git/trees/{ref}", params={"recursive": "1"}
        )
        if result.get("truncated"):
            logger.warning(f"GitHub tree for {owner}/{repo}@{ref} was truncated")
        return result.get("tree") or []

    async def get_readme(self, owner: str, repo: str, ref: str | None = None) -> str:
        """Decoded README text."""
        params = {"ref": ref} if ref else None
        result = await self._request(f"/repos/{owner}/{repo}/readme", params=params)
        return _decode_content(result)

    async def get_file(self, owner: str, repo: str, path: str, ref: str | None = None) -> str:
        """Decoded contents of a single file."""
        params = {"ref": ref} if ref else None
        result = await self._request(f"/repos/{owner}/{repo}/contents/{path}", params=params)
        return _decode_content(result)


def _decode_content(payload: dict[str, Any]) -> str:
    """Decode the base64 ``content`` field of a contents-API response."""
    content = payload.get("content") or ""
    if payload.get("encoding", "base64") != "base64":
        return content
    return base64.b64decode(content).decode("utf-8", errors="replace")
