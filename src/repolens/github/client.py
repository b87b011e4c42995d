"""Async client for the two GitHub REST endpoints the pipeline consumes.

- get_tree: recursive git tree of a branch
- get_file_content: contents API entry of one path

Status mapping: 404 -> NotFoundError, 403 -> RateLimitedError, any other
non-2xx or connection failure -> TransportError. No retries.
"""

import base64
import binascii
import logging
from typing import Any
from urllib.parse import quote

import httpx

from repolens.errors import ConfigError, NotFoundError, RateLimitedError, TransportError
from repolens.models.repository import EntryKind, TreeEntry

logger = logging.getLogger(__name__)

API_HEADERS = {
    "Accept": "application/vnd.github+json",
    "X-GitHub-Api-Version": "2022-11-28",
}


class GitHubClient:
    """Thin async wrapper over the GitHub REST API.

    The client owns an httpx.AsyncClient unless one is injected; injected
    clients are left open on close().
    """

    def __init__(
        self,
        token: str | None,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: GitHub token sent as a bearer credential
            api_url: REST API base URL
            timeout: Request timeout in seconds
            http_client: Pre-built client (tests inject a MockTransport here)

        Raises:
            ConfigError: If no token is given
        """
        if not token:
            raise ConfigError("GitHub token is required to call the API")

        self._token = token
        self._api_url = api_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}", **API_HEADERS}

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self._api_url}{path}"
        try:
            response = await self._http.get(url, headers=self._headers(), params=params)
        except httpx.HTTPError as e:
            raise TransportError(f"GitHub API request failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError()
        if response.status_code == 403:
            raise RateLimitedError()
        if not response.is_success:
            raise TransportError(
                f"GitHub API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                "GitHub API returned invalid JSON", status_code=response.status_code
            ) from e

    async def get_tree(self, owner: str, repo: str, ref: str) -> list[TreeEntry]:
        """Fetch the full recursive tree of a repository at a ref.

        Args:
            owner: Repository owner
            repo: Repository name
            ref: Branch name, tag or commit SHA

        Returns:
            Tree entries in API order ("blob" -> file, anything else -> dir)
        """
        data = await self._get_json(
            f"/repos/{quote(owner)}/{quote(repo)}/git/trees/{quote(ref, safe='')}",
            params={"recursive": "1"},
        )
        if not isinstance(data, dict) or not isinstance(data.get("tree"), list):
            raise TransportError("GitHub API returned a tree without entries")

        if data.get("truncated"):
            logger.warning("Tree for %s/%s@%s was truncated by the API", owner, repo, ref)

        entries = []
        for item in data["tree"]:
            if not isinstance(item, dict) or not item.get("path"):
                continue
            kind = EntryKind.FILE if item.get("type") == "blob" else EntryKind.DIR
            entries.append(
                TreeEntry(
                    path=str(item["path"]),
                    kind=kind,
                    size_bytes=int(item.get("size") or 0),
                )
            )
        return entries

    async def get_file_content(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> dict[str, Any]:
        """Fetch the contents API entry for a path.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path relative to the repository root
            ref: Optional branch to read from (default branch when None)

        Returns:
            The raw API payload ({"type": ..., "content": base64 text, ...})
        """
        params = {"ref": ref} if ref else None
        data = await self._get_json(
            f"/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path)}",
            params=params,
        )
        if not isinstance(data, dict):
            # Directories come back as a list
            return {"type": "dir", "content": ""}
        return data


def decode_content(encoded: str) -> str:
    """Decode a base64 contents API payload to text.

    Embedded newlines are ignored; invalid UTF-8 sequences are replaced.

    Raises:
        ValueError: If the payload is not valid base64
    """
    compact = "".join(encoded.split())
    try:
        raw = base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 content: {e}") from e
    return raw.decode("utf-8", errors="replace")
