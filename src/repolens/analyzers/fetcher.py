"""Content fetching for the sampled files.

Files are fetched concurrently with a bounded fan-out. A failure on one file
is logged and the file is dropped; the rest of the batch continues. The
resulting sample keeps the selector's ordering regardless of completion order.
"""

import asyncio
import logging
from collections.abc import Sequence

from repolens.errors import NotFoundError, RepoLensError
from repolens.github.client import GitHubClient, decode_content
from repolens.models.repository import RepositorySample, SourceFile, TreeEntry

logger = logging.getLogger(__name__)

LANGUAGE_BY_EXTENSION = {
    "js": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "java": "java",
    "html": "html",
    "css": "css",
    "json": "json",
    "md": "markdown",
}

UNKNOWN_LANGUAGE = "unknown"


def detect_language(path: str) -> str:
    """Infer a language tag from the file extension alone."""
    basename = path.rsplit("/", 1)[-1]
    if "." not in basename:
        return UNKNOWN_LANGUAGE
    extension = basename.rsplit(".", 1)[-1].lower()
    return LANGUAGE_BY_EXTENSION.get(extension, UNKNOWN_LANGUAGE)


class ContentFetcher:
    """Retrieves and decodes sampled files from the hosting API."""

    def __init__(self, client: GitHubClient, max_concurrency: int = 5) -> None:
        """Initialize the fetcher.

        Args:
            client: Authenticated GitHub client
            max_concurrency: Maximum number of in-flight content requests
        """
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1 (got {max_concurrency})")
        self._client = client
        self._max_concurrency = max_concurrency

    async def fetch_tree(self, owner: str, repo: str, branch: str) -> list[TreeEntry]:
        """Fetch the full tree. Failures propagate: without a tree there is no sample."""
        tree = await self._client.get_tree(owner, repo, branch)
        logger.info("Fetched tree for %s/%s@%s: %d entries", owner, repo, branch, len(tree))
        return tree

    async def fetch_one(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> SourceFile:
        """Fetch and decode a single file.

        Raises:
            NotFoundError: If the path is missing or is not a file
            RepoLensError: Other hosting API failures
            ValueError: If the content cannot be decoded
        """
        data = await self._client.get_file_content(owner, repo, path, ref=ref)
        if data.get("type") != "file":
            raise NotFoundError(f"The specified path is not a file: {path}")

        content = decode_content(str(data.get("content") or ""))
        return SourceFile(path=path, content=content, language=detect_language(path))

    async def fetch_all(
        self,
        owner: str,
        repo: str,
        branch: str,
        tree: Sequence[TreeEntry],
        entries: Sequence[TreeEntry],
    ) -> RepositorySample:
        """Fetch the selected entries and assemble the sample.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch the tree was read at
            tree: Full repository tree (kept whole in the sample)
            entries: Selected entries, in selector order

        Returns:
            RepositorySample with the files that could be fetched
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def fetch_entry(entry: TreeEntry) -> SourceFile | None:
            async with semaphore:
                try:
                    return await self.fetch_one(owner, repo, entry.path, ref=branch)
                except (RepoLensError, ValueError) as e:
                    logger.warning("Failed to fetch content for %s: %s", entry.path, e)
                    return None

        results = await asyncio.gather(*(fetch_entry(entry) for entry in entries))
        files = [source for source in results if source is not None]

        dropped = len(entries) - len(files)
        if dropped:
            logger.warning(
                "Dropped %d of %d selected files for %s/%s", dropped, len(entries), owner, repo
            )

        return RepositorySample(tree=tuple(tree), files=tuple(files))
