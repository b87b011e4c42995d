"""Unit tests for concurrent content fetching."""

import asyncio

import httpx
import pytest

from repolens.analyzers.fetcher import ContentFetcher, detect_language
from repolens.errors import NotFoundError, RateLimitedError
from repolens.github import GitHubClient
from repolens.models import EntryKind, TreeEntry
from tests.fixtures import FakeGitHub


def _entry(path: str) -> TreeEntry:
    return TreeEntry(path, EntryKind.FILE, 10)


class TestDetectLanguage:
    """Tests for extension-based language tags."""

    @pytest.mark.parametrize(
        ("path", "language"),
        [
            ("src/app.tsx", "typescript"),
            ("lib/util.PY", "python"),
            ("README.md", "markdown"),
            ("main.rs", "unknown"),
            ("Dockerfile", "unknown"),
        ],
    )
    def test_detect(self, path: str, language: str) -> None:
        assert detect_language(path) == language


class TestContentFetcher:
    """Tests for ContentFetcher."""

    @pytest.fixture
    def http(self, fake_github: FakeGitHub) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler))

    @pytest.fixture
    def fetcher(self, http: httpx.AsyncClient) -> ContentFetcher:
        return ContentFetcher(GitHubClient("ghp_test", http_client=http), max_concurrency=2)

    def test_invalid_concurrency(self, http: httpx.AsyncClient) -> None:
        with pytest.raises(ValueError):
            ContentFetcher(GitHubClient("ghp_test", http_client=http), max_concurrency=0)

    @pytest.mark.asyncio
    async def test_fetch_one(self, fetcher: ContentFetcher) -> None:
        source = await fetcher.fetch_one("octo", "demo", "src/util.py", ref="main")

        assert source.path == "src/util.py"
        assert source.language == "python"
        assert source.content == "def answer():\n    return 42\n"

    @pytest.mark.asyncio
    async def test_fetch_one_not_a_file(self) -> None:
        """Test a non-file contents entry is reported as not found."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"type": "symlink", "target": "x"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            fetcher = ContentFetcher(GitHubClient("ghp_test", http_client=http))
            with pytest.raises(NotFoundError, match="not a file"):
                await fetcher.fetch_one("octo", "demo", "link")

    @pytest.mark.asyncio
    async def test_fetch_tree_failure_propagates(
        self, fake_github: FakeGitHub, fetcher: ContentFetcher
    ) -> None:
        fake_github.statuses["tree"] = 403

        with pytest.raises(RateLimitedError):
            await fetcher.fetch_tree("octo", "demo", "main")

    @pytest.mark.asyncio
    async def test_fetch_all_keeps_selector_order(self, fetcher: ContentFetcher) -> None:
        tree = await fetcher.fetch_tree("octo", "demo", "main")
        entries = [_entry("README.md"), _entry("src/app.js"), _entry("src/util.py")]

        sample = await fetcher.fetch_all("octo", "demo", "main", tree, entries)

        assert [f.path for f in sample.files] == ["README.md", "src/app.js", "src/util.py"]
        assert sample.tree == tuple(tree)

    @pytest.mark.asyncio
    async def test_one_failure_drops_only_that_file(
        self, fake_github: FakeGitHub, fetcher: ContentFetcher
    ) -> None:
        """Test two files selected, one fails: the survivor is kept."""
        fake_github.statuses["src/app.js"] = 500
        tree = await fetcher.fetch_tree("octo", "demo", "main")

        sample = await fetcher.fetch_all(
            "octo", "demo", "main", tree, [_entry("src/app.js"), _entry("src/util.py")]
        )

        assert [f.path for f in sample.files] == ["src/util.py"]

    @pytest.mark.asyncio
    async def test_undecodable_file_dropped(self, fake_github: FakeGitHub) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if "/contents/" in request.url.path:
                return httpx.Response(200, json={"type": "file", "content": "%%%"})
            return fake_github.handler(request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            fetcher = ContentFetcher(GitHubClient("ghp_test", http_client=http))
            tree = await fetcher.fetch_tree("octo", "demo", "main")
            sample = await fetcher.fetch_all("octo", "demo", "main", tree, [_entry("src/app.js")])

        assert sample.files == ()

    @pytest.mark.asyncio
    async def test_contents_read_at_branch(
        self, fake_github: FakeGitHub, fetcher: ContentFetcher
    ) -> None:
        tree = await fetcher.fetch_tree("octo", "demo", "dev")
        await fetcher.fetch_all("octo", "demo", "dev", tree, [_entry("src/app.js")])

        assert fake_github.content_requests()[0].url.params["ref"] == "dev"

    @pytest.mark.asyncio
    async def test_fan_out_is_bounded(self, fake_github: FakeGitHub) -> None:
        """Test no more than max_concurrency content requests overlap."""
        in_flight = 0
        peak = 0

        class SlowClient(GitHubClient):
            async def get_file_content(self, owner, repo, path, ref=None):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return {"type": "file", "content": ""}

        async with httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler)) as http:
            fetcher = ContentFetcher(SlowClient("ghp_test", http_client=http), max_concurrency=2)
            tree = [_entry(f"f{i}.js") for i in range(6)]
            sample = await fetcher.fetch_all("octo", "demo", "main", tree, tree)

        assert len(sample.files) == 6
        assert peak == 2
