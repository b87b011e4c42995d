"""Unit tests for the analysis pipeline."""

import json

import httpx
import pytest

from repolens.config import RepoLensConfig
from repolens.errors import ConfigError, NotFoundError, ParseError, ProviderError
from repolens.github import GitHubClient
from repolens.models import ProviderConfig, RepoKey
from repolens.pipeline import AnalysisPipeline
from tests.fixtures import SAMPLE_ANALYSIS, FakeGitHub, FakeLLM


@pytest.fixture
def github_http(fake_github: FakeGitHub) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_github.handler))


@pytest.fixture
def llm_http(fake_llm: FakeLLM) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_llm.handler))


@pytest.fixture
def pipeline(github_http: httpx.AsyncClient, llm_http: httpx.AsyncClient) -> AnalysisPipeline:
    return AnalysisPipeline(GitHubClient("ghp_test", http_client=github_http), llm_http)


OPENAI = ProviderConfig(provider_id="openai", api_key="sk-test")


class TestAnalysisPipeline:
    """Tests for AnalysisPipeline.run."""

    @pytest.mark.asyncio
    async def test_end_to_end(
        self,
        pipeline: AnalysisPipeline,
        fake_github: FakeGitHub,
        fake_llm: FakeLLM,
        repo_key: RepoKey,
    ) -> None:
        """Test tree, selected contents and one provider call produce the result."""
        result = await pipeline.run(repo_key, OPENAI)

        assert result.overview == SAMPLE_ANALYSIS["overview"]
        fetched = [r.url.path.split("/contents/")[1] for r in fake_github.content_requests()]
        assert sorted(fetched) == ["README.md", "src/app.js", "src/util.py"]
        assert len(fake_llm.requests) == 1

    @pytest.mark.asyncio
    async def test_prompt_contains_sample(
        self, pipeline: AnalysisPipeline, fake_llm: FakeLLM, repo_key: RepoKey
    ) -> None:
        await pipeline.run(repo_key, OPENAI)

        prompt = json.loads(fake_llm.requests[0].content)["messages"][0]["content"]
        assert "### File 1 of 3: src/app.js" in prompt
        assert "- logo.png (file, 2048 bytes)" in prompt
        assert "return 42" in prompt

    @pytest.mark.asyncio
    async def test_proceeds_with_surviving_file(
        self,
        pipeline: AnalysisPipeline,
        fake_github: FakeGitHub,
        fake_llm: FakeLLM,
        repo_key: RepoKey,
    ) -> None:
        """Test a failed file fetch only removes that file from the prompt."""
        fake_github.statuses["src/app.js"] = 500

        await pipeline.run(repo_key, OPENAI)

        prompt = json.loads(fake_llm.requests[0].content)["messages"][0]["content"]
        assert "src/app.js (file" in prompt
        assert "### File 1 of 2: src/util.py" in prompt
        assert "require('./util')" not in prompt

    @pytest.mark.asyncio
    async def test_collect_sample_order(self, pipeline: AnalysisPipeline, repo_key: RepoKey) -> None:
        sample = await pipeline.collect_sample(repo_key)

        assert [f.path for f in sample.files] == ["src/app.js", "src/util.py", "README.md"]

    @pytest.mark.asyncio
    async def test_tree_not_found(
        self, pipeline: AnalysisPipeline, fake_github: FakeGitHub, fake_llm: FakeLLM, repo_key: RepoKey
    ) -> None:
        fake_github.statuses["tree"] = 404

        with pytest.raises(NotFoundError):
            await pipeline.run(repo_key, OPENAI)
        assert fake_llm.requests == []

    @pytest.mark.asyncio
    async def test_missing_credential_before_network(
        self, pipeline: AnalysisPipeline, fake_github: FakeGitHub, repo_key: RepoKey
    ) -> None:
        with pytest.raises(ConfigError, match="not configured"):
            await pipeline.run(repo_key, None)
        assert fake_github.requests == []

    @pytest.mark.asyncio
    async def test_provider_error_propagates(
        self, pipeline: AnalysisPipeline, fake_llm: FakeLLM, repo_key: RepoKey
    ) -> None:
        fake_llm.status = 401

        with pytest.raises(ProviderError) as exc_info:
            await pipeline.run(repo_key, OPENAI)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_parse_error_propagates(
        self, pipeline: AnalysisPipeline, fake_llm: FakeLLM, repo_key: RepoKey
    ) -> None:
        fake_llm.text = "Here is my review: looks fine."

        with pytest.raises(ParseError):
            await pipeline.run(repo_key, ProviderConfig(provider_id="gemini", api_key="AIza"))

    @pytest.mark.asyncio
    async def test_configured_model_used(
        self,
        github_http: httpx.AsyncClient,
        llm_http: httpx.AsyncClient,
        fake_llm: FakeLLM,
        repo_key: RepoKey,
    ) -> None:
        config = RepoLensConfig()
        config.llm.models["openai"] = "gpt-4o-mini"
        pipeline = AnalysisPipeline(
            GitHubClient("ghp_test", http_client=github_http), llm_http, config=config
        )

        await pipeline.run(repo_key, OPENAI)

        assert json.loads(fake_llm.requests[0].content)["model"] == "gpt-4o-mini"
