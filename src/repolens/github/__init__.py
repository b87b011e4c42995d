"""GitHub hosting API access."""

from repolens.github.client import GitHubClient, decode_content

__all__ = ["GitHubClient", "decode_content"]
