"""Test fixtures for repolens.

In-memory stand-ins for the remote APIs, served through httpx.MockTransport
so no test touches the network:

- FakeGitHub: the git trees and contents endpoints of the GitHub REST API
- FakeLLM: chat-completions and generateContent backends

plus ReadOnlyStore, a LocalStore whose writes can be made to fail.
"""

import base64
import json
from typing import Any

import httpx

from repolens.stores import LocalStore

SAMPLE_TREE: list[dict[str, Any]] = [
    {"path": "src", "type": "tree"},
    {"path": "src/app.js", "type": "blob", "size": 120},
    {"path": "src/util.py", "type": "blob", "size": 80},
    {"path": "logo.png", "type": "blob", "size": 2048},
    {"path": "node_modules/lib/index.js", "type": "blob", "size": 10},
    {"path": "README.md", "type": "blob", "size": 40},
]

SAMPLE_FILES: dict[str, str] = {
    "src/app.js": "const util = require('./util');\nconsole.log(util.answer);\n",
    "src/util.py": "def answer():\n    return 42\n",
    "README.md": "# Demo\n\nA demo repository.\n",
}

SAMPLE_ANALYSIS: dict[str, Any] = {
    "overview": "A small demo project with a JavaScript entry point.",
    "files": [
        {
            "path": "src/app.js",
            "summary": "Entry point that prints the answer.",
            "suggestions": "Use ES modules.",
        },
    ],
    "generalSuggestions": [
        {"category": "Testing", "text": "Add unit tests."},
    ],
}


def encode_content(text: str) -> str:
    """Base64-encode like the contents API does, wrapped at 60 characters."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60)) + "\n"


class FakeGitHub:
    """Serves a repository tree and file contents.

    Attributes:
        tree: Raw tree entries returned by the trees endpoint
        files: File path -> text served by the contents endpoint
        statuses: Forced status codes, keyed by file path or "tree"
        requests: Every request received, in order
    """

    host = "api.github.com"

    def __init__(
        self,
        tree: list[dict[str, Any]] | None = None,
        files: dict[str, str] | None = None,
    ) -> None:
        self.tree = list(SAMPLE_TREE if tree is None else tree)
        self.files = dict(SAMPLE_FILES if files is None else files)
        self.statuses: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    def content_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/contents/" in r.url.path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if "/git/trees/" in path:
            if "tree" in self.statuses:
                return httpx.Response(self.statuses["tree"], json={"message": "error"})
            return httpx.Response(200, json={"sha": "abc123", "tree": self.tree, "truncated": False})

        if "/contents/" in path:
            file_path = path.split("/contents/", 1)[1]
            if file_path in self.statuses:
                return httpx.Response(self.statuses[file_path], json={"message": "error"})
            if file_path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(
                200,
                json={
                    "type": "file",
                    "path": file_path,
                    "encoding": "base64",
                    "content": encode_content(self.files[file_path]),
                },
            )

        return httpx.Response(404, json={"message": "Not Found"})


class FakeLLM:
    """Answers chat-completions and generateContent requests.

    Attributes:
        text: Generated text returned inside the backend envelope
        status: Status code of every response
        requests: Every request received, in order
    """

    def __init__(self, text: str | None = None, status: int = 200) -> None:
        self.text = json.dumps(SAMPLE_ANALYSIS) if text is None else text
        self.status = status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.status >= 400:
            return httpx.Response(
                self.status, json={"error": {"message": "No auth credentials found"}}
            )

        if request.url.path.endswith(":generateContent"):
            return httpx.Response(
                200, json={"candidates": [{"content": {"parts": [{"text": self.text}]}}]}
            )
        return httpx.Response(
            200, json={"choices": [{"message": {"role": "assistant", "content": self.text}}]}
        )


def route(github: FakeGitHub, llm: FakeLLM) -> httpx.MockTransport:
    """One transport serving both fakes, split by host."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == github.host:
            return github.handler(request)
        return llm.handler(request)

    return httpx.MockTransport(handler)


class ReadOnlyStore(LocalStore):
    """In-memory LocalStore whose writes raise PermissionError while read_only is set."""

    def __init__(self) -> None:
        super().__init__(None)
        self.read_only = False

    def _persist(self, entries: dict[str, Any]) -> None:
        if self.read_only:
            raise PermissionError("read-only state dir")
