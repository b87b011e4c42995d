"""repolens - LLM code review of GitHub repositories.

repolens samples the source files of a GitHub repository, sends them to a
configurable LLM provider (OpenRouter, Gemini or OpenAI) and normalizes the
answer into one review shape:

- Content selection: deterministic, bounded sampling of the repository tree
- Content fetching: concurrent retrieval of the sampled files
- Provider adapters: one wire protocol per backend, one canonical result
- Orchestration: per-repository state machine with a local result cache
"""

__version__ = "0.1.0"
__author__ = "repolens Contributors"
