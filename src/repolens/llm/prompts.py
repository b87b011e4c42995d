"""Prompt construction for repository analysis.

The prompt is provider-neutral text: a tree listing, the sampled files and a
trailing block fixing the JSON shape of the answer. Adapters wrap it in their
own wire format.

File blocks are fenced with a run of backticks longer than any run inside
the file, so a file cannot close its own block early.
"""

import re

from repolens.models.repository import RepositorySample, SourceFile

PROMPT_HEADER = "Analyze the following GitHub repository code."

OUTPUT_SCHEMA = """{
  "overview": "A high-level overview of the repository's architecture, purpose, and main components.",
  "files": [
    {
      "path": "path/to/file",
      "summary": "Summary of what this file does and its role in the project.",
      "suggestions": "Improvement suggestions for this file."
    }
  ],
  "generalSuggestions": [
    {
      "category": "Short category such as Architecture, Security, Testing or Performance",
      "text": "A concrete improvement suggestion for the entire repository."
    }
  ]
}"""

OUTPUT_INSTRUCTIONS = f"""Respond with a detailed analysis as a single JSON object in exactly this format:
{OUTPUT_SCHEMA}

RULES:
1. The response MUST be valid JSON matching the format above, with no text before or after it.
2. Do not wrap the JSON in markdown code fences.
3. "overview" is a string; "files" is a list with one entry per analyzed file,
   using the file paths exactly as given above; "generalSuggestions" is a list of
   objects with "category" and "text" strings.
4. "summary" and "suggestions" are plain strings."""

_BACKTICK_RUN = re.compile(r"`+")


def _fence_for(content: str) -> str:
    longest = max((len(run) for run in _BACKTICK_RUN.findall(content)), default=0)
    return "`" * max(3, longest + 1)


def format_tree(sample: RepositorySample) -> str:
    """One line per tree entry: path, kind and size."""
    return "\n".join(
        f"- {entry.path} ({entry.kind.value}, {entry.size_bytes} bytes)" for entry in sample.tree
    )


def format_file(source: SourceFile, index: int, total: int) -> str:
    """Render one sampled file as a fenced block."""
    fence = _fence_for(source.content)
    body = source.content if source.content.endswith("\n") else f"{source.content}\n"
    return (
        f"### File {index} of {total}: {source.path}\n"
        f"Language: {source.language}\n"
        f"{fence}{source.language}\n"
        f"{body}"
        f"{fence}"
    )


def build_analysis_prompt(sample: RepositorySample) -> str:
    """Serialize a repository sample into the analysis prompt.

    Args:
        sample: Tree and sampled files

    Returns:
        Prompt text, identical for identical samples
    """
    total = len(sample.files)
    sections = [
        PROMPT_HEADER,
        f"File Structure:\n{format_tree(sample) or '(empty tree)'}",
    ]

    if sample.files:
        blocks = "\n\n".join(
            format_file(source, index, total) for index, source in enumerate(sample.files, 1)
        )
        sections.append(f"File Contents ({total} files):\n\n{blocks}")
    else:
        sections.append("File Contents:\n(no file contents could be sampled)")

    sections.append(OUTPUT_INSTRUCTIONS)
    return "\n\n".join(sections) + "\n"
