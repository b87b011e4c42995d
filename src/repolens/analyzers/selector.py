"""Content selection: which files of a repository tree are worth analyzing.

Rules, applied in order:
1. files only
2. at most MAX_FILE_BYTES
3. no path segment in EXCLUDED_SEGMENTS
4. extension in SOURCE_EXTENSIONS
5. sorted by (extension priority, size); Python's stable sort keeps tree
   order for full ties
6. first MAX_FILES entries

Pure function: no I/O, same tree in, same ordered subset out.
"""

from collections.abc import Iterable

from repolens.models.repository import TreeEntry

MAX_FILE_BYTES = 100 * 1024
MAX_FILES = 20

EXCLUDED_SEGMENTS = frozenset({"node_modules", "build", "dist", ".git"})

# Allowlist and priority order in one: earlier = sampled first
SOURCE_EXTENSIONS = ("js", "jsx", "ts", "tsx", "py", "java", "html", "css", "json", "md")

_PRIORITY = {ext: index for index, ext in enumerate(SOURCE_EXTENSIONS)}


def is_excluded_path(path: str) -> bool:
    """True when any segment of the path is denylisted."""
    return any(segment in EXCLUDED_SEGMENTS for segment in path.split("/"))


def is_candidate(entry: TreeEntry) -> bool:
    """Apply the filter rules (1-4) to a single entry."""
    if not entry.is_file:
        return False
    if entry.size_bytes > MAX_FILE_BYTES:
        return False
    if is_excluded_path(entry.path):
        return False
    return entry.extension in _PRIORITY


def select_files(tree: Iterable[TreeEntry], limit: int = MAX_FILES) -> list[TreeEntry]:
    """Select the ordered, bounded subset of files to analyze.

    Args:
        tree: Full repository tree
        limit: Maximum number of files to keep

    Returns:
        Selected entries, highest priority first
    """
    candidates = [entry for entry in tree if is_candidate(entry)]
    candidates.sort(key=lambda entry: (_PRIORITY[entry.extension], entry.size_bytes))
    return candidates[:limit]
