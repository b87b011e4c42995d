"""Repository content acquisition.

- selector: deterministic, bounded sampling of a repository tree
- fetcher: concurrent retrieval and decoding of the sampled files
"""

from repolens.analyzers.fetcher import ContentFetcher, detect_language
from repolens.analyzers.selector import (
    EXCLUDED_SEGMENTS,
    MAX_FILE_BYTES,
    MAX_FILES,
    SOURCE_EXTENSIONS,
    select_files,
)

__all__ = [
    "ContentFetcher",
    "EXCLUDED_SEGMENTS",
    "MAX_FILES",
    "MAX_FILE_BYTES",
    "SOURCE_EXTENSIONS",
    "detect_language",
    "select_files",
]
