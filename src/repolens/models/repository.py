"""Repository content entities.

- RepoKey: (owner, name, branch) triple identifying one analyzable unit
- TreeEntry: one node of a repository file tree at a branch
- SourceFile: decoded content of one sampled file
- RepositorySample: tree plus sampled files, handed from fetch to prompt stage
"""

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class RepoKey:
    """Identifies one analyzable repository at a branch.

    Attributes:
        owner: Repository owner login
        name: Repository name
        branch: Branch (or other ref) being analyzed
    """

    owner: str
    name: str
    branch: str

    def __post_init__(self) -> None:
        """Reject empty components."""
        for label, value in (("owner", self.owner), ("name", self.name), ("branch", self.branch)):
            if not value or not value.strip():
                raise ValueError(f"Repository {label} cannot be empty")

    @property
    def cache_key(self) -> str:
        """Key of the persisted cache record for this repository.

        Owner and repository names cannot contain "/" or "@", so the key is
        unambiguous even for branch names that do.
        """
        return f"repo-analysis-{self}"

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}@{self.branch}"


class EntryKind(Enum):
    """Kind of a tree node."""

    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class TreeEntry:
    """Immutable snapshot of one node in a repository tree.

    Attributes:
        path: Path relative to the repository root ("/" separated)
        kind: File or directory
        size_bytes: Size in bytes (0 for directories)
    """

    path: str
    kind: EntryKind
    size_bytes: int = 0

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def extension(self) -> str:
        """Lowercased extension without the dot, or "" when there is none."""
        basename = self.path.rsplit("/", 1)[-1]
        if "." not in basename:
            return ""
        return basename.rsplit(".", 1)[-1].lower()

    def to_dict(self) -> dict[str, str | int]:
        return {"path": self.path, "kind": self.kind.value, "size_bytes": self.size_bytes}


@dataclass(frozen=True)
class SourceFile:
    """Decoded text of one sampled file.

    Attributes:
        path: Path relative to the repository root
        content: Decoded text content
        language: Language tag inferred from the extension ("unknown" if unmapped)
    """

    path: str
    content: str
    language: str = "unknown"


@dataclass(frozen=True)
class RepositorySample:
    """Unit passed from the fetch stage to the prompt stage.

    Attributes:
        tree: Full repository tree, in hosting API order
        files: Sampled files, in selector order

    Validation Rules:
        - every files[i].path must be present in tree
    """

    tree: tuple[TreeEntry, ...] = field(default_factory=tuple)
    files: tuple[SourceFile, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Normalize sequences to tuples and check file membership."""
        object.__setattr__(self, "tree", tuple(self.tree))
        object.__setattr__(self, "files", tuple(self.files))

        known_paths = {entry.path for entry in self.tree}
        unknown = [f.path for f in self.files if f.path not in known_paths]
        if unknown:
            raise ValueError(f"Sampled files not present in tree: {', '.join(unknown)}")
