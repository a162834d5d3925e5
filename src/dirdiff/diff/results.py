"""Typed outcome collections produced by the classifier."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class RenamedEntry:
    """Same content and directory, new file name."""

    hash: str
    old_name: str
    new_name: str
    path: str


@dataclass(slots=True, frozen=True)
class MovedEntry:
    """Same content and file name, new directory."""

    hash: str
    name: str
    old_path: str
    new_path: str


@dataclass(slots=True, frozen=True)
class ChangedEntry:
    """Same file name and directory, different content."""

    name: str
    path: str
    old_hash: str
    new_hash: str


@dataclass(slots=True, frozen=True)
class AddedEntry:
    hash: str
    name: str
    path: str


@dataclass(slots=True, frozen=True)
class MissingEntry:
    hash: str
    name: str
    path: str


ResolvedEntry = RenamedEntry | MovedEntry | ChangedEntry | AddedEntry | MissingEntry

CATEGORIES = ("renamed", "moved", "changed", "added", "missing")


@dataclass(slots=True, frozen=True)
class ResultSet:
    """Read-only classification outcome; unchanged files are only counted."""

    latest: int | None
    previous: int | None
    unchanged_count: int
    renamed: tuple[RenamedEntry, ...]
    moved: tuple[MovedEntry, ...]
    changed: tuple[ChangedEntry, ...]
    added: tuple[AddedEntry, ...]
    missing: tuple[MissingEntry, ...]
    changed_detection: bool = False

    @property
    def has_changes(self) -> bool:
        return any(self.category(name) for name in CATEGORIES)

    def category(self, name: str) -> tuple[ResolvedEntry, ...]:
        """Return one reported category by name."""
        if name not in CATEGORIES:
            raise KeyError(name)
        return getattr(self, name)

    def counts(self) -> dict[str, int]:
        output = {"unchanged": self.unchanged_count}
        for name in CATEGORIES:
            output[name] = len(self.category(name))
        return output


@dataclass(slots=True)
class ResultAccumulator:
    """Mutable per-phase collector frozen into a ResultSet at the end of a run."""

    latest: int | None = None
    previous: int | None = None
    changed_detection: bool = False
    unchanged_count: int = 0
    renamed: list[RenamedEntry] = field(default_factory=list)
    moved: list[MovedEntry] = field(default_factory=list)
    changed: list[ChangedEntry] = field(default_factory=list)
    added: list[AddedEntry] = field(default_factory=list)
    missing: list[MissingEntry] = field(default_factory=list)

    def freeze(self) -> ResultSet:
        return ResultSet(
            latest=self.latest,
            previous=self.previous,
            unchanged_count=self.unchanged_count,
            renamed=tuple(self.renamed),
            moved=tuple(self.moved),
            changed=tuple(self.changed),
            added=tuple(self.added),
            missing=tuple(self.missing),
            changed_detection=self.changed_detection,
        )
