"""Core data models shared across playable components."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict

ARCHIVE_VARIABLE = "EMBED_ARCHIVE_DATA"


@dataclass(frozen=True)
class Asset:
    """A file read from the build output, identified by its relative path."""

    path: str
    content: bytes
    source: Path | None = None

    @classmethod
    def from_file(cls, file_path: Path, base_dir: Path) -> "Asset":
        relative = file_path.resolve().relative_to(base_dir.resolve()).as_posix()
        return cls(path=relative, content=file_path.read_bytes(), source=file_path)

    @property
    def size(self) -> int:
        return len(self.content)


class DirectiveKind(str, Enum):
    """Grammar a directive was discovered by."""

    SCRIPT = "script"
    COMMENT = "comment"
    IMAGE = "image"


@dataclass(frozen=True)
class Directive:
    """A single embeddable reference found in a text buffer."""

    matched_text: str
    path: str
    kind: DirectiveKind
    start: int
    end: int
    compress: bool = False
    extension: str | None = None

    def overlaps(self, other: "Directive") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass
class ArchiveManifest:
    """Relative path to base64 payload mapping emitted as a script module."""

    entries: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        return f"var {ARCHIVE_VARIABLE} = " + json.dumps(self.entries, indent=2)

    def __len__(self) -> int:
        return len(self.entries)


__all__ = ["ARCHIVE_VARIABLE", "ArchiveManifest", "Asset", "Directive", "DirectiveKind"]
