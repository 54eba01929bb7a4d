from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .exceptions import ImageSorterError, CopyError


@dataclass(frozen=True)
class FileAttributes:
    """
    Filesystem-level facts about a file. Any of them may be missing
    (no birth time on most Linux filesystems, failed stat, ...).
    """
    size_bytes: Optional[int] = None
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    accessed: Optional[datetime] = None


@dataclass(frozen=True)
class ImageRecord:
    """
    Represents one image found during a scan.
    """
    source_path: Path
    file_name: str
    attributes: FileAttributes = field(default_factory=FileAttributes)

    # "<directory> <tag>" -> printable value, in reader order
    tags: Dict[str, str] = field(default_factory=dict)

    # Sort key and the rule that produced it (tag key, 'created' or 'modified')
    resolved_date: Optional[datetime] = None
    date_source: Optional[str] = None

    @property
    def is_dated(self) -> bool:
        return self.resolved_date is not None

    @property
    def size_bytes(self) -> Optional[int]:
        return self.attributes.size_bytes


@dataclass
class FileIssue:
    """A recoverable, per-file problem."""
    path: Path
    error: ImageSorterError

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    def __str__(self) -> str:
        return f"{self.kind}: {self.path}: {self.error}"


@dataclass
class ExtractionResult:
    record: ImageRecord
    issues: List[FileIssue] = field(default_factory=list)


@dataclass
class DuplicateMatch:
    discarded: ImageRecord
    kept: ImageRecord


@dataclass
class DedupeResult:
    kept: List[ImageRecord]
    discarded: List[DuplicateMatch] = field(default_factory=list)


@dataclass
class CopyOutcome:
    record: ImageRecord
    destination: Path
    ok: bool
    error: Optional[CopyError] = None


@dataclass
class RunReport:
    """
    Aggregated result of one run. Replaces running counters: apart from
    `discovered`, every count is derived from the lists it holds.
    """
    src_root: Path
    dest_root: Path
    dry_run: bool = False
    discovered: int = 0
    records: List[ImageRecord] = field(default_factory=list)
    issues: List[FileIssue] = field(default_factory=list)
    duplicates: List[DuplicateMatch] = field(default_factory=list)
    undated: List[ImageRecord] = field(default_factory=list)
    outcomes: List[CopyOutcome] = field(default_factory=list)

    @property
    def extracted(self) -> int:
        return len(self.records)

    @property
    def copied(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.ok)

    @property
    def warned(self) -> int:
        return len({issue.path for issue in self.issues})

    def issues_of(self, kind: type) -> List[FileIssue]:
        return [i for i in self.issues if isinstance(i.error, kind)]
