from pathlib import Path
from typing import Iterable, Iterator, List, Set, Tuple

from .models import ExtractionResult, FileIssue, ImageRecord


class RecordStore:
    """
    Append-only, ordered collection of the records built in one run.

    Holds the issues reported while building them as well. Source paths are
    unique; adding a second record for the same path is a bug upstream.
    """

    def __init__(self, results: Iterable[ExtractionResult] = ()):
        self._records: List[ImageRecord] = []
        self._issues: List[FileIssue] = []
        self._paths: Set[Path] = set()
        for result in results:
            self.add(result)

    def add(self, result: ExtractionResult):
        record = result.record
        if record.source_path in self._paths:
            raise ValueError(f"Duplicate source path in record store: {record.source_path}")
        self._paths.add(record.source_path)
        self._records.append(record)
        self._issues.extend(result.issues)

    @property
    def records(self) -> Tuple[ImageRecord, ...]:
        return tuple(self._records)

    @property
    def issues(self) -> List[FileIssue]:
        return list(self._issues)

    def dated(self) -> List[ImageRecord]:
        return [r for r in self._records if r.is_dated]

    def undated(self) -> List[ImageRecord]:
        return [r for r in self._records if not r.is_dated]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ImageRecord]:
        return iter(self._records)
