from pathlib import Path
from collections import defaultdict
from typing import Dict, List, Sequence, Set, Tuple

from .. import config
from ..models import ImageRecord


class DestinationPlanner:
    def __init__(self, dest_root: Path, stamp_names: bool = False):
        self.dest_root = Path(dest_root)
        self.stamp_names = stamp_names
        # Cache used names to prevent collisions within a single run
        self.used_names: Dict[Path, Set[str]] = defaultdict(set)

    def plan_all(self, records: Sequence[ImageRecord]) -> List[Tuple[ImageRecord, Path]]:
        """
        Calculates destination paths in the given (sorted) order, so the
        earliest record of a colliding group keeps the plain name.
        """
        return [(record, self.plan(record)) for record in records]

    def plan(self, record: ImageRecord) -> Path:
        dt = record.resolved_date
        if dt is None:
            raise ValueError(f"Cannot plan a destination for undated {record.source_path}")

        # Determine Folder: YYYY/YYYY-MM
        folder = self.dest_root / config.FOLDER_PATTERN.format(year=dt.year, month=dt.month)

        # Determine Filename
        name = record.file_name
        if self.stamp_names:
            stem = Path(name).stem
            ext = Path(name).suffix
            name = f"{stem}_{dt.strftime(config.STAMP_FORMAT)}{ext}"

        return self._resolve_collision(folder, name)

    def _resolve_collision(self, folder: Path, filename: str) -> Path:
        """Ensures filename is unique in the destination folder."""
        stem = Path(filename).stem
        ext = Path(filename).suffix
        candidate = filename
        counter = 1

        # Check against this run's plan and anything already on disk
        while candidate in self.used_names[folder] or (folder / candidate).exists():
            candidate = f"{stem}_{counter}{ext}"
            counter += 1

        self.used_names[folder].add(candidate)
        return folder / candidate
