import shutil
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from tqdm import tqdm

from ..exceptions import CopyError
from ..models import CopyOutcome, ImageRecord


class FileCopier:
    def __init__(self, dry_run: bool = False, progress: bool = True):
        self.dry_run = dry_run
        self.progress = progress

    def copy_all(self, planned: Sequence[Tuple[ImageRecord, Path]]) -> List[CopyOutcome]:
        """
        Copies each planned file. Originals are never moved or modified.
        A failed copy is recorded and the rest still run.
        """
        if not planned:
            logging.info("No files to copy.")
            return []

        logging.info(f"Copying {len(planned)} files (DryRun={self.dry_run})...")

        outcomes = []
        for record, dest in tqdm(planned, desc="Copying", disable=not self.progress):
            outcomes.append(self.copy_one(record, dest))
        return outcomes

    def copy_one(self, record: ImageRecord, dest: Path) -> CopyOutcome:
        src = record.source_path

        if self.dry_run:
            logging.info(f"[DRY RUN] Copy {src} -> {dest}")
            return CopyOutcome(record, dest, ok=True)

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(str(src), str(dest))
        except OSError as e:
            logging.error(f"Failed to copy {src} -> {dest}: {e}")
            return CopyOutcome(record, dest, ok=False, error=CopyError(str(e)))

        logging.debug(f"Copied {src} -> {dest}")
        return CopyOutcome(record, dest, ok=True)
