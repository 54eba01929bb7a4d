import logging
from pathlib import Path
from typing import Iterable, Optional

from . import config
from .metadata.extract import MetadataExtractor, TagReader
from .models import RunReport
from .organization.dedupe import Deduplicator
from .organization.mover import FileCopier
from .organization.rules import DestinationPlanner
from .organization.sorter import sort_chronologically
from .scanning.filesystem import FileEnumerator
from .store import RecordStore


class ImageSorterApp:
    def __init__(self,
                 extensions: Optional[Iterable[str]] = None,
                 ignore_case: bool = False,
                 max_workers: int = config.DEFAULT_MAX_WORKERS,
                 tag_reader: Optional[TagReader] = None,
                 progress: bool = True):
        self.enumerator = FileEnumerator(extensions, ignore_case=ignore_case)
        self.extractor = MetadataExtractor(tag_reader)
        self.max_workers = max_workers
        self.progress = progress

    def run(self,
            src_root: Path,
            dest_root: Optional[Path] = None,
            dry_run: bool = False,
            stamp_names: bool = False) -> RunReport:
        """
        Executes the pipeline.
        1. Enumerate image files
        2. Extract metadata (Record Store)
        3. Deduplicate
        4. Sort by resolved date
        5. Plan destinations & copy

        Only DirectoryAccessError escapes; every per-file problem ends up in
        the returned report.
        """
        src_root = Path(src_root).absolute()
        dest_root = Path(dest_root).absolute() if dest_root else src_root / config.DEFAULT_OUTPUT_FOLDER
        report = RunReport(src_root=src_root, dest_root=dest_root, dry_run=dry_run)

        # --- Step 1: Enumerate ---
        # Raises before the output tree is touched
        logging.info(f"Scanning {src_root}...")
        paths = self.enumerator.list_files(src_root, skip_dirs={dest_root})
        report.discovered = len(paths)
        logging.info(f"Found {len(paths)} image files.")

        # --- Step 2: Extract ---
        store = RecordStore(self.extractor.extract_all(paths, max_workers=self.max_workers))
        report.records = list(store.records)
        report.issues = store.issues
        report.undated = store.undated()
        logging.info(f"Extracted {len(store)} records ({len(report.undated)} undated).")

        # --- Step 3: Deduplicate ---
        deduped = Deduplicator().dedupe(store.dated())
        report.duplicates = deduped.discarded
        logging.info(f"Deduplicated: {len(deduped.kept)} kept, {len(deduped.discarded)} duplicates.")

        # --- Step 4: Sort ---
        ordered = sort_chronologically(deduped.kept)

        # --- Step 5: Plan & Copy ---
        if not dry_run:
            dest_root.mkdir(parents=True, exist_ok=True)
        planner = DestinationPlanner(dest_root, stamp_names=stamp_names)
        planned = planner.plan_all(ordered)

        copier = FileCopier(dry_run=dry_run, progress=self.progress)
        report.outcomes = copier.copy_all(planned)

        logging.info(f"Done. {report.copied} copied, {report.failed} failed.")
        return report
