import os
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import exifread
from PIL import ExifTags, Image

from .. import config
from ..exceptions import AttributeReadError, MetadataParseError, UndatedRecordWarning
from ..models import ExtractionResult, FileAttributes, FileIssue, ImageRecord

# (directory, tag name, printable value)
TagTriple = Tuple[str, str, str]
TagReader = Callable[[Path], List[TagTriple]]

# Pointer tags in IFD0; their targets are read as separate directories
EXIF_IFD_POINTER = 0x8769
GPS_IFD_POINTER = 0x8825


def read_embedded_tags(path: Path) -> List[TagTriple]:
    """
    Reads embedded metadata as (directory, tag, value) triples.

    Strategies:
      - 'exifread' first (JPEG, TIFF, PNG, WebP, HEIC).
      - Pillow's getexif() when exifread finds nothing. Pillow also rejects
        files it cannot identify, which is how corrupt images surface.

    Raises whatever the underlying readers raise; the caller decides how
    failures are reported.
    """
    with path.open('rb') as f:
        # details=False skips MakerNotes, which are large and vendor specific
        tags = exifread.process_file(f, details=False, extract_thumbnail=False)

    triples = []
    for key, value in tags.items():
        directory, _, name = key.partition(' ')
        if not name:
            directory, name = '', key
        triples.append((directory, name, str(value).strip()))

    if triples:
        return triples
    return _read_pillow_exif(path)


def _read_pillow_exif(path: Path) -> List[TagTriple]:
    triples = []
    with Image.open(path) as img:
        exif = img.getexif()
        for tag_id, value in exif.items():
            if tag_id in (EXIF_IFD_POINTER, GPS_IFD_POINTER):
                continue
            triples.append(('Image', _tag_name(tag_id), _describe(value)))
        for tag_id, value in exif.get_ifd(EXIF_IFD_POINTER).items():
            triples.append(('EXIF', _tag_name(tag_id), _describe(value)))
    return triples


def _tag_name(tag_id: int) -> str:
    return ExifTags.TAGS.get(tag_id, f"Tag 0x{tag_id:04X}")


def _describe(value) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace').rstrip('\x00').strip()
    return str(value).strip()


def parse_exif_date(value: str) -> Optional[datetime]:
    """
    Parses an EXIF date string. Handles the standard "YYYY:MM:DD HH:MM:SS",
    ISO-8601 and sub-second suffixes. Returns a naive datetime or None.
    """
    if not value:
        return None

    clean = value.replace("UTC", "").strip().rstrip('\x00')

    # 1. Standard EXIF style "YYYY:MM:DD HH:MM:SS"
    exif_style = clean.replace(":", "-", 2)
    if "." in exif_style:
        exif_style = exif_style.split(".")[0]
    try:
        return datetime.strptime(exif_style, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        pass

    # 2. ISO format (e.g. 2020-01-01T12:00:00)
    try:
        dt = datetime.fromisoformat(clean)
    except ValueError:
        return None
    # Embedded dates are compared as naive local times
    return dt.replace(tzinfo=None)


def resolve_date(tags: Dict[str, str],
                 attributes: FileAttributes) -> Tuple[Optional[datetime], Optional[str]]:
    """
    Picks the sort date: embedded date tag, then creation time, then
    modification time. Returns (date, source) or (None, None).
    """
    for key in config.DATE_TAGS:
        if key in tags:
            dt = parse_exif_date(tags[key])
            if dt:
                return dt, key
    if attributes.created is not None:
        return attributes.created, 'created'
    if attributes.modified is not None:
        return attributes.modified, 'modified'
    return None, None


def _is_excluded(name: str) -> bool:
    return name.replace(' ', '').lower() in config.EXCLUDED_TAGS


class MetadataExtractor:
    """
    Builds an ImageRecord per file from filesystem attributes and embedded tags.

    Every per-file failure is captured as a FileIssue on the result; nothing
    raised here escapes extract().
    """

    def __init__(self, tag_reader: Optional[TagReader] = None):
        self.tag_reader = tag_reader or read_embedded_tags

    def extract_all(self, paths: Sequence[Path], max_workers: int = 1) -> List[ExtractionResult]:
        """Extracts every path. Results are always in input order."""
        if max_workers <= 1:
            return [self.extract(p) for p in paths]

        logging.info(f"Parallel extraction: {len(paths)} files, {max_workers} workers")
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            # map() yields in submission order
            return list(executor.map(self.extract, paths))

    def extract(self, path: Path) -> ExtractionResult:
        path = Path(path).absolute()
        issues: List[FileIssue] = []

        attributes = self._read_attributes(path, issues)
        tags = self._read_tags(path, issues)
        resolved, source = resolve_date(tags, attributes)

        if resolved is None:
            issues.append(FileIssue(path, UndatedRecordWarning(
                "No embedded date tag and no filesystem timestamp")))
            logging.warning(f"No usable date for {path}")

        record = ImageRecord(
            source_path=path,
            file_name=path.name,
            attributes=attributes,
            tags=tags,
            resolved_date=resolved,
            date_source=source,
        )
        logging.debug(f"Loaded {path.name}: {resolved} ({source}), {len(tags)} tags")
        return ExtractionResult(record, issues)

    # --- Internal Extraction Helpers ---

    def _read_attributes(self, path: Path, issues: List[FileIssue]) -> FileAttributes:
        try:
            st = path.stat()
        except OSError as e:
            issues.append(FileIssue(path, AttributeReadError(f"stat failed: {e}")))
            logging.warning(f"Could not read attributes of {path}: {e}")
            return FileAttributes()

        # Birth time is only exposed on some platforms; st_ctime is creation
        # time on Windows but inode change time elsewhere.
        created_ts = getattr(st, 'st_birthtime', None)
        if created_ts is None and os.name == 'nt':
            created_ts = st.st_ctime

        return FileAttributes(
            size_bytes=st.st_size,
            created=self._to_datetime(path, 'created', created_ts, issues),
            modified=self._to_datetime(path, 'modified', st.st_mtime, issues),
            accessed=self._to_datetime(path, 'accessed', st.st_atime, issues),
        )

    def _to_datetime(self, path: Path, field_name: str, ts: Optional[float],
                     issues: List[FileIssue]) -> Optional[datetime]:
        if ts is None:
            return None
        try:
            return datetime.fromtimestamp(ts)
        except (OverflowError, OSError, ValueError) as e:
            issues.append(FileIssue(path, AttributeReadError(f"bad {field_name} timestamp {ts!r}: {e}")))
            logging.warning(f"Unusable {field_name} time on {path}: {e}")
            return None

    def _read_tags(self, path: Path, issues: List[FileIssue]) -> Dict[str, str]:
        try:
            triples = self.tag_reader(path)
        except Exception as e:
            issues.append(FileIssue(path, MetadataParseError(str(e) or type(e).__name__)))
            logging.warning(f"Metadata parsing failed for {path}: {e}")
            return {}

        tags: Dict[str, str] = {}
        for directory, name, value in triples:
            if _is_excluded(name):
                continue
            key = f"{directory} {name}" if directory else name
            tags[key] = value
        return tags
