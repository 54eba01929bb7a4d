import pytest
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image

from image_sorter.models import FileAttributes, ImageRecord


@pytest.fixture
def make_jpeg():
    """Writes a small real JPEG, optionally carrying an EXIF DateTime tag."""
    def _make(path: Path, taken: Optional[datetime] = None, color: str = "red") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with Image.new("RGB", (10, 10), color=color) as im:
            if taken:
                exif = Image.Exif()
                exif[0x0132] = taken.strftime("%Y:%m:%d %H:%M:%S")  # IFD0 DateTime
                im.save(path, exif=exif)
            else:
                im.save(path)
        return path
    return _make


@pytest.fixture
def make_record():
    """Builds an in-memory ImageRecord without touching disk."""
    def _make(name: str, taken: Optional[datetime] = None, size: Optional[int] = 100,
              folder: str = "/src") -> ImageRecord:
        return ImageRecord(
            source_path=Path(folder) / name,
            file_name=name,
            attributes=FileAttributes(size_bytes=size),
            resolved_date=taken,
            date_source="EXIF DateTimeOriginal" if taken else None,
        )
    return _make
