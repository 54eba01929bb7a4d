import os
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

from .. import config
from ..exceptions import DirectoryAccessError


class FileEnumerator:
    """
    Lists image files under a root directory.

    A file matches when its name ends with one of the configured extensions.
    Matching is case-sensitive unless ignore_case is set.
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None, ignore_case: bool = False):
        self.ignore_case = ignore_case
        exts = []
        for ext in (extensions if extensions is not None else config.IMAGE_EXTS):
            if ext.lower() in config.UNREADABLE_EXTS:
                logging.warning(f"Ignoring extension {ext}: metadata cannot be read from it.")
                continue
            exts.append(ext.lower() if ignore_case else ext)
        self.extensions = tuple(exts)

    def matches(self, name: str) -> bool:
        if self.ignore_case:
            name = name.lower()
        return name.endswith(self.extensions)

    def list_files(self, root: Path, skip_dirs: Optional[Set[Path]] = None) -> List[Path]:
        """Materialized form of iter_files; raises before yielding anything if root is bad."""
        return list(self.iter_files(root, skip_dirs))

    def iter_files(self, root: Path, skip_dirs: Optional[Set[Path]] = None) -> Iterator[Path]:
        root = Path(root).absolute()
        self._check_root(root)
        skip_dirs = {Path(d).absolute() for d in (skip_dirs or set())}
        return self._walk(root, skip_dirs)

    def _check_root(self, root: Path):
        # exists() itself raises when a parent directory cannot be searched
        try:
            if not root.exists():
                raise DirectoryAccessError(f"Input directory {root} does not exist.")
            if not root.is_dir():
                raise DirectoryAccessError(f"Input path {root} is not a directory.")
            with os.scandir(root):
                pass
        except OSError as e:
            raise DirectoryAccessError(f"Cannot read input directory {root}: {e}") from e

    def _walk(self, root: Path, skip_dirs: Set[Path]) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()
            if current in skip_dirs:
                logging.debug(f"Skipping {current}")
                continue

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError:
                logging.warning(f"Permission denied: {current}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: e.name.lower())

            dirs = []
            files = []
            for e in entries:
                # follow_symlinks=False drops links to files and dirs alike
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False) and self.matches(e.name):
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
