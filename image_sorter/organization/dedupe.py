import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import DedupeResult, DuplicateMatch, ImageRecord


class Deduplicator:
    """
    Collapses records that describe the same logical image.

    Two records are duplicates when they share file name AND byte size. The
    path is not part of the key: the same image copied to two folders
    should still collapse. Records of unknown size never match anything.
    """

    def dedupe(self, records: Sequence[ImageRecord]) -> DedupeResult:
        # Key -> index into `kept`
        slots: Dict[Tuple[str, int], int] = {}
        kept: List[ImageRecord] = []
        discarded: List[DuplicateMatch] = []

        for record in records:
            key = self._key(record)
            if key is None or key not in slots:
                if key is not None:
                    slots[key] = len(kept)
                kept.append(record)
                continue

            idx = slots[key]
            current = kept[idx]
            if self._earlier(record, current):
                # The earlier capture wins and takes the group's slot
                kept[idx] = record
                loser, winner = current, record
            else:
                loser, winner = record, current

            discarded.append(DuplicateMatch(discarded=loser, kept=winner))

        # Report against the final winner of each group
        final = {self._key(r): r for r in kept if self._key(r) is not None}
        discarded = [DuplicateMatch(m.discarded, final[self._key(m.discarded)]) for m in discarded]

        for match in discarded:
            logging.info(f"Duplicate: {match.discarded.source_path} (kept {match.kept.source_path})")

        return DedupeResult(kept=kept, discarded=discarded)

    def _key(self, record: ImageRecord) -> Optional[Tuple[str, int]]:
        if record.size_bytes is None:
            return None
        return (record.file_name, record.size_bytes)

    def _earlier(self, candidate: ImageRecord, current: ImageRecord) -> bool:
        """Strictly earlier; ties keep the record seen first."""
        if candidate.resolved_date is None:
            return False
        if current.resolved_date is None:
            return True
        return candidate.resolved_date < current.resolved_date
