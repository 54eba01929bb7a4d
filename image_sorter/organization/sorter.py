from typing import List, Sequence

from ..models import ImageRecord


def sort_chronologically(records: Sequence[ImageRecord]) -> List[ImageRecord]:
    """
    Returns a new list ordered by resolved date, oldest first.

    sorted() is stable, so records with the same date keep their input order
    and repeated runs over the same input produce the same sequence.
    """
    undated = [r.source_path for r in records if r.resolved_date is None]
    if undated:
        raise ValueError(f"Cannot order undated records: {undated}")
    return sorted(records, key=lambda r: r.resolved_date)
