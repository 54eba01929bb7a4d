"""
Custom exception hierarchy for the image sorter.

Only DirectoryAccessError is raised out of a run. The per-file kinds are
instantiated and attached to the run report so one bad file never stops
the batch.
"""


class ImageSorterError(Exception):
    """Base exception for all image sorter errors."""
    pass


class DirectoryAccessError(ImageSorterError):
    """Raised when the input directory is missing or unreadable."""
    pass


class AttributeReadError(ImageSorterError):
    """Filesystem attributes of a file could not be (fully) read."""
    pass


class MetadataParseError(ImageSorterError):
    """Embedded metadata could not be parsed; the file is treated as having no tags."""
    pass


class UndatedRecordWarning(ImageSorterError):
    """No embedded date and no filesystem timestamp; the file cannot be ordered."""
    pass


class CopyError(ImageSorterError):
    """Copying a file into the output tree failed."""
    pass
