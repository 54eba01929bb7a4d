"""
Configuration constants for the image sorter.
"""

# --- File Type Definitions ---
# Matched against the end of the file name, case-sensitive unless the
# enumerator is told to ignore case.
IMAGE_EXTS = (
    '.jpg', '.jpeg', '.png', '.gif', '.bmp',
    '.webp', '.tiff', '.tif', '.avif', '.ico',
)

# Vector formats have no raster metadata for the tag reader to parse
UNREADABLE_EXTS = {'.svg'}

# --- Metadata Parsing ---
# Priority order for the embedded "date taken" lookup
DATE_TAGS = [
    'EXIF DateTimeOriginal',
    'EXIF DateTimeDigitized',
    'Image DateTime',
]

# Tag names dropped from every record, compared lowercase without spaces.
# User comments hold arbitrary free text.
EXCLUDED_TAGS = {'usercomment'}

# --- Organization ---
FOLDER_PATTERN = "{year}/{year}-{month:02d}"
STAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
DEFAULT_OUTPUT_FOLDER = "output_images"

# --- Performance ---
# Extraction workers; 1 keeps the whole pipeline on a single thread
DEFAULT_MAX_WORKERS = 1
