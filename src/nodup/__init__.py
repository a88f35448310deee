"""
nodup - Find duplicate images and set them aside.

Images are grouped by dimension, format and byte size before their pixels
are compared, so only plausible duplicates are ever decoded. Duplicates can
be copied or moved into a date-partitioned bin.
"""

__version__ = "0.1.0"
__author__ = "nodup Contributors"

from nodup.core.bin import Action, Bin
from nodup.core.deduplicator import ImageDeduplicator, build_deduplicator
from nodup.core.processor import Collision, DuplicateProcessor

__all__ = [
    "Action",
    "Bin",
    "Collision",
    "DuplicateProcessor",
    "ImageDeduplicator",
    "build_deduplicator",
    "__version__",
]
