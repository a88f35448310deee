"""Core functionality for image duplicate detection and the bin."""

from nodup.core.bin import (
    Action,
    Bin,
    BinActionError,
    BinError,
    BinInitializationError,
    BinPathProvider,
    DatePathProvider,
)
from nodup.core.collision import (
    CollisionDetector,
    HashCollisionDetector,
    PixelCollisionDetector,
    VerifiedHashCollisionDetector,
)
from nodup.core.deduplicator import DeduplicationReport, ImageDeduplicator
from nodup.core.discriminator import (
    Bucketing,
    DimensionBucketing,
    DiscriminatorBucketing,
    DiscriminatorKey,
)
from nodup.core.image import Dimension, Image, ImageReadError, PillowImage
from nodup.core.processor import Collision, DuplicateProcessor
from nodup.core.scanner import ImageScanner

__all__ = [
    "Action",
    "Bin",
    "BinActionError",
    "BinError",
    "BinInitializationError",
    "BinPathProvider",
    "Bucketing",
    "Collision",
    "CollisionDetector",
    "DatePathProvider",
    "DeduplicationReport",
    "Dimension",
    "DimensionBucketing",
    "DiscriminatorBucketing",
    "DiscriminatorKey",
    "DuplicateProcessor",
    "HashCollisionDetector",
    "Image",
    "ImageDeduplicator",
    "ImageReadError",
    "ImageScanner",
    "PillowImage",
    "PixelCollisionDetector",
    "VerifiedHashCollisionDetector",
]
