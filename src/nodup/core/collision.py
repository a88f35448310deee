"""Strategies deciding whether two same-bucket images are duplicates."""

import hashlib
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from nodup.core.image import Image
from nodup.utils.logger import setup_logger

logger = setup_logger(__name__)


class CollisionDetector(ABC):
    """
    Decides whether two images are true duplicates.

    Callers only pass images that already share a bucket, so detectors do
    not re-check the dimension. ``ImageReadError`` from decoding propagates.
    """

    name = "base"

    @abstractmethod
    def detect(self, image_a: Image, image_b: Image) -> bool:
        """Return True when both images hold the same content."""

    def reset(self) -> None:
        """Forget anything cached from a previous run."""


def read_pixels(image: Image) -> np.ndarray:
    """Return the pixel buffer of an image as a flat uint32 array."""
    return np.asarray(image.pixels(), dtype=np.uint32).reshape(-1)


class PixelCollisionDetector(CollisionDetector):
    """
    Exact, element-wise pixel comparison.

    The buffer of the first argument is kept per thread, since a bucket
    scan compares one original against every remaining candidate.
    """

    name = "exact"

    def __init__(self) -> None:
        self._local = threading.local()

    def detect(self, image_a: Image, image_b: Image) -> bool:
        return self.same_pixels(self.original_pixels(image_a), read_pixels(image_b))

    def original_pixels(self, image: Image) -> np.ndarray:
        current = getattr(self._local, "original", None)
        if current is None or current[0] != image.path:
            current = (image.path, read_pixels(image))
            self._local.original = current
        return current[1]

    def reset(self) -> None:
        self._local = threading.local()

    @staticmethod
    def same_pixels(pixels_a: np.ndarray, pixels_b: np.ndarray) -> bool:
        if pixels_a.shape != pixels_b.shape:
            return False
        return bool(np.array_equal(pixels_a, pixels_b))


class HashCollisionDetector(CollisionDetector):
    """
    Compares SHA-256 digests of the pixel buffers.

    Each pixel is fed to the digest as 4 big-endian bytes in row-major
    order. Digests are cached by path until the next ``reset()``, so an
    image is decoded at most once per run.
    """

    name = "hash"

    def __init__(self) -> None:
        self._digests: Dict[Path, bytes] = {}

    def detect(self, image_a: Image, image_b: Image) -> bool:
        return self.digest(image_a) == self.digest(image_b)

    def digest(self, image: Image, pixels: Optional[np.ndarray] = None) -> bytes:
        cached = self._digests.get(image.path)
        if cached is None:
            if pixels is None:
                pixels = read_pixels(image)
            cached = self.hash_pixels(pixels)
            self._digests[image.path] = cached
        return cached

    def reset(self) -> None:
        self._digests = {}

    @staticmethod
    def hash_pixels(pixels: np.ndarray) -> bytes:
        sha256 = hashlib.sha256()
        sha256.update(pixels.astype(">u4").tobytes())
        return sha256.digest()


class VerifiedHashCollisionDetector(HashCollisionDetector):
    """Hash comparison as a pre-filter, confirmed by an exact pixel check."""

    name = "verified"

    def __init__(self) -> None:
        super().__init__()
        self._exact = PixelCollisionDetector()

    def detect(self, image_a: Image, image_b: Image) -> bool:
        pixels_a = self._exact.original_pixels(image_a)
        pixels_b = None if image_b.path in self._digests else read_pixels(image_b)

        if self.digest(image_a, pixels_a) != self.digest(image_b, pixels_b):
            return False

        if pixels_b is None:
            pixels_b = read_pixels(image_b)
        confirmed = PixelCollisionDetector.same_pixels(pixels_a, pixels_b)
        if not confirmed:
            logger.warning(
                f"Hash collision without pixel match: {image_a.path} vs {image_b.path}"
            )
        return confirmed

    def reset(self) -> None:
        super().reset()
        self._exact.reset()


DETECTORS = {
    PixelCollisionDetector.name: PixelCollisionDetector,
    HashCollisionDetector.name: HashCollisionDetector,
    VerifiedHashCollisionDetector.name: VerifiedHashCollisionDetector,
}


def detector_for(name: str) -> CollisionDetector:
    """
    Instantiate a collision detector by its configuration name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return DETECTORS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown detector '{name}'. Expected one of: {', '.join(DETECTORS)}"
        ) from None
