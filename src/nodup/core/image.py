"""Read-only view of a candidate image file."""

from pathlib import Path
from typing import NamedTuple, Optional, Protocol, Sequence, runtime_checkable

import numpy as np
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

# Oversized headers raise DecompressionBombError before any pixel is decoded
DECODE_ERRORS = (
    OSError,
    UnidentifiedImageError,
    ValueError,
    PILImage.DecompressionBombError,
)


class ImageReadError(Exception):
    """Raised when an image's metadata or pixels cannot be decoded."""


class Dimension(NamedTuple):
    """Pixel dimension of an image."""

    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@runtime_checkable
class Image(Protocol):
    """Capability consumed by the duplicate detection engine."""

    @property
    def path(self) -> Path: ...

    @property
    def format(self) -> str: ...

    @property
    def weight(self) -> int: ...

    @property
    def dimension(self) -> Dimension: ...

    def pixels(self) -> Sequence[int]: ...


class PillowImage:
    """
    Image file backed by Pillow.

    Metadata is read from the file header on first access; pixels are only
    decoded when ``pixels()`` is called. Identity is the file path.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._format: Optional[str] = None
        self._dimension: Optional[Dimension] = None
        self._weight: Optional[int] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def weight(self) -> int:
        if self._weight is None:
            try:
                self._weight = self._path.stat().st_size
            except OSError as e:
                raise ImageReadError(f"Cannot stat {self._path}: {e}") from e
        return self._weight

    @property
    def format(self) -> str:
        self._load_metadata_if_necessary()
        return self._format

    @property
    def dimension(self) -> Dimension:
        self._load_metadata_if_necessary()
        return self._dimension

    @property
    def width(self) -> int:
        return self.dimension.width

    @property
    def height(self) -> int:
        return self.dimension.height

    def pixels(self) -> np.ndarray:
        """
        Decode the image into a flat, row-major buffer of ARGB integers.

        Returns:
            uint32 array of length width * height

        Raises:
            ImageReadError: If the file cannot be decoded
        """
        try:
            with PILImage.open(self._path) as img:
                rgba = np.asarray(img.convert("RGBA"), dtype=np.uint32)
        except DECODE_ERRORS as e:
            raise ImageReadError(f"Cannot decode {self._path}: {e}") from e

        r, g, b, a = rgba[..., 0], rgba[..., 1], rgba[..., 2], rgba[..., 3]
        return ((a << 24) | (r << 16) | (g << 8) | b).reshape(-1)

    def _load_metadata_if_necessary(self) -> None:
        if self._dimension is None:
            self.load_metadata()

    def load_metadata(self) -> None:
        """
        Read format and dimension from the image header.

        Raises:
            ImageReadError: If the file is not a readable image
        """
        try:
            with PILImage.open(self._path) as img:
                width, height = img.size
                image_format = img.format
        except DECODE_ERRORS as e:
            raise ImageReadError(f"Not an image file: {self._path}") from e

        if not image_format:
            raise ImageReadError(f"Unknown image format: {self._path}")

        self._format = image_format.lower()
        self._dimension = Dimension(width, height)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PillowImage):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __repr__(self) -> str:
        return f"PillowImage({str(self._path)!r})"

    def __str__(self) -> str:
        return self._path.name
