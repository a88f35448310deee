"""Shared fixtures and stub images for the test suite."""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple

import pytest
from PIL import Image

from nodup.core.bin import Bin, DatePathProvider
from nodup.core.collision import CollisionDetector
from nodup.core.image import Dimension, ImageReadError


@dataclass(frozen=True)
class StubImage:
    """In-memory image; equality and hashing by path only."""

    path: Path
    format: str = field(default="jpg", compare=False)
    weight: int = field(default=10_000, compare=False)
    dimension: Dimension = field(default=Dimension(4, 4), compare=False)
    data: Tuple[int, ...] = field(default=(0,) * 16, compare=False)
    decodable: bool = field(default=True, compare=False)

    def pixels(self) -> Sequence[int]:
        if not self.decodable:
            raise ImageReadError(f"Cannot decode {self.path}")
        return list(self.data)

    def __str__(self) -> str:
        return self.path.name


class UnreadableImage:
    """A file whose header cannot be parsed."""

    def __init__(self, path: Path):
        self.path = path

    @property
    def format(self) -> str:
        raise ImageReadError(f"Not an image file: {self.path}")

    @property
    def dimension(self) -> Dimension:
        raise ImageReadError(f"Not an image file: {self.path}")

    @property
    def weight(self) -> int:
        return 42

    def pixels(self) -> Sequence[int]:
        raise ImageReadError(f"Not an image file: {self.path}")


def stub(
    name: str,
    size: Tuple[int, int] = (4, 4),
    fmt: str = "jpg",
    weight: int = 10_000,
    fill: int = 0,
    **kwargs,
) -> StubImage:
    """Build a stub image whose pixels are all ``fill``."""
    dimension = Dimension(*size)
    data = kwargs.pop("data", (fill,) * (dimension.width * dimension.height))
    return StubImage(
        path=Path("/photos") / name,
        format=fmt,
        weight=weight,
        dimension=dimension,
        data=tuple(data),
        **kwargs,
    )


class RecordingDetector(CollisionDetector):
    """Wraps a detector and records every compared pair."""

    name = "recording"

    def __init__(self, delegate: CollisionDetector):
        self.delegate = delegate
        self.pairs: List[Tuple[Path, Path]] = []

    def detect(self, image_a, image_b) -> bool:
        self.pairs.append((image_a.path, image_b.path))
        return self.delegate.detect(image_a, image_b)


class FixedClock:
    """Clock returning a settable datetime."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_image(
    path: Path,
    size: Tuple[int, int] = (8, 8),
    color=(255, 0, 0),
    fmt: str = "PNG",
) -> Path:
    """Write a solid-color image file and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color=color).save(path, fmt)
    return path


def copy_file(source: Path, target: Path) -> Path:
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
    return target


@pytest.fixture
def bin_root(tmp_path) -> Path:
    return tmp_path / "home" / "nodup" / "bin"


@pytest.fixture
def bin(bin_root) -> Bin:
    """Bin rooted in a temporary directory."""
    return Bin(DatePathProvider(bin_root))


@pytest.fixture
def photos(tmp_path) -> Path:
    """
    Directory holding two duplicates of a red image, an unrelated blue one
    and a text file.
    """
    directory = tmp_path / "photos"
    red = make_image(directory / "red.png", color=(255, 0, 0))
    copy_file(red, directory / "red-copy.png")
    copy_file(red, directory / "nested" / "red-again.png")
    make_image(directory / "blue.png", color=(0, 0, 255))
    (directory / "notes.txt").write_text("not an image")
    return directory
