"""Partition candidate images into buckets that could possibly collide."""

from abc import ABC, abstractmethod
from typing import Dict, Hashable, Iterable, List, NamedTuple

from nodup.core.image import Dimension, Image, ImageReadError
from nodup.utils.logger import setup_logger

logger = setup_logger(__name__)


class DiscriminatorKey(NamedTuple):
    """Cheap metadata shared by every member of a bucket."""

    dimension: Dimension
    format: str
    weight: int

    def __str__(self) -> str:
        return f"{self.dimension}-{self.format} {self.weight}"


def key_of(image: Image) -> DiscriminatorKey:
    """
    Compute the discriminator key of an image without decoding its pixels.

    Raises:
        ImageReadError: If the image metadata cannot be read
    """
    return DiscriminatorKey(image.dimension, image.format, image.weight)


class Bucketing(ABC):
    """Strategy grouping images that must be compared pairwise."""

    name = "base"

    @abstractmethod
    def key_of(self, image: Image) -> Hashable:
        """Return the bucket key of an image."""

    def bucket(self, images: Iterable[Image]) -> Dict[Hashable, List[Image]]:
        """
        Group images by key, keeping only buckets with at least two members.

        Images keep their encounter order inside a bucket, and buckets are
        ordered by the first appearance of their key. Unreadable files are
        skipped.

        Args:
            images: Candidate images

        Returns:
            Mapping of bucket key to images sharing that key
        """
        buckets: Dict[Hashable, List[Image]] = {}
        for image in images:
            try:
                key = self.key_of(image)
            except ImageReadError as e:
                logger.debug(f"Ignoring {image.path}: {e}")
                continue
            buckets.setdefault(key, []).append(image)

        return {key: members for key, members in buckets.items() if len(members) > 1}


class DiscriminatorBucketing(Bucketing):
    """Buckets by dimension, format and byte size."""

    name = "discriminator"

    def key_of(self, image: Image) -> Hashable:
        return key_of(image)


class DimensionBucketing(Bucketing):
    """Buckets by dimension only; slower, but also matches losslessly re-encoded copies."""

    name = "dimension"

    def key_of(self, image: Image) -> Hashable:
        return image.dimension


BUCKETINGS = {
    DiscriminatorBucketing.name: DiscriminatorBucketing,
    DimensionBucketing.name: DimensionBucketing,
}


def bucketing_for(name: str) -> Bucketing:
    """
    Instantiate a bucketing strategy by its configuration name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return BUCKETINGS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown bucketing '{name}'. Expected one of: {', '.join(BUCKETINGS)}"
        ) from None
