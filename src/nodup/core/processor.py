"""Bucketed duplicate detection and collision aggregation."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Hashable, Iterable, List, Optional, Set

from tqdm import tqdm

from nodup.core.collision import CollisionDetector
from nodup.core.discriminator import Bucketing
from nodup.core.image import Image, ImageReadError
from nodup.utils.logger import setup_logger

logger = setup_logger(__name__)


class Collision:
    """One original image and the duplicates confirmed against it."""

    def __init__(self, original: Image, *duplicates: Image):
        self.original = original
        self._duplicates: List[Image] = []
        for duplicate in duplicates:
            self.add(duplicate)

    @property
    def duplicates(self) -> List[Image]:
        return list(self._duplicates)

    def add(self, duplicate: Image) -> None:
        if duplicate != self.original and duplicate not in self._duplicates:
            self._duplicates.append(duplicate)

    def contains(self, *images: Image) -> bool:
        """Return True if any of the given images belongs to this collision."""
        return any(
            image == self.original or image in self._duplicates for image in images
        )

    def paths(self) -> List[Path]:
        """Paths of every member, original first."""
        return [self.original.path] + [d.path for d in self._duplicates]

    def __len__(self) -> int:
        return 1 + len(self._duplicates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Collision):
            return NotImplemented
        return self.original == other.original and self._duplicates == other._duplicates

    def __repr__(self) -> str:
        return f"Collision {self.original} vs {[str(d) for d in self._duplicates]}"


class DuplicateProcessor:
    """Groups images into buckets and runs pairwise detection inside each."""

    def __init__(
        self,
        bucketing: Bucketing,
        detector: CollisionDetector,
        max_workers: int = 1,
        show_progress: bool = False,
    ):
        """
        Initialize the processor.

        Args:
            bucketing: Strategy partitioning images before comparison
            detector: Strategy confirming duplicates within a bucket
            max_workers: Number of threads processing buckets concurrently
            show_progress: Show a progress bar over buckets
        """
        self.bucketing = bucketing
        self.detector = detector
        self.max_workers = max(1, max_workers)
        self.show_progress = show_progress

    def detect_collisions(self, images: Iterable[Image]) -> List[Collision]:
        """
        Find every group of duplicate images.

        Args:
            images: Candidate images, in a deterministic order

        Returns:
            Collisions in bucket order; each holds at least one duplicate
        """
        self.detector.reset()
        buckets = self.bucketing.bucket(images)
        self._log_buckets(buckets)

        members = list(buckets.values())
        if self.show_progress:
            progress: Optional[tqdm] = tqdm(
                total=len(members), desc="Comparing buckets", unit="bucket"
            )
        else:
            progress = None

        try:
            if self.max_workers > 1 and len(members) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    results = list(
                        executor.map(lambda b: self._tracked(b, progress), members)
                    )
            else:
                results = [self._tracked(bucket, progress) for bucket in members]
        finally:
            if progress is not None:
                progress.close()

        collisions = [collision for result in results for collision in result]
        logger.debug(f"Confirmed {len(collisions)} collisions")
        return collisions

    def _tracked(self, bucket: List[Image], progress: Optional[tqdm]) -> List[Collision]:
        collisions = self.find_collisions(bucket)
        if progress is not None:
            progress.update(1)
        return collisions

    def find_collisions(self, bucket: List[Image]) -> List[Collision]:
        """
        Brute-force pairwise scan of one bucket.

        An image matched as a duplicate is claimed and never compared again,
        neither as a candidate nor as a fresh original.
        """
        claimed: Set[Image] = set()
        collisions: List[Collision] = []

        for i, image in enumerate(bucket):
            if image in claimed:
                continue
            collision = Collision(image)
            for other in bucket[i + 1:]:
                if other in claimed:
                    continue
                if self._collides(image, other):
                    collision.add(other)
                    claimed.add(other)
            if collision.duplicates:
                logger.debug(repr(collision))
                collisions.append(collision)

        return collisions

    def _collides(self, image: Image, other: Image) -> bool:
        try:
            return self.detector.detect(image, other)
        except ImageReadError as e:
            logger.debug(f"Skipping comparison {image.path} vs {other.path}: {e}")
            return False

    def _log_buckets(self, buckets: Dict[Hashable, List[Image]]) -> None:
        total = sum(len(members) for members in buckets.values())
        logger.info(
            f"Found {total} potential collisions over {len(buckets)} buckets"
        )
        ordered = sorted(buckets.items(), key=lambda item: len(item[1]), reverse=True)
        for key, members in ordered:
            logger.debug(f"    {len(members)}: {key}")
