"""Tests for bucketed duplicate detection and collision aggregation."""

import pytest

from nodup.core.collision import (
    HashCollisionDetector,
    PixelCollisionDetector,
    VerifiedHashCollisionDetector,
)
from nodup.core.discriminator import DimensionBucketing, DiscriminatorBucketing, key_of
from nodup.core.processor import Collision, DuplicateProcessor

from conftest import RecordingDetector, UnreadableImage, stub


def processor_with(detector=None, **kwargs) -> DuplicateProcessor:
    return DuplicateProcessor(
        DiscriminatorBucketing(),
        detector or PixelCollisionDetector(),
        **kwargs,
    )


class TestCollision:
    """Test Collision class."""

    def test_duplicates_are_deduplicated_and_ordered(self):
        o, d1, d2 = stub("o.jpg"), stub("d1.jpg"), stub("d2.jpg")

        collision = Collision(o, d2, d1, d2, o)

        assert collision.original == o
        assert collision.duplicates == [d2, d1]
        assert len(collision) == 3

    def test_contains_and_paths(self):
        o, d = stub("o.jpg"), stub("d.jpg")
        collision = Collision(o, d)

        assert collision.contains(d)
        assert collision.contains(stub("x.jpg"), o)
        assert not collision.contains(stub("x.jpg"))
        assert collision.paths() == [o.path, d.path]

    def test_duplicates_returns_a_copy(self):
        collision = Collision(stub("o.jpg"), stub("d.jpg"))

        collision.duplicates.append(stub("x.jpg"))

        assert len(collision.duplicates) == 1


def test_no_images():
    assert processor_with().detect_collisions([]) == []


def test_images_without_collision():
    images = [stub("a.jpg", fill=1), stub("b.jpg", fill=2), stub("c.jpg", size=(8, 8))]

    assert processor_with().detect_collisions(images) == []


def test_group_is_aggregated_into_one_collision():
    """Test that every match of the first image lands in a single collision."""
    o, d1, d2 = stub("o.jpg"), stub("d1.jpg"), stub("d2.jpg")

    collisions = processor_with().detect_collisions([o, d1, d2])

    assert collisions == [Collision(o, d1, d2)]


def test_claimed_images_are_never_compared_again():
    o, d1, d2 = stub("o.jpg"), stub("d1.jpg"), stub("d2.jpg")
    detector = RecordingDetector(PixelCollisionDetector())

    processor_with(detector).detect_collisions([o, d1, d2])

    assert detector.pairs == [(o.path, d1.path), (o.path, d2.path)]


def test_multiple_groups_in_one_bucket():
    dog_a, cat_a = stub("dog-a.jpg", fill=1), stub("cat-a.jpg", fill=2)
    dog_b, cat_b = stub("dog-b.jpg", fill=1), stub("cat-b.jpg", fill=2)

    collisions = processor_with().detect_collisions([dog_a, cat_a, cat_b, dog_b])

    assert collisions == [Collision(dog_a, dog_b), Collision(cat_a, cat_b)]


def test_images_in_different_buckets_are_never_compared():
    images = [
        stub("a.jpg"),
        stub("b.jpg"),
        stub("c.png", fmt="png"),
        stub("d.png", fmt="png"),
        stub("e.jpg", size=(2, 8)),
        stub("f.jpg", weight=1),
    ]
    detector = RecordingDetector(HashCollisionDetector())

    processor_with(detector).detect_collisions(images)

    by_path = {image.path: image for image in images}
    assert detector.pairs
    for a, b in detector.pairs:
        assert key_of(by_path[a]) == key_of(by_path[b])


def test_equal_pixels_with_different_dimensions_never_collide():
    """Test that a 2x8 and a 4x4 image with the same buffer stay apart."""
    wide = stub("wide.jpg", size=(2, 8), fill=5)
    square = stub("square.jpg", size=(4, 4), fill=5)
    tall = stub("tall.jpg", size=(8, 2), fill=5)

    for bucketing in (DiscriminatorBucketing(), DimensionBucketing()):
        processor = DuplicateProcessor(bucketing, HashCollisionDetector())
        assert processor.detect_collisions([wide, square, tall]) == []


def test_end_to_end_scenario():
    """A, A1, A2 collide; B has another shape; C shares A's shape but not format."""
    a = stub("A.jpg", size=(4, 4), fmt="jpg", weight=10_240, fill=3)
    a1 = stub("A1.jpg", size=(4, 4), fmt="jpg", weight=10_240, fill=3)
    a2 = stub("A2.jpg", size=(4, 4), fmt="jpg", weight=10_240, fill=3)
    b = stub("B.jpg", size=(8, 8), fmt="jpg", weight=5_120, fill=3)
    c = stub("C.png", size=(4, 4), fmt="png", weight=10_240, fill=3)
    detector = RecordingDetector(PixelCollisionDetector())

    collisions = processor_with(detector).detect_collisions([a, b, a1, c, a2])

    assert collisions == [Collision(a, a1, a2)]
    compared = {path for pair in detector.pairs for path in pair}
    assert c.path not in compared
    assert b.path not in compared


def test_unreadable_pixels_are_treated_as_non_colliding():
    o, broken, d = stub("o.jpg"), stub("broken.jpg", decodable=False), stub("d.jpg")

    collisions = processor_with().detect_collisions([o, broken, d])

    assert collisions == [Collision(o, d)]


def test_unreadable_metadata_is_skipped():
    o, d = stub("o.jpg"), stub("d.jpg")

    collisions = processor_with().detect_collisions([UnreadableImage(o.path.with_name("x.txt")), o, d])

    assert collisions == [Collision(o, d)]


@pytest.mark.parametrize("max_workers", [2, 8])
def test_parallel_processing_matches_sequential(max_workers):
    images = []
    for size in range(1, 9):
        for copy in range(4):
            images.append(stub(f"{size}-{copy}.jpg", size=(size, size), fill=copy % 2))

    sequential = processor_with().detect_collisions(images)
    parallel = processor_with(max_workers=max_workers).detect_collisions(images)

    assert len(sequential) == 16
    assert parallel == sequential


def test_progress_bar_does_not_change_result():
    images = [stub("a.jpg"), stub("b.jpg")]

    assert processor_with(show_progress=True).detect_collisions(images) == [
        Collision(images[0], images[1])
    ]


@pytest.mark.parametrize(
    "detector_class",
    [PixelCollisionDetector, HashCollisionDetector, VerifiedHashCollisionDetector],
)
def test_each_run_compares_current_content(detector_class):
    """Test that a processor reused across runs sees files that changed in between."""
    processor = processor_with(detector_class())
    a, b = stub("a.jpg", fill=1), stub("b.jpg", fill=1)
    assert processor.detect_collisions([a, b]) == [Collision(a, b)]

    changed_b = stub("b.jpg", fill=2)

    assert processor.detect_collisions([a, changed_b]) == []

    changed_a = stub("a.jpg", fill=2)

    assert processor.detect_collisions([changed_a, changed_b]) == [Collision(changed_a, changed_b)]
