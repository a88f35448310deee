"""
End-to-end demo script to showcase the complete workflow.

Creates sample duplicate images, scans them, copies the duplicates into a
temporary bin and then moves them, showing what ends up where.
"""

import shutil
from pathlib import Path
from tempfile import TemporaryDirectory

from PIL import Image

from nodup.core.bin import Action
from nodup.core.deduplicator import build_deduplicator
from nodup.utils.config import Config


def create_demo_images(demo_dir: Path) -> None:
    """
    Create sample images for demonstration.

    Args:
        demo_dir: Directory to create images in
    """
    print(f"Creating demo images in: {demo_dir}")

    originals_dir = demo_dir / "originals"
    originals_dir.mkdir(exist_ok=True)

    img1 = Image.new("RGB", (1920, 1080), color=(70, 130, 180))  # Steel blue
    img1.save(originals_dir / "landscape_1920x1080.png", "PNG")

    img2 = Image.new("RGB", (800, 1200), color=(220, 20, 60))  # Crimson
    img2.save(originals_dir / "portrait_800x1200.png", "PNG")

    img3 = Image.new("RGB", (640, 480), color=(50, 205, 50))  # Lime green
    img3.save(originals_dir / "small_640x480.png", "PNG")

    duplicates_dir = demo_dir / "duplicates"
    duplicates_dir.mkdir(exist_ok=True)

    # Exact copies: found
    shutil.copy(
        originals_dir / "landscape_1920x1080.png",
        duplicates_dir / "landscape_copy.png",
    )
    shutil.copy(
        originals_dir / "portrait_800x1200.png",
        duplicates_dir / "portrait_copy.png",
    )

    # Same picture, smaller: not a duplicate
    img1_low = Image.new("RGB", (1280, 720), color=(70, 130, 180))
    img1_low.save(duplicates_dir / "landscape_1280x720.png", "PNG")

    # Same pixels, different format: not a duplicate
    img3.save(duplicates_dir / "small_640x480.bmp", "BMP")

    (demo_dir / "README.txt").write_text("Not an image, skipped during detection.")

    print("✓ Created 7 images (3 originals, 2 copies, 2 look-alikes) and 1 text file")


def main():
    """Run the demo."""
    print("=" * 70)
    print("NODUP - END-TO-END DEMO")
    print("=" * 70)
    print()

    with TemporaryDirectory() as temp_dir:
        demo_dir = Path(temp_dir) / "demo"
        demo_dir.mkdir()

        config = Config(Path(temp_dir) / "config.json")
        config.set("bin.root", str(Path(temp_dir) / "bin"))
        config.set("bin.operations_log", str(Path(temp_dir) / "operations.log"))

        print("STEP 1: Creating demo images")
        print("-" * 70)
        create_demo_images(demo_dir)
        print()

        deduplicator = build_deduplicator(config, show_progress=True)

        print("STEP 2: Scanning for duplicates")
        print("-" * 70)
        report = deduplicator.execute(Action.SCAN, demo_dir)
        print(f"✓ Found {report.images_found} files, {len(report.collisions)} collisions")
        for collision in report.collisions:
            print(f"\n  Original: {collision.original.path.relative_to(demo_dir)}")
            for duplicate in collision.duplicates:
                print(f"    → Duplicate: {duplicate.path.relative_to(demo_dir)}")
        print()

        print("STEP 3: Copying duplicates to the bin")
        print("-" * 70)
        report = deduplicator.execute(Action.COPY, demo_dir)
        for placed in report.placed:
            print(f"  - {placed.relative_to(deduplicator.bin.root())}")
        print()

        print("STEP 4: Moving duplicates to the bin")
        print("-" * 70)
        deduplicator.execute(Action.MOVE, demo_dir)
        report = deduplicator.execute(Action.SCAN, demo_dir)
        print(f"✓ {len(report.collisions)} collisions left after moving")
        print(f"✓ Bin holds {len(deduplicator.bin.directories())} run directories")
        print()

        print("STEP 5: Summary")
        print("-" * 70)
        print("✓ Demo completed successfully!")
        print()
        print("In a real workflow, you would now:")
        print("  1. Inspect the bin with 'nodup bin open'")
        print("  2. Clear it with 'nodup bin clear' once you are sure")
        print()
        print("=" * 70)


if __name__ == "__main__":
    main()
