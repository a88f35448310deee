"""One deduplication run: list, detect, then apply the action."""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol

from nodup.core.bin import Action, Bin, BinError, DatePathProvider
from nodup.core.collision import detector_for
from nodup.core.discriminator import bucketing_for
from nodup.core.image import Image
from nodup.core.processor import Collision, DuplicateProcessor
from nodup.core.scanner import ImageScanner
from nodup.utils.config import Config
from nodup.utils.logger import setup_logger

logger = setup_logger(__name__)

SEPARATOR = "#" * 80


class ImageProvider(Protocol):
    """Lists the candidate images of a directory."""

    def images_at(self, directory: Path) -> List[Image]: ...


@dataclass
class DeduplicationReport:
    """Outcome of a single run."""

    action: Action
    directory: Path
    images_found: int = 0
    collisions: List[Collision] = field(default_factory=list)
    duplicates: List[Path] = field(default_factory=list)
    placed: List[Path] = field(default_factory=list)
    error: Optional[str] = None
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


class ImageDeduplicator:
    """Composes the image provider, the processor and the bin."""

    def __init__(
        self,
        processor: DuplicateProcessor,
        image_provider: ImageProvider,
        bin: Bin,
    ):
        self.processor = processor
        self.image_provider = image_provider
        self.bin = bin

    def execute(self, action: Action, directory: Path) -> DeduplicationReport:
        """
        Detect duplicates in a directory and apply an action to them.

        Originals are never handed to the bin. A bin failure is logged and
        recorded on the report; the run still completes.

        Args:
            action: SCAN, COPY or MOVE
            directory: Directory to scan

        Returns:
            Summary of the run
        """
        start = time.perf_counter()
        report = DeduplicationReport(action=action, directory=Path(directory))

        logger.info(SEPARATOR)
        logger.info("Scanning directory...")
        images = self._outside_bin(self.image_provider.images_at(directory))
        report.images_found = len(images)
        logger.info(f"Found {len(images)} (potential) images in {directory}")

        logger.info("Checking for duplicates...")
        report.collisions = self.processor.detect_collisions(images)
        report.duplicates = duplicates_of(report.collisions)

        logger.info(SEPARATOR)
        logger.info(f"Found {len(report.collisions)} collisions")
        for collision in report.collisions:
            logger.debug(repr(collision))

        if action is not Action.SCAN:
            self._process_duplicates(action, report)

        report.elapsed_seconds = time.perf_counter() - start
        logger.info(f"Elapsed time: {report.elapsed_seconds * 1000:.0f} ms")
        return report

    def _outside_bin(self, images: List[Image]) -> List[Image]:
        """Drop images stored under the bin root, so past runs are never rescanned."""
        bin_root = self.bin.root().expanduser().resolve()
        kept = [image for image in images if not _is_under(image.path, bin_root)]
        if len(kept) < len(images):
            logger.debug(f"Ignoring {len(images) - len(kept)} files inside the bin {bin_root}")
        return kept

    def _process_duplicates(self, action: Action, report: DeduplicationReport) -> None:
        logger.info(SEPARATOR)
        try:
            report.placed = self.bin.accept(action, report.duplicates)
        except BinError as e:
            report.error = str(e)
            logger.error(f"Could not {action.value} duplicates. Cause: {e}")


def _is_under(path: Path, root: Path) -> bool:
    try:
        Path(path).resolve().relative_to(root)
    except ValueError:
        return False
    return True


def duplicates_of(collisions: List[Collision]) -> List[Path]:
    """Paths of every duplicate, excluding originals, in collision order."""
    return [
        duplicate.path for collision in collisions for duplicate in collision.duplicates
    ]


def build_deduplicator(config: Config, show_progress: bool = False) -> ImageDeduplicator:
    """
    Wire a deduplicator from configuration.

    Args:
        config: Configuration instance
        show_progress: Show progress bars while scanning and comparing

    Returns:
        Ready-to-run deduplicator

    Raises:
        ValueError: If the configured detector or bucketing is unknown
    """
    scanner = ImageScanner(
        recursive=config.get("scan.recursive", True),
        skip_hidden=config.get("scan.skip_hidden", True),
        images_only=config.get("scan.images_only", False),
        show_progress=show_progress,
    )
    processor = DuplicateProcessor(
        bucketing=bucketing_for(config.get("bucketing", "discriminator")),
        detector=detector_for(config.get("detector", "verified")),
        max_workers=int(config.get("max_workers", 1)),
        show_progress=show_progress,
    )
    bin = Bin(
        DatePathProvider(config.get_bin_root()),
        operations_log=config.get_operations_log(),
    )
    logger.debug(
        f"Using {type(processor.detector).__name__} with "
        f"{type(processor.bucketing).__name__}"
    )
    return ImageDeduplicator(processor, scanner, bin)
