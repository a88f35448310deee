"""File scanner turning a directory into candidate images."""

import os
from pathlib import Path
from typing import List

from tqdm import tqdm

from nodup.core.image import Image, PillowImage
from nodup.utils.logger import setup_logger

logger = setup_logger(__name__)


class ImageScanner:
    """Lists the files of a directory as images, with progress tracking."""

    # Used only when images_only is set; other files are otherwise kept and
    # rejected later when their header cannot be decoded.
    IMAGE_EXTENSIONS = {
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".bmp",
        ".webp",
        ".tiff",
        ".tif",
    }

    def __init__(
        self,
        recursive: bool = True,
        skip_hidden: bool = True,
        images_only: bool = False,
        show_progress: bool = False,
    ):
        """
        Initialize the image scanner.

        Args:
            recursive: Recursively scan subdirectories
            skip_hidden: Skip hidden files and folders
            images_only: Only keep files with a known image extension
            show_progress: Show progress bar during scanning
        """
        self.recursive = recursive
        self.skip_hidden = skip_hidden
        self.images_only = images_only
        self.show_progress = show_progress

    def images_at(self, directory: Path) -> List[Image]:
        """
        List the candidate images of a directory, sorted by path.

        Args:
            directory: Directory path to scan

        Returns:
            One image per regular file

        Raises:
            FileNotFoundError: If directory doesn't exist
            NotADirectoryError: If the path is not a directory
        """
        directory = Path(directory)
        if not directory.exists():
            raise FileNotFoundError(f"Could not find specified directory: {directory}")

        if not directory.is_dir():
            raise NotADirectoryError(f"Specified path is not a directory: {directory}")

        logger.debug(f"Scanning directory: {directory}")

        all_files = sorted(self._discover_files(directory))

        if self.show_progress:
            file_iter = tqdm(all_files, desc="Listing images", unit="file")
        else:
            file_iter = all_files

        images: List[Image] = [
            PillowImage(file_path)
            for file_path in file_iter
            if not self.images_only or self._is_image_file(file_path)
        ]
        return images

    def _discover_files(self, directory: Path) -> List[Path]:
        files: List[Path] = []

        try:
            if self.recursive:
                for root, dirs, filenames in os.walk(directory):
                    root_path = Path(root)

                    if self.skip_hidden:
                        dirs[:] = [d for d in dirs if not d.startswith(".")]

                    # Skip symlinks to avoid loops
                    dirs[:] = [d for d in dirs if not (root_path / d).is_symlink()]

                    for filename in filenames:
                        file_path = root_path / filename
                        if self.skip_hidden and filename.startswith("."):
                            continue
                        if file_path.is_symlink():
                            continue
                        files.append(file_path)
            else:
                for item in directory.iterdir():
                    if not item.is_file() or item.is_symlink():
                        continue
                    if self.skip_hidden and item.name.startswith("."):
                        continue
                    files.append(item)

        except PermissionError as e:
            logger.warning(f"Permission denied accessing directory: {e}")

        return files

    def _is_image_file(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.IMAGE_EXTENSIONS
