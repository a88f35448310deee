"""Test the image scanner module."""

import os
from pathlib import Path

import pytest

from nodup.core.image import PillowImage
from nodup.core.scanner import ImageScanner


@pytest.fixture
def temp_image_dir(tmp_path):
    """Create a temporary directory with test files."""
    (tmp_path / "image1.jpg").touch()
    (tmp_path / "image2.png").touch()
    (tmp_path / "document.txt").touch()  # Not an image
    (tmp_path / ".hidden.jpg").touch()  # Hidden file

    subdir = tmp_path / "subdir"
    subdir.mkdir()
    (subdir / "image3.jpg").touch()

    hidden_dir = tmp_path / ".cache"
    hidden_dir.mkdir()
    (hidden_dir / "thumb.jpg").touch()

    return tmp_path


def names(images):
    return [image.path.name for image in images]


def test_scanner_lists_every_visible_file(temp_image_dir):
    """Test that non-image files are listed too; they fail later when read."""
    scanner = ImageScanner()

    images = scanner.images_at(temp_image_dir)

    assert sorted(names(images)) == ["document.txt", "image1.jpg", "image2.png", "image3.jpg"]
    assert all(isinstance(image, PillowImage) for image in images)


def test_scanner_results_are_sorted(temp_image_dir):
    images = ImageScanner().images_at(temp_image_dir)

    paths = [image.path for image in images]
    assert paths == sorted(paths)


def test_scanner_images_only(temp_image_dir):
    scanner = ImageScanner(images_only=True)

    images = scanner.images_at(temp_image_dir)

    assert "document.txt" not in names(images)
    assert len(images) == 3


def test_scanner_non_recursive(temp_image_dir):
    """Test non-recursive scanning."""
    scanner = ImageScanner(recursive=False)

    images = scanner.images_at(temp_image_dir)

    assert sorted(names(images)) == ["document.txt", "image1.jpg", "image2.png"]


def test_scanner_includes_hidden_when_asked(temp_image_dir):
    scanner = ImageScanner(skip_hidden=False)

    images = scanner.images_at(temp_image_dir)

    assert ".hidden.jpg" in names(images)
    assert "thumb.jpg" in names(images)


@pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
def test_scanner_skips_symlinks(temp_image_dir):
    (temp_image_dir / "link.jpg").symlink_to(temp_image_dir / "image1.jpg")

    images = ImageScanner().images_at(temp_image_dir)

    assert "link.jpg" not in names(images)


def test_scanner_empty_directory(tmp_path):
    assert ImageScanner().images_at(tmp_path) == []


def test_scanner_nonexistent_directory():
    """Test that scanner raises error for nonexistent directory."""
    scanner = ImageScanner()

    with pytest.raises(FileNotFoundError, match="Could not find specified directory"):
        scanner.images_at(Path("/nonexistent/path"))


def test_scanner_rejects_files(temp_image_dir):
    with pytest.raises(NotADirectoryError, match="not a directory"):
        ImageScanner().images_at(temp_image_dir / "image1.jpg")


def test_scanner_with_progress(temp_image_dir):
    assert len(ImageScanner(show_progress=True).images_at(temp_image_dir)) == 4
