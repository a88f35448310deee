"""Date-partitioned holding area for duplicate files."""

import json
import os
import shutil
from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Collection, List, Optional

from send2trash import send2trash

from nodup.utils.logger import setup_logger

logger = setup_logger(__name__)


class Action(Enum):
    """What to do with confirmed duplicates."""

    SCAN = "scan"
    COPY = "copy"
    MOVE = "move"

    @classmethod
    def parse(cls, name: str) -> "Action":
        """
        Look up an action by name, case-insensitively.

        Raises:
            ValueError: If the name is not an action
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown action: {name}") from None

    def __str__(self) -> str:
        return self.name


class BinError(Exception):
    """Base class for bin failures."""


class BinInitializationError(BinError):
    """Raised when the bin root or run directory cannot be created."""


class BinActionError(BinError):
    """Raised when a copy or move fails part way through a batch."""

    def __init__(self, action: Action, count: int, cause: Exception):
        super().__init__(f"Could not {action.value} {count} duplicates: {cause}")
        self.action = action
        self.count = count
        self.cause = cause


class BinPathProvider(ABC):
    """Locates the bin root and the directory of the current run."""

    @abstractmethod
    def root(self) -> Path:
        """Stable bin root; never touches the filesystem."""

    @abstractmethod
    def current_bin(self) -> Path:
        """Fresh directory for the current run, under the root."""


class DatePathProvider(BinPathProvider):
    """Names each run directory after the time it was requested."""

    TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

    def __init__(self, root: Path, clock: Callable[[], datetime] = datetime.now):
        self._root = Path(root)
        self._clock = clock

    def root(self) -> Path:
        return self._root

    def current_bin(self) -> Path:
        return self._root / self._clock().strftime(self.TIMESTAMP_FORMAT)


class Bin:
    """Applies an action to duplicate files and manages past runs."""

    def __init__(
        self,
        path_provider: BinPathProvider,
        operations_log: Optional[Path] = None,
    ):
        """
        Initialize the bin.

        Args:
            path_provider: Source of the root and run directories
            operations_log: Optional JSON-lines file recording each batch
        """
        self.path_provider = path_provider
        self.operations_log = operations_log

    def root(self) -> Path:
        return self.path_provider.root()

    def accept(self, action: Action, files: Collection[Path]) -> List[Path]:
        """
        Copy or move files into the current run directory.

        SCAN and empty batches do nothing. Only the file name is kept in the
        bin; an existing file with the same name is overwritten. Files placed
        before a failure stay where they were placed.

        Args:
            action: Action to apply
            files: Paths of the duplicates

        Returns:
            Paths of the placed files

        Raises:
            BinInitializationError: If the run directory cannot be created
            BinActionError: If a file cannot be copied or moved
        """
        if action is Action.SCAN or not files:
            return []

        run_directory = self.path_provider.current_bin()
        try:
            run_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BinInitializationError(
                f"Could not create bin directory {run_directory}: {e}"
            ) from e

        logger.info(f"About to [{action}] {len(files)} duplicates to {run_directory}")

        placed: List[Path] = []
        for source in files:
            target = run_directory / Path(source).name
            try:
                self._perform(action, Path(source), target)
            except OSError as e:
                if placed:
                    self._log_operation(action, run_directory, len(placed))
                raise BinActionError(action, len(files), e) from e
            placed.append(target)
            logger.debug(f"[{action}] {source} -> {target}")

        logger.info(f"Done [{action}] {len(placed)} duplicates to {run_directory}")
        self._log_operation(action, run_directory, len(placed))
        return placed

    def directories(self) -> List[Path]:
        """Immediate sub-directories of the root, one per past run."""
        root = self.root()
        if not root.is_dir():
            return []
        return sorted(child for child in root.iterdir() if child.is_dir())

    def is_empty(self) -> bool:
        return not self.directories()

    def clear(self, use_recycle_bin: bool = False) -> None:
        """
        Delete everything under the root, files before their directories.

        Args:
            use_recycle_bin: Send run directories to the OS trash instead

        Raises:
            BinError: If something cannot be deleted
        """
        root = self.root()
        if not root.exists():
            return

        try:
            if use_recycle_bin:
                for directory in self.directories():
                    send2trash(str(directory))
                    logger.debug(f"Moved to recycle bin: {directory}")
            else:
                for current, dirs, filenames in os.walk(root, topdown=False):
                    current_path = Path(current)
                    for filename in filenames:
                        (current_path / filename).unlink()
                    for dirname in dirs:
                        directory = current_path / dirname
                        if directory.is_symlink():
                            directory.unlink()
                        else:
                            directory.rmdir()
                root.rmdir()
        except OSError as e:
            raise BinError(f"Could not clear bin {root}: {e}") from e

        logger.info(f"Cleared bin {root}")

    @staticmethod
    def _perform(action: Action, source: Path, target: Path) -> None:
        if action is Action.MOVE:
            if target.exists():
                target.unlink()
            shutil.move(str(source), str(target))
        elif action is Action.COPY:
            shutil.copy2(source, target)
        else:
            raise ValueError(f"Unsupported action: {action}")

    def _log_operation(self, action: Action, run_directory: Path, count: int) -> None:
        if not self.operations_log:
            return
        try:
            self.operations_log.parent.mkdir(parents=True, exist_ok=True)
            with open(self.operations_log, "a", encoding="utf-8") as f:
                log_entry = {
                    "timestamp": datetime.now().isoformat(),
                    "action": action.value,
                    "run_directory": str(run_directory),
                    "files_count": count,
                }
                f.write(json.dumps(log_entry) + "\n")
        except OSError as e:
            logger.warning(f"Failed to log operation: {e}")
