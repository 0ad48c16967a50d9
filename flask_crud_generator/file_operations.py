"""
Writing generated files

Every generator run writes its files through a :class:`GenerationTransaction`:
either all files land on disk or none do, and files that already exist are
only replaced when overwriting was requested.
"""

import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Union

from .exceptions import FileOperationError, GeneratedFileExistsError

logger = logging.getLogger(__name__)


class AtomicFileWriter:
    """
    Stages generated files and moves them into place all at once.

    Content is first written next to its target under a temporary name, then
    renamed over it. Files being replaced are copied aside and put back if a
    later step fails.
    """

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path).resolve()
        self.pending_files: Dict[Path, str] = {}
        self.committed = False
        self._staged: Dict[Path, Path] = {}
        self._backups: Dict[Path, Path] = {}
        self._new_dirs: List[Path] = []
        self._moved: List[Path] = []

    def add_file(self, relative_path: Union[str, Path], content: str, overwrite: bool = True):
        """
        Queue ``content`` for ``relative_path`` under the base path.

        Raises:
            GeneratedFileExistsError: If the file exists and overwrite is False
        """
        target = self.base_path / relative_path
        if not overwrite and target.exists():
            raise GeneratedFileExistsError(
                f"Unable to generate {relative_path} as it already exists.",
                path=target,
            )
        self.pending_files[target] = content

    def exists(self, relative_path: Union[str, Path]) -> bool:
        """True when the file is on disk or already queued."""
        target = self.base_path / relative_path
        return target in self.pending_files or target.exists()

    def commit(self):
        """
        Write every queued file.

        Raises:
            FileOperationError: When a file can't be written; the files
                touched so far are restored first
        """
        if self.committed:
            return

        try:
            self._check_targets()
            self._make_directories()
            self._backup_existing()
            self._stage()
            self._move_into_place()
        except Exception as e:
            logger.error(f"Writing generated files failed: {e}")
            self.rollback()
            if isinstance(e, FileOperationError):
                raise
            raise FileOperationError(f"Could not write the generated files: {e}") from e

        self.committed = True
        self._drop_backups()
        logger.info(f"Wrote {len(self.pending_files)} files under {self.base_path}")

    def rollback(self):
        """Undo a partial commit."""
        for target in self._moved:
            if target not in self._backups and target.exists():
                target.unlink()
        self._moved.clear()

        for target, backup in self._backups.items():
            try:
                if backup.exists():
                    shutil.move(str(backup), str(target))
            except OSError as e:
                logger.error(f"Could not restore {target} from {backup}: {e}")
        self._backups.clear()

        for staged in self._staged.values():
            try:
                if staged.exists():
                    staged.unlink()
            except OSError as e:
                logger.error(f"Could not remove {staged}: {e}")
        self._staged.clear()

        # deepest first so parents are empty by the time they're reached
        for directory in sorted(self._new_dirs, key=lambda d: len(d.parts), reverse=True):
            try:
                if directory.is_dir() and not any(directory.iterdir()):
                    directory.rmdir()
            except OSError as e:
                logger.debug(f"Left directory {directory} in place: {e}")
        self._new_dirs.clear()
        logger.info("Generated files rolled back")

    def _check_targets(self):
        for target in self.pending_files:
            if target.is_dir():
                raise FileOperationError(f"{target} is a directory")
            if target.exists() and not os.access(target, os.W_OK):
                raise FileOperationError(f"No write permission for {target}")

    def _make_directories(self):
        for target in self.pending_files:
            missing = []
            parent = target.parent
            while not parent.exists():
                missing.append(parent)
                parent = parent.parent
            if missing:
                target.parent.mkdir(parents=True, exist_ok=True)
                self._new_dirs.extend(missing)

    def _backup_existing(self):
        for target in self.pending_files:
            if not target.exists():
                continue
            backup = target.with_name(f"{target.name}.backup.{os.getpid()}")
            try:
                shutil.copy2(target, backup)
            except OSError as e:
                raise FileOperationError(f"Could not back up {target}: {e}") from e
            self._backups[target] = backup

    def _stage(self):
        for target, content in self.pending_files.items():
            try:
                # same directory as the target so the rename stays on one filesystem
                with tempfile.NamedTemporaryFile(
                    mode="w",
                    encoding="utf-8",
                    dir=target.parent,
                    prefix=f".{target.name}.",
                    suffix=".tmp",
                    delete=False,
                ) as handle:
                    handle.write(content)
                    self._staged[target] = Path(handle.name)
            except OSError as e:
                raise FileOperationError(f"Could not stage {target}: {e}") from e

    def _move_into_place(self):
        for target, staged in list(self._staged.items()):
            try:
                os.replace(staged, target)
            except OSError as e:
                raise FileOperationError(f"Could not move {target} into place: {e}") from e
            del self._staged[target]
            self._moved.append(target)

    def _drop_backups(self):
        for backup in self._backups.values():
            try:
                backup.unlink()
            except OSError as e:
                logger.debug(f"Could not remove backup {backup}: {e}")
        self._backups.clear()

    def get_written_files(self) -> List[Path]:
        return list(self.pending_files)


class GenerationTransaction:
    """
    Transaction around one generator run.

    Commits on a clean exit, rolls back when the block raises.

    Example:
        with GenerationTransaction(root, "CRUD generation") as transaction:
            transaction.add_file("blog/controllers/post_controller.py", code)
    """

    def __init__(self, base_path: Union[str, Path], operation_name: str = "Generation"):
        self.base_path = Path(base_path)
        self.operation_name = operation_name
        self.writer = AtomicFileWriter(base_path)
        self.completed = False
        self._started = None

    def __enter__(self):
        self._started = time.time()
        logger.info(f"{self.operation_name} started in {self.base_path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            logger.error(f"{self.operation_name} aborted: {exc_val}")
            self.writer.rollback()
            return False

        self.writer.commit()
        self.completed = True
        logger.info(
            f"{self.operation_name} wrote {self.get_file_count()} files "
            f"in {time.time() - self._started:.2f}s"
        )
        return False

    def add_file(self, relative_path: Union[str, Path], content: str, overwrite: bool = True):
        self.writer.add_file(relative_path, content, overwrite=overwrite)

    def ensure_package(self, relative_dir: Union[str, Path]):
        """Queue an empty ``__init__.py`` unless the directory already has one."""
        init_path = Path(relative_dir) / "__init__.py"
        if not self.writer.exists(init_path):
            self.add_file(init_path, "")

    def exists(self, relative_path: Union[str, Path]) -> bool:
        return self.writer.exists(relative_path)

    def get_file_count(self) -> int:
        return len(self.writer.pending_files)

    def get_written_files(self) -> List[Path]:
        return self.writer.get_written_files()
