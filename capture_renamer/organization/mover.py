import os
import shutil
import logging
from datetime import datetime
from pathlib import Path
from typing import Set

from .. import config
from ..exceptions import CollisionConflict, DirectoryCreationError, FileOperationError
from ..models import SourceEntry, RenamePlan


class FileMover:
    """
    Applies deletes, timestamp write-back and renames inside one working
    directory. Never overwrites: a taken target is redirected into the
    duplicates subfolder.

    In dry run nothing touches the disk. Names taken and freed earlier in the
    run are tracked so the simulated plan matches what a real run would do.
    """

    def __init__(self, root: Path, dry_run: bool = False):
        self.root = Path(root)
        self.dry_run = dry_run
        self.duplicates_dir = self.root / config.DUPLICATES_DIR
        self.marker = " [dry run]" if dry_run else ""
        self._claimed: Set[Path] = set()
        self._vacated: Set[Path] = set()
        self._duplicates_ready = False

    def delete(self, entry: SourceEntry):
        logging.info(f"Deleting {entry.path}.{self.marker}")
        if self.dry_run:
            return
        try:
            entry.path.unlink()
        except OSError as e:
            raise FileOperationError(f"Failed to delete {entry.path}: {e}") from e
        self._vacated.add(entry.path)

    def set_mtime(self, path: Path, dt: datetime):
        """Writes dt back as the file's modification time and verifies it stuck."""
        if self.dry_run:
            return
        try:
            st = path.stat()
            os.utime(path, (st.st_atime, dt.timestamp()))
            actual = datetime.fromtimestamp(path.stat().st_mtime).replace(microsecond=0)
        except OSError as e:
            raise FileOperationError(f"Failed to set modification time on {path}: {e}") from e

        if actual != dt:
            logging.warning(f"Setting file modification time failed for {path}. Expected: {dt}. Actual: {actual}.")

    def place(self, entry: SourceEntry, target_name: str) -> RenamePlan:
        """
        Moves entry to root/target_name, or to duplicates/target_name if the
        canonical target is taken. Raises FileOperationError when both are
        unavailable; the source is then left where it was.
        """
        candidate = self.root / target_name
        if candidate == entry.path:
            logging.info(f"{entry.path} already has its canonical name.{self.marker}")
            return RenamePlan(entry, target_name, candidate)

        try:
            self._move(entry.path, candidate)
            logging.info(f"Moved file {entry.path} to {candidate}.{self.marker}")
            return RenamePlan(entry, target_name, candidate)
        except CollisionConflict:
            logging.error(
                f"Failed to move file {entry.path} to {candidate} because the destination already existed. "
                f"Moving to the duplicates subfolder.{self.marker}"
            )

        try:
            self._ensure_duplicates_dir()
        except DirectoryCreationError as e:
            logging.error(str(e))

        fallback = self.duplicates_dir / target_name
        try:
            self._move(entry.path, fallback)
        except (CollisionConflict, FileOperationError) as e:
            logging.error(f"Failed to move file {entry.path} to {fallback}.{self.marker}")
            raise FileOperationError(f"Fallback move to {fallback} failed: {e}") from e

        logging.info(f"Moved file {entry.path} to {fallback}.{self.marker}")
        return RenamePlan(entry, target_name, fallback, is_fallback=True)

    # --- Internal Helpers ---

    def _occupied(self, path: Path) -> bool:
        if path in self._claimed:
            return True
        if path in self._vacated:
            return False
        return path.exists()

    def _move(self, src: Path, dest: Path):
        if self._occupied(dest):
            raise CollisionConflict(f"{dest} already exists")

        if not self.dry_run:
            if not dest.parent.is_dir():
                raise FileOperationError(f"Destination folder {dest.parent} does not exist")
            try:
                shutil.move(str(src), str(dest))
            except OSError as e:
                raise FileOperationError(f"Failed to move {src} to {dest}: {e}") from e

        self._claimed.discard(src)
        self._vacated.add(src)
        self._vacated.discard(dest)
        self._claimed.add(dest)

    def _ensure_duplicates_dir(self):
        if self._duplicates_ready:
            return
        if self.dry_run:
            logging.info(f"Creating directory {self.duplicates_dir}.{self.marker}")
            self._duplicates_ready = True
            return
        try:
            self.duplicates_dir.mkdir(exist_ok=True)
        except OSError as e:
            raise DirectoryCreationError(f"Failed to create directory {self.duplicates_dir}: {e}") from e
        self._duplicates_ready = True
