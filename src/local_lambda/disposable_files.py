"""
Tracking of temporary folders that outlive a single pipeline stage.

Folders are registered when they are created and removed together when the
surrounding session ends, never while a run may still reference them.
"""

import logging
import shutil
import tempfile
import threading
from pathlib import Path
from typing import List, Optional, Union

from .constants import NAMESPACE, TEMP_FOLDER_PREFIX


def make_temporary_folder(prefix: str = TEMP_FOLDER_PREFIX) -> Path:
    """Create a new private temporary directory and return its path."""
    return Path(tempfile.mkdtemp(prefix=prefix))


class DisposableFiles:
    """Registry of folders deleted on ``dispose()``."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self._folders: List[Path] = []
        self._lock = threading.Lock()

    def add_folder(self, folder: Union[str, Path]) -> None:
        with self._lock:
            self._folders.append(Path(folder))

    @property
    def folders(self) -> List[Path]:
        with self._lock:
            return list(self._folders)

    def dispose(self) -> None:
        """Remove every registered folder."""
        with self._lock:
            folders, self._folders = self._folders, []

        for folder in folders:
            self.logger.debug(f"Removing temporary folder {folder}")
            shutil.rmtree(folder, ignore_errors=True)


# Global instance shared by every run in the process
_global_disposable_files: Optional[DisposableFiles] = None
_disposable_files_lock = threading.Lock()


def get_disposable_files() -> DisposableFiles:
    """
    Get or create the global disposable files registry.

    Returns:
        Global DisposableFiles instance
    """
    global _global_disposable_files

    with _disposable_files_lock:
        if _global_disposable_files is None:
            _global_disposable_files = DisposableFiles()
        return _global_disposable_files
