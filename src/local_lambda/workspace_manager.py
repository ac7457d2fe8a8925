import logging
from pathlib import Path
from typing import Callable, Optional

from .constants import NAMESPACE
from .disposable_files import (
    DisposableFiles,
    get_disposable_files,
    make_temporary_folder,
)
from .models import WorkspaceLayout


class WorkspaceManager:
    """Manages the private temporary workspace of one local run."""

    def __init__(
        self,
        disposer: Optional[DisposableFiles] = None,
        allocator: Callable[[], Path] = make_temporary_folder,
    ) -> None:
        self.logger = logging.getLogger(f"{NAMESPACE}.{__name__.split('.')[-1]}")
        self.disposer = disposer if disposer is not None else get_disposable_files()
        self.allocator = allocator
        self._layout: Optional[WorkspaceLayout] = None

    @property
    def layout(self) -> Optional[WorkspaceLayout]:
        """The workspace of this run, or None before the first ensure_workspace()."""
        return self._layout

    def ensure_workspace(self) -> WorkspaceLayout:
        """
        Allocate the workspace on first use and return it.

        The directory is registered with the disposer so it is removed when the
        session ends. Later calls return the same layout.

        Returns:
            WorkspaceLayout rooted at the run's temporary directory
        """
        if self._layout is None:
            root = Path(self.allocator())
            self.disposer.add_folder(root)
            self._layout = WorkspaceLayout(root=root)
            self.logger.debug(f"Allocated workspace at {root}")

        return self._layout
