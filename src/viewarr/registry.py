"""Registry of independent viewer instances keyed by host id."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from viewarr.config import DEFAULT_CONFIG, ViewerConfig
from viewarr.logger import get_logger
from viewarr.viewer import ArrayViewer

LOGGER = get_logger(__name__)


class ViewerRegistry:
    """Create, look up and destroy viewers by id.

    The lock guards the id table only; each viewer remains single-owner.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._viewers: Dict[str, ArrayViewer] = {}

    def create(self, viewer_id: str, config: ViewerConfig = DEFAULT_CONFIG) -> ArrayViewer:
        """Return the viewer for ``viewer_id``, creating it if needed."""
        with self._lock:
            existing = self._viewers.get(viewer_id)
            if existing is not None:
                LOGGER.debug("Reusing viewer %r", viewer_id)
                return existing
            viewer = ArrayViewer(config)
            self._viewers[viewer_id] = viewer
        LOGGER.debug("Created viewer %r", viewer_id)
        return viewer

    def get(self, viewer_id: str) -> ArrayViewer:
        """Return an existing viewer; raises KeyError if unknown."""
        with self._lock:
            try:
                return self._viewers[viewer_id]
            except KeyError:
                raise KeyError(f"No viewer with id {viewer_id!r}") from None

    def has(self, viewer_id: str) -> bool:
        with self._lock:
            return viewer_id in self._viewers

    def destroy(self, viewer_id: str) -> Optional[ArrayViewer]:
        """Remove a viewer and drop its callbacks; unknown ids are ignored."""
        with self._lock:
            viewer = self._viewers.pop(viewer_id, None)
        if viewer is not None:
            viewer.clear_callbacks()
            LOGGER.debug("Destroyed viewer %r", viewer_id)
        return viewer

    def active_ids(self) -> List[str]:
        with self._lock:
            return list(self._viewers)
