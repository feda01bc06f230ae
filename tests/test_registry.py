"""Unit tests for the viewer registry."""

import threading

import numpy as np
import pytest

from viewarr.registry import ViewerRegistry


class TestViewerRegistry:
    """Test multiple independent viewers keyed by id."""

    def test_create_and_get(self):
        """Test that get returns the created viewer."""
        registry = ViewerRegistry()
        viewer = registry.create("a")
        assert registry.get("a") is viewer
        assert registry.has("a")

    def test_create_existing_returns_same(self):
        """Test that creating twice reuses the viewer."""
        registry = ViewerRegistry()
        assert registry.create("a") is registry.create("a")
        assert registry.active_ids() == ["a"]

    def test_unknown_id_raises(self):
        """Test lookup of a missing id."""
        registry = ViewerRegistry()
        with pytest.raises(KeyError):
            registry.get("missing")

    def test_destroy(self):
        """Test removal and callback cleanup."""
        registry = ViewerRegistry()
        viewer = registry.create("a")
        calls = []
        viewer.on_state_change(calls.append)
        assert registry.destroy("a") is viewer
        assert not registry.has("a")
        viewer.set_zoom(2.0)
        assert calls == []
        assert registry.destroy("a") is None

    def test_instances_independent(self):
        """Test that viewers share no state."""
        registry = ViewerRegistry()
        a = registry.create("a")
        b = registry.create("b")
        a.set_image_data(np.arange(4.0), 2, 2)
        a.set_zoom(3.0)
        a.set_colormap("RdBu")
        assert not b.has_image()
        assert b.zoom_level() == 1.0
        assert not b.is_symmetric()

    def test_concurrent_create(self):
        """Test that concurrent creation yields one viewer per id."""
        registry = ViewerRegistry()
        results = []

        def worker():
            results.append(registry.create("shared"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(results) == 8
        assert all(v is results[0] for v in results)
        assert registry.active_ids() == ["shared"]
