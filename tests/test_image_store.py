"""
Tests for the in-memory list of selected images.
"""

import io
import os

import pytest

from image_store import ImageStore, UnsupportedImageError, is_supported


@pytest.fixture
def store(tmp_path):
    return ImageStore(str(tmp_path))


class TestImageStore:

    def test_add_keeps_selection_order(self, store, png_bytes, jpeg_bytes):
        first = store.add("first.png", io.BytesIO(png_bytes))
        second = store.add("second.JPG", io.BytesIO(jpeg_bytes))

        assert len(store) == 2
        assert [img.id for img in store.list()] == [first.id, second.id]
        assert first.content_type == "image/png"
        assert second.content_type == "image/jpeg"
        assert second.size == len(jpeg_bytes)
        assert first.id != second.id

    def test_preview_url_and_file(self, store, png_bytes):
        image = store.add("a.png", io.BytesIO(png_bytes))
        assert image.preview_url == f"/preview/{image.id}"
        assert os.path.exists(image.path)
        assert image.read_bytes() == png_bytes

    def test_filename_is_stripped_to_basename(self, store, png_bytes):
        image = store.add("holiday/beach.png", io.BytesIO(png_bytes))
        assert image.name == "beach.png"

    def test_remove_deletes_file(self, store, png_bytes):
        image = store.add("a.png", io.BytesIO(png_bytes))
        store.add("b.png", io.BytesIO(png_bytes))

        assert store.remove(image.id) is True
        assert len(store) == 1
        assert image.id not in store
        assert store.get(image.id) is None
        assert not os.path.exists(image.path)

    def test_remove_unknown_id(self, store):
        assert store.remove("missing") is False

    def test_clear(self, store, png_bytes):
        images = [store.add(f"{i}.png", io.BytesIO(png_bytes)) for i in range(3)]
        assert store.clear() == 3
        assert len(store) == 0
        assert not any(os.path.exists(img.path) for img in images)

    def test_locked_file_does_not_break_remove(self, store, png_bytes, monkeypatch):
        image = store.add("a.png", io.BytesIO(png_bytes))
        other = store.add("b.png", io.BytesIO(png_bytes))

        def locked(path):
            raise PermissionError(13, "file in use", path)

        monkeypatch.setattr("image_store.os.remove", locked)
        assert store.remove(image.id) is True
        assert image.id not in store
        assert store.clear() == 1
        assert other.id not in store

    def test_rejects_unsupported_type(self, store):
        with pytest.raises(UnsupportedImageError):
            store.add("animation.gif", io.BytesIO(b"GIF89a"))
        assert len(store) == 0

    @pytest.mark.parametrize("name,expected", [
        ("a.jpg", True), ("a.JPEG", True), ("a.png", True),
        ("a.gif", False), ("a.pdf", False), ("noext", False), ("", False),
    ])
    def test_is_supported(self, name, expected):
        assert is_supported(name) is expected

    def test_to_dict(self, store, png_bytes):
        image = store.add("a.png", io.BytesIO(png_bytes))
        data = image.to_dict()
        assert data["id"] == image.id
        assert data["name"] == "a.png"
        assert data["preview"] == image.preview_url
        assert "path" not in data
