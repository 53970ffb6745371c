"""
Garden Map Backend — Marker Store Unit Tests
===============================================

What:  Tests for MarkerStore load/save against real files in tmp_path.

What we test:
    ✅ Missing file loads as an empty mapping
    ✅ Saved file is pretty-printed JSON with string keys
    ✅ Malformed or wrongly shaped files raise StoreReadError
    ✅ Write failures raise StoreWriteError and leave no temp files
"""

import json
from pathlib import Path

import pytest

from gardenmap.exceptions import StoreReadError, StoreWriteError
from gardenmap.services.marker_store import MarkerStore

ROSE = {"latlng": {"lat": 1.0, "lng": 2.0}, "data": {"name": "Rose"}}
BASIL = {"latlng": {"lat": 40.5, "lng": 12.0}, "data": {"name": "Basil", "logbook": "pinched"}}


class TestMarkerStoreLoad:

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, store):
        assert not store.path.exists()
        assert await store.load() == {}

    @pytest.mark.asyncio
    async def test_keys_become_integers(self, markers_path):
        Path(markers_path).write_text(json.dumps({"0": ROSE, "7": BASIL}), encoding="utf-8")

        markers = await MarkerStore(markers_path).load()

        assert markers == {0: ROSE, 7: BASIL}

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self, markers_path):
        Path(markers_path).write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreReadError, match="Could not read marker data."):
            await MarkerStore(markers_path).load()

    @pytest.mark.asyncio
    async def test_top_level_array_raises(self, markers_path):
        Path(markers_path).write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(StoreReadError) as exc_info:
            await MarkerStore(markers_path).load()
        assert exc_info.value.context["found_type"] == "list"

    @pytest.mark.asyncio
    async def test_non_integer_key_raises(self, markers_path):
        Path(markers_path).write_text(json.dumps({"rose": ROSE}), encoding="utf-8")

        with pytest.raises(StoreReadError) as exc_info:
            await MarkerStore(markers_path).load()
        assert exc_info.value.context["bad_key"] == "rose"

    @pytest.mark.asyncio
    async def test_directory_in_place_of_file_raises(self, tmp_path):
        (tmp_path / "markers.json").mkdir()

        with pytest.raises(StoreReadError):
            await MarkerStore(str(tmp_path / "markers.json")).load()


class TestMarkerStoreSave:

    @pytest.mark.asyncio
    async def test_save_writes_readable_json(self, store):
        await store.save({0: ROSE, 3: BASIL})

        text = store.path.read_text(encoding="utf-8")
        assert json.loads(text) == {"0": ROSE, "3": BASIL}
        assert '\n  "0": {' in text  # indent=2

    @pytest.mark.asyncio
    async def test_save_then_load_in_new_store(self, store, markers_path):
        await store.save({2: BASIL})

        assert await MarkerStore(markers_path).load() == {2: BASIL}

    @pytest.mark.asyncio
    async def test_save_replaces_whole_file(self, store):
        await store.save({0: ROSE, 1: BASIL})
        await store.save({1: BASIL})

        assert await store.load() == {1: BASIL}

    @pytest.mark.asyncio
    async def test_save_creates_parent_directory(self, tmp_path):
        store = MarkerStore(str(tmp_path / "garden" / "beds" / "markers.json"))

        await store.save({0: ROSE})

        assert store.path.exists()

    @pytest.mark.asyncio
    async def test_save_leaves_no_temp_files(self, store, tmp_path):
        await store.save({0: ROSE})

        assert [p.name for p in tmp_path.iterdir()] == ["markers.json"]

    @pytest.mark.asyncio
    async def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = MarkerStore(str(blocker / "markers.json"))

        with pytest.raises(StoreWriteError, match="Could not save marker data."):
            await store.save({0: ROSE})

    @pytest.mark.asyncio
    async def test_unserializable_record_keeps_old_file(self, store):
        await store.save({0: ROSE})

        with pytest.raises(StoreWriteError):
            await store.save({0: ROSE, 1: {"latlng": {"lat": 0, "lng": 0}, "data": {1, 2}}})

        assert await store.load() == {0: ROSE}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
    async def test_non_finite_coordinate_is_refused(self, store, bad):
        await store.save({0: ROSE})

        with pytest.raises(StoreWriteError):
            await store.save({0: ROSE, 1: {"latlng": {"lat": bad, "lng": 0}, "data": {"name": "X"}}})

        text = store.path.read_text(encoding="utf-8")
        assert "Infinity" not in text and "NaN" not in text
        assert await store.load() == {0: ROSE}
