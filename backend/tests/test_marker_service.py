"""
Garden Map Backend — Marker Service Unit Tests
=================================================

What:  Tests for MarkerService rules on top of a real MarkerStore.

What we test:
    ✅ ID assignment (0 for empty, max + 1, reuse after deleting the max)
    ✅ Create validation never touches the store
    ✅ Update: latlng replaced wholesale, data merged key by key
    ✅ Update/Delete of unknown or non-numeric IDs raise NotFoundError
    ✅ Store errors propagate unchanged
    ✅ Concurrent creates get distinct IDs when writes are serialized
"""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from gardenmap.exceptions import NotFoundError, StoreReadError, StoreWriteError, ValidationError
from gardenmap.services.marker_service import MarkerService, next_marker_id, parse_marker_id
from gardenmap.services.marker_store import MarkerStore

ORIGIN = {"lat": 1, "lng": 2}


class TestHelpers:

    def test_next_marker_id_empty(self):
        assert next_marker_id({}) == 0

    def test_next_marker_id_uses_max_not_count(self):
        assert next_marker_id({0: {}, 5: {}, 2: {}}) == 6

    @pytest.mark.parametrize("raw, expected", [("0", 0), ("7", 7), ("42", 42)])
    def test_parse_marker_id_valid(self, raw, expected):
        assert parse_marker_id(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "-1", "1.5", "", "²", "007", "00", " 7", "7 ", "+7"])
    def test_parse_marker_id_rejects(self, raw):
        assert parse_marker_id(raw) is None


class TestMarkerServiceCreate:

    @pytest.mark.asyncio
    async def test_first_marker_gets_id_zero(self, marker_service):
        result = await marker_service.create_marker(ORIGIN, {"name": "Rose"})

        assert result.id == 0
        assert result.latlng.lat == 1 and result.latlng.lng == 2
        assert result.data == {"name": "Rose"}

    @pytest.mark.asyncio
    async def test_ids_increase(self, marker_service):
        first = await marker_service.create_marker(ORIGIN, {"name": "Rose"})
        second = await marker_service.create_marker(ORIGIN, {"name": "Tulip"})

        assert (first.id, second.id) == (0, 1)

    @pytest.mark.asyncio
    async def test_deleted_max_id_is_reused(self, marker_service):
        await marker_service.create_marker(ORIGIN, {"name": "Rose"})
        await marker_service.create_marker(ORIGIN, {"name": "Tulip"})
        await marker_service.delete_marker("1")

        again = await marker_service.create_marker(ORIGIN, {"name": "Daisy"})

        assert again.id == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "latlng, data",
        [
            (None, {"name": "Rose"}),
            (ORIGIN, None),
            (ORIGIN, {}),
            (ORIGIN, {"name": ""}),
            (ORIGIN, {"logbook": "no name"}),
        ],
    )
    async def test_missing_fields_rejected_without_store_access(
        self, marker_service, store, latlng, data
    ):
        with pytest.raises(ValidationError, match="latlng, data.name"):
            await marker_service.create_marker(latlng, data)

        assert not store.path.exists()

    @pytest.mark.asyncio
    async def test_optional_and_extra_fields_kept(self, marker_service, store):
        data = {
            "name": "Apple",
            "plantedDate": "2024-03-01",
            "logbook": "grafted",
            "infoLink": "https://example.org/apple",
            "pictureRepo": "photos/apple",
            "variety": "Cox",
        }

        await marker_service.create_marker(ORIGIN, data)

        assert (await store.load())[0]["data"] == data


class TestMarkerServiceUpdate:

    @pytest.mark.asyncio
    async def test_data_is_merged(self, marker_service):
        await marker_service.create_marker(ORIGIN, {"name": "A", "logbook": "x"})

        result = await marker_service.update_marker("0", data={"logbook": "y"})

        assert result.data == {"name": "A", "logbook": "y"}

    @pytest.mark.asyncio
    async def test_latlng_is_replaced(self, marker_service, store):
        await marker_service.create_marker({"lat": 10, "lng": 20}, {"name": "A"})

        result = await marker_service.update_marker("0", latlng={"lat": 3.5, "lng": 4.5})

        assert result.latlng.model_dump() == {"lat": 3.5, "lng": 4.5}
        assert (await store.load())[0] == {
            "latlng": {"lat": 3.5, "lng": 4.5},
            "data": {"name": "A"},
        }

    @pytest.mark.asyncio
    async def test_update_returns_integer_id(self, marker_service):
        await marker_service.create_marker(ORIGIN, {"name": "A"})

        result = await marker_service.update_marker("0", data={"name": "B"})

        assert result.id == 0

    @pytest.mark.asyncio
    async def test_empty_data_counts_as_given(self, marker_service):
        await marker_service.create_marker(ORIGIN, {"name": "A"})

        result = await marker_service.update_marker("0", data={})

        assert result.data == {"name": "A"}

    @pytest.mark.asyncio
    async def test_nothing_to_update_rejected(self, marker_service):
        with pytest.raises(ValidationError, match="No update data provided"):
            await marker_service.update_marker("0")

    @pytest.mark.asyncio
    async def test_unknown_id(self, marker_service, store):
        await marker_service.create_marker(ORIGIN, {"name": "A"})
        before = await store.load()

        with pytest.raises(NotFoundError, match="Marker with ID 9 not found."):
            await marker_service.update_marker("9", data={"name": "B"})

        assert await store.load() == before

    @pytest.mark.asyncio
    async def test_non_numeric_id(self, marker_service):
        with pytest.raises(NotFoundError):
            await marker_service.update_marker("rose", data={"name": "B"})

    @pytest.mark.asyncio
    async def test_zero_padded_id_is_not_found(self, marker_service):
        for name in "ABCDEFGH":
            await marker_service.create_marker(ORIGIN, {"name": name})

        with pytest.raises(NotFoundError, match="Marker with ID 007 not found."):
            await marker_service.update_marker("007", data={"name": "B"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "stored",
        [
            {"latlng": {"lat": 1, "lng": 2}, "data": None},
            {"data": {"name": "A"}},
        ],
    )
    async def test_malformed_stored_record_is_a_read_error(self, markers_path, stored):
        Path(markers_path).write_text(json.dumps({"0": stored}), encoding="utf-8")
        service = MarkerService(MarkerStore(markers_path))

        with pytest.raises(StoreReadError) as exc_info:
            await service.update_marker("0", data={"logbook": "x"})

        assert exc_info.value.context["marker_id"] == 0
        assert json.loads(Path(markers_path).read_text(encoding="utf-8")) == {"0": stored}


class TestMarkerServiceDelete:

    @pytest.mark.asyncio
    async def test_removes_exactly_one(self, marker_service):
        for name in ("A", "B", "C"):
            await marker_service.create_marker(ORIGIN, {"name": name})

        result = await marker_service.delete_marker("1")
        remaining = await marker_service.list_markers()

        assert result.message == "Marker 1 deleted successfully."
        assert sorted(remaining) == ["0", "2"]

    @pytest.mark.asyncio
    async def test_unknown_id(self, marker_service):
        with pytest.raises(NotFoundError):
            await marker_service.delete_marker("0")


class TestMarkerServiceList:

    @pytest.mark.asyncio
    async def test_keys_are_strings(self, marker_service):
        await marker_service.create_marker(ORIGIN, {"name": "A"})

        markers = await marker_service.list_markers()

        assert list(markers) == ["0"]
        assert markers["0"].data == {"name": "A"}

    @pytest.mark.asyncio
    async def test_malformed_record_is_a_read_error(self, markers_path):
        Path(markers_path).write_text(json.dumps({"0": {"data": {}}}), encoding="utf-8")
        service = MarkerService(MarkerStore(markers_path))

        with pytest.raises(StoreReadError):
            await service.list_markers()


class TestMarkerServiceStoreFailures:

    @pytest.mark.asyncio
    async def test_read_error_propagates(self, marker_service):
        marker_service.store.load = AsyncMock(side_effect=StoreReadError())

        with pytest.raises(StoreReadError):
            await marker_service.create_marker(ORIGIN, {"name": "A"})

    @pytest.mark.asyncio
    async def test_write_error_propagates(self, marker_service):
        marker_service.store.save = AsyncMock(side_effect=StoreWriteError())

        with pytest.raises(StoreWriteError, match="Could not save marker data."):
            await marker_service.create_marker(ORIGIN, {"name": "A"})


class TestWriteSerialization:

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, store):
        service = MarkerService(store, serialize_writes=True)

        results = await asyncio.gather(
            *(service.create_marker(ORIGIN, {"name": f"plant-{i}"}) for i in range(10))
        )

        assert sorted(r.id for r in results) == list(range(10))
        assert len(await store.load()) == 10

    @pytest.mark.asyncio
    async def test_unserialized_service_still_applies_sequential_writes(self, store):
        service = MarkerService(store, serialize_writes=False)

        await service.create_marker(ORIGIN, {"name": "A"})
        await service.update_marker("0", data={"logbook": "watered"})

        assert (await store.load())[0]["data"] == {"name": "A", "logbook": "watered"}
