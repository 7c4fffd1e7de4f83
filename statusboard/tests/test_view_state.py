# SPDX-License-Identifier: Apache-2.0

"""
Tests for the selected-block cache.
"""

import pytest
from datetime import datetime

from statusboard.domain.board import FilterState
from statusboard.domain.view_state import BlockViewState
from statusboard.models.entities import RoomRecord
from statusboard.models.enums import InfoSource, RoomStatus, StatusFilter


class TestBlockSelection:
    """Test block switching and stale fetch handling."""

    def test_rejects_unknown_block(self):
        with pytest.raises(ValueError):
            BlockViewState("Q")
        with pytest.raises(ValueError):
            BlockViewState().select_block("Q")

    def test_fetch_for_current_block_applies(self):
        state = BlockViewState()
        ticket = state.select_block("A")

        assert state.loading is True
        assert state.apply_fetch(ticket, {"5_3": {"status": "danger"}}) is True
        assert state.loading is False
        assert state.records["5_3"].status is RoomStatus.DANGER

    def test_late_response_for_previous_block_is_discarded(self):
        """A slow fetch for A must not overwrite the view of B."""
        state = BlockViewState()
        ticket_a = state.select_block("A")
        ticket_b = state.select_block("B")

        assert state.apply_fetch(ticket_b, {"1_1": {"status": "safe"}}) is True
        assert state.apply_fetch(ticket_a, {"5_3": {"status": "danger"}}) is False

        assert state.current_block == "B"
        assert list(state.records) == ["1_1"]

    def test_older_fetch_of_same_block_is_discarded(self):
        state = BlockViewState()
        first = state.select_block("A")
        second = state.revalidate()

        assert state.apply_fetch(second, {"2_2": {"status": "safe"}}) is True
        assert state.apply_fetch(first, {}) is False
        assert "2_2" in state.records

    def test_switching_block_clears_records(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {"1_1": {"status": "safe"}})

        state.select_block("C")
        assert state.records == {}

    def test_revalidate_keeps_records_while_loading(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {"1_1": {"status": "safe"}})

        state.revalidate()
        assert "1_1" in state.records
        assert state.loading is True

    def test_failed_fetch_keeps_snapshot(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {"1_1": {"status": "safe"}})
        ticket = state.revalidate()

        assert state.fail_fetch(ticket) is True
        assert state.loading is False
        assert "1_1" in state.records

    def test_malformed_entries_read_as_empty(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {"1_1": "garbage", "1_2": None, "1_3": {"status": "missing"}})

        assert state.records["1_3"].status is RoomStatus.MISSING
        assert state.records["1_1"].status is None
        assert "1_2" not in state.records


class TestLocalPatch:
    """Test optimistic updates after a successful write."""

    def test_patch_current_block(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {})
        now = datetime(2024, 11, 26, 15, 0)

        assert state.apply_local_patch("A", 5, 3, RoomStatus.DANGER, "stuck", InfoSource.CITIZEN, None, "uid-1", now)

        record = state.records["5_3"]
        assert record.status is RoomStatus.DANGER
        assert record.remark == "stuck"
        assert record.updated_at == now
        assert record.updated_by == "uid-1"

    def test_patch_replaces_whole_record(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {"5_3": {"status": "danger", "remark": "stuck"}})
        previous = state.records

        state.apply_local_patch("A", 5, 3, RoomStatus.SAFE)

        assert state.records["5_3"].status is RoomStatus.SAFE
        assert state.records["5_3"].remark is None
        assert previous["5_3"].status is RoomStatus.DANGER

    def test_patch_does_not_inherit_previous_writer(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {"5_3": {"status": "safe", "updatedBy": "uid-alice"}})

        state.apply_local_patch("A", 5, 3, RoomStatus.DANGER, "stuck")
        assert state.records["5_3"].updated_by is None

        state.apply_local_patch("A", 5, 3, RoomStatus.DANGER, "stuck", actor_uid="uid-bob")
        assert state.records["5_3"].updated_by == "uid-bob"

    def test_patch_for_other_block_is_ignored(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {})

        assert state.apply_local_patch("B", 1, 1, RoomStatus.SAFE) is False
        assert state.records == {}

    def test_derived_views_follow_patch(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {})
        state.apply_local_patch("A", 5, 3, RoomStatus.DANGER)

        assert state.stats()[RoomStatus.DANGER] == 1
        grid = state.grid(FilterState(status_filter=StatusFilter.DANGER))
        assert grid.filtered_count == 1
        assert [row.room_key for row in state.rows(FilterState(status_filter=StatusFilter.DANGER))] == ["5_3"]

    def test_records_are_room_records(self):
        state = BlockViewState()
        state.apply_fetch(state.select_block("A"), {"1_1": RoomRecord(status=RoomStatus.SAFE)})
        assert isinstance(state.records["1_1"], RoomRecord)
