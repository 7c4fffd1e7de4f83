# SPDX-License-Identifier: Apache-2.0

"""
Tests for the fixed address space.
"""

import pytest

from statusboard.domain.address import (
    BLOCKS,
    FLOORS,
    ROOMS_PER_BLOCK,
    UNITS,
    get_block,
    is_valid_block,
    is_valid_room,
    iter_rooms,
    parse_room_key,
    room_key
)


class TestAddressSpace:
    """Test blocks, floors and units."""

    def test_dimensions(self):
        assert [block.id for block in BLOCKS] == list("ABCDEFGH")
        assert FLOORS[0] == 1 and FLOORS[-1] == 35
        assert UNITS[0] == 1 and UNITS[-1] == 8
        assert ROOMS_PER_BLOCK == 280

    def test_block_lookup(self):
        assert get_block("D").name == "建 (D座)"
        assert get_block("Z") is None
        assert is_valid_block("H")
        assert not is_valid_block("a")

    def test_room_validity(self):
        assert is_valid_room(1, 1)
        assert is_valid_room(35, 8)
        assert not is_valid_room(0, 1)
        assert not is_valid_room(36, 1)
        assert not is_valid_room(1, 9)

    def test_iter_rooms_is_floor_major(self):
        rooms = list(iter_rooms())
        assert len(rooms) == ROOMS_PER_BLOCK
        assert rooms[:3] == [(1, 1), (1, 2), (1, 3)]
        assert rooms[8] == (2, 1)
        assert rooms[-1] == (35, 8)


class TestRoomKey:
    """Test wire room keys."""

    def test_format(self):
        assert room_key(31, 5) == "31_5"
        assert room_key(1, 8) == "1_8"

    def test_parse(self):
        assert parse_room_key("31_5") == (31, 5)

    @pytest.mark.parametrize("key", ["", "31", "31_", "_5", "a_b", "31_5_1", "0_1", "36_1", "1_9", None, 315])
    def test_parse_invalid(self, key):
        assert parse_room_key(key) is None
