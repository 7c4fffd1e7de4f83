# SPDX-License-Identifier: Apache-2.0

"""
Fixed address space of the residential complex.

Eight blocks, 35 floors and 8 units per floor. Room keys on the wire are
"{floor}_{unit}" and must stay in that exact format to match stored data.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Block:
    """One building of the complex."""
    id: str
    name: str


BLOCKS: List[Block] = [
    Block("A", "仁 (A座)"),
    Block("B", "道 (B座)"),
    Block("C", "新 (C座)"),
    Block("D", "建 (D座)"),
    Block("E", "泰 (E座)"),
    Block("F", "昌 (F座)"),
    Block("G", "盛 (G座)"),
    Block("H", "志 (H座)"),
]

FLOORS: List[int] = list(range(1, 36))
UNITS: List[int] = list(range(1, 9))
ROOMS_PER_BLOCK = len(FLOORS) * len(UNITS)

_BLOCKS_BY_ID = {block.id: block for block in BLOCKS}


def get_block(block_id: str) -> Optional[Block]:
    """Look up a block by id."""
    return _BLOCKS_BY_ID.get(block_id)


def is_valid_block(block_id: str) -> bool:
    return block_id in _BLOCKS_BY_ID


def is_valid_room(floor: int, unit: int) -> bool:
    return floor in FLOORS and unit in UNITS


def room_key(floor: int, unit: int) -> str:
    """Build the wire room key, e.g. room_key(31, 5) == "31_5"."""
    return f"{floor}_{unit}"


def parse_room_key(key: str) -> Optional[Tuple[int, int]]:
    """
    Split a room key into (floor, unit).

    Returns None for keys that are malformed or outside the address space.
    """
    if not isinstance(key, str):
        return None

    parts = key.split("_")
    if len(parts) != 2:
        return None

    try:
        floor, unit = int(parts[0]), int(parts[1])
    except ValueError:
        return None

    if not is_valid_room(floor, unit):
        return None
    return floor, unit


def iter_rooms() -> Iterator[Tuple[int, int]]:
    """Yield every (floor, unit) of a block, floor-major."""
    for floor in FLOORS:
        for unit in UNITS:
            yield floor, unit
