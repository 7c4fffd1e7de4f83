# SPDX-License-Identifier: Apache-2.0

"""
Derived views of a block's room statuses.

This module turns the sparse roomKey -> record snapshot of one block into
statistics, the danger alert list, and the filtered grid and list
projections shown on the board. Functions here are pure: they never mutate
their input and never raise on malformed per-room data, since the backing
store has no schema validation. Unknown statuses read as unreported and
unparseable timestamps read as missing.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..models.entities import RoomRecord
from ..models.enums import CellStyle, RoomStatus, SortBy, SortOrder, StatusFilter, ViewMode
from .address import FLOORS, ROOMS_PER_BLOCK, UNITS, get_block, parse_room_key, room_key
from .timefmt import format_full_time, format_relative_time, to_wire

RoomRecords = Mapping[str, Any]

CELL_STYLES: Dict[Optional[RoomStatus], CellStyle] = {
    None: CellStyle.UNREPORTED,
    RoomStatus.SAFE: CellStyle.SAFE,
    RoomStatus.DANGER: CellStyle.DANGER,
    RoomStatus.DECEASED: CellStyle.DECEASED,
    RoomStatus.MIXED: CellStyle.MIXED,
    RoomStatus.MISSING: CellStyle.MISSING,
}

CELL_ICONS: Dict[Optional[RoomStatus], Optional[str]] = {
    None: None,
    RoomStatus.SAFE: "check-circle",
    RoomStatus.DANGER: "alert-circle",
    RoomStatus.DECEASED: "x-circle",
    RoomStatus.MIXED: "layers",
    RoomStatus.MISSING: "search",
}

STATUS_LABELS: Dict[RoomStatus, str] = {
    RoomStatus.SAFE: "Safe",
    RoomStatus.DANGER: "Needs rescue",
    RoomStatus.DECEASED: "Deceased",
    RoomStatus.MIXED: "Mixed situation",
    RoomStatus.MISSING: "Missing",
}


@dataclass(frozen=True)
class FilterState:
    """Board filter and sort settings."""
    status_filter: StatusFilter = StatusFilter.ALL
    has_remark_filter: bool = False
    sort_by: SortBy = SortBy.FLOOR
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self):
        # None is the null-status filter
        if self.status_filter is None:
            object.__setattr__(self, "status_filter", StatusFilter.UNREPORTED)
        object.__setattr__(self, "status_filter", StatusFilter(self.status_filter))
        object.__setattr__(self, "sort_by", SortBy(self.sort_by))
        object.__setattr__(self, "sort_order", SortOrder(self.sort_order))
        object.__setattr__(self, "has_remark_filter", bool(self.has_remark_filter))


@dataclass
class BlockStats:
    """Counts of rooms per reported status."""
    counts: Dict[RoomStatus, int]
    total_rooms: int = ROOMS_PER_BLOCK

    @property
    def reported(self) -> int:
        return sum(self.counts.values())

    def __getitem__(self, status: RoomStatus) -> int:
        return self.counts[status]

    def to_dict(self) -> Dict[str, int]:
        return {status.value: self.counts[status] for status in RoomStatus}


@dataclass
class DangerEntry:
    """Room flagged as needing rescue."""
    floor: int
    unit: int
    room_key: str
    remark: Optional[str]
    updated_at: Optional[datetime]
    time_label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "floor": self.floor,
            "unit": self.unit,
            "roomKey": self.room_key,
            "remark": self.remark,
            "updatedAt": to_wire(self.updated_at),
            "timeAgo": self.time_label
        }


@dataclass
class GridCell:
    """One (floor, unit) position of the grid. Invisible cells are dimmed, never removed."""
    floor: int
    unit: int
    room_key: str
    record: Optional[RoomRecord]
    visible: bool
    style: CellStyle
    icon: Optional[str]
    show_remark_marker: bool = False
    time_label: str = ""

    @property
    def dimmed(self) -> bool:
        return not self.visible

    @property
    def status(self) -> Optional[RoomStatus]:
        return self.record.status if self.record else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "floor": self.floor,
            "unit": self.unit,
            "roomKey": self.room_key,
            "visible": self.visible,
            "dimmed": self.dimmed,
            "style": self.style.value,
            "icon": self.icon,
            "status": self.status.value if self.status else None,
            "remarkMarker": self.show_remark_marker,
            "timeAgo": self.time_label,
            "record": self.record.to_wire() if self.record else None
        }


@dataclass
class GridRow:
    floor: int
    cells: List[GridCell] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"floor": self.floor, "cells": [cell.to_dict() for cell in self.cells]}


@dataclass
class GridModel:
    """Full floor x unit grid of one block."""
    block: str
    rows: List[GridRow]
    filtered_count: int
    total_rooms: int = ROOMS_PER_BLOCK

    def cells(self) -> List[GridCell]:
        return [cell for row in self.rows for cell in row.cells]

    def cell(self, floor: int, unit: int) -> Optional[GridCell]:
        for row in self.rows:
            if row.floor != floor:
                continue
            for cell in row.cells:
                if cell.unit == unit:
                    return cell
        return None


@dataclass
class ListRow:
    """Flat projection of a visible, existing record."""
    floor: int
    unit: int
    room_key: str
    record: RoomRecord
    time_label: str = ""

    @property
    def status(self) -> Optional[RoomStatus]:
        return self.record.status

    @property
    def updated_at(self) -> Optional[datetime]:
        return self.record.updated_at

    def to_dict(self) -> Dict[str, Any]:
        status = self.record.status
        return {
            "floor": self.floor,
            "unit": self.unit,
            "roomKey": self.room_key,
            "status": status.value if status else None,
            "statusLabel": STATUS_LABELS.get(status) if status else None,
            "remark": self.record.remark,
            "source": self.record.source.value if self.record.source else None,
            "sourceUrl": self.record.source_url,
            "updatedAt": to_wire(self.record.updated_at),
            "updatedAtLabel": format_full_time(self.record.updated_at),
            "timeAgo": self.time_label
        }


@dataclass
class BoardView:
    """Everything the board renders for one block."""
    block: str
    block_name: str
    stats: BlockStats
    danger_list: List[DangerEntry]
    filtered_count: int
    view: ViewMode
    grid: Optional[GridModel] = None
    rows: Optional[List[ListRow]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "block": self.block,
            "blockName": self.block_name,
            "stats": self.stats.to_dict(),
            "reported": self.stats.reported,
            "dangerList": [entry.to_dict() for entry in self.danger_list],
            "filteredCount": self.filtered_count,
            "totalRooms": self.stats.total_rooms,
            "view": self.view.value
        }
        if self.grid is not None:
            result["grid"] = [row.to_dict() for row in self.grid.rows]
        if self.rows is not None:
            result["list"] = [row.to_dict() for row in self.rows]
        return result


def as_record(value: Any) -> Optional[RoomRecord]:
    """
    Normalize one snapshot value into a RoomRecord.

    None stays None (unreported). Raw mappings are parsed tolerantly; values
    that cannot be parsed at all become an empty record.
    """
    if value is None:
        return None
    if isinstance(value, RoomRecord):
        return value
    if isinstance(value, Mapping):
        try:
            return RoomRecord.model_validate(dict(value))
        except ValidationError:
            return RoomRecord()
    return RoomRecord()


def _status_of(record: Optional[RoomRecord]) -> Optional[RoomStatus]:
    return record.status if record is not None else None


def compute_stats(records: Optional[RoomRecords]) -> BlockStats:
    """
    Count rooms per enumerated status.

    Unreported rooms, unrecognised statuses and keys outside the address
    space are left out of every counter.
    """
    counts = {status: 0 for status in RoomStatus}
    for key, value in (records or {}).items():
        if parse_room_key(key) is None:
            continue
        status = _status_of(as_record(value))
        if status is not None:
            counts[status] += 1
    return BlockStats(counts=counts)


def compute_danger_list(records: Optional[RoomRecords], now: Any = None) -> List[DangerEntry]:
    """Rooms flagged danger, in snapshot iteration order."""
    entries = []
    for key, value in (records or {}).items():
        position = parse_room_key(key)
        if position is None:
            continue
        record = as_record(value)
        if _status_of(record) is not RoomStatus.DANGER:
            continue
        floor, unit = position
        entries.append(DangerEntry(
            floor=floor,
            unit=unit,
            room_key=key,
            remark=record.remark,
            updated_at=record.updated_at,
            time_label=format_relative_time(record.updated_at, now)
        ))
    return entries


def is_visible(record: Any, filter_state: FilterState) -> bool:
    """
    Decide whether a room passes the board filters.

    all shows everything, reported needs a status, unreported needs none and
    a specific status must match exactly. With the remark filter on, the
    room also needs a non-blank remark. A missing record is evaluated as
    having neither status nor remark.
    """
    record = as_record(record)
    status = _status_of(record)
    status_filter = filter_state.status_filter

    if status_filter is StatusFilter.ALL:
        pass
    elif status_filter is StatusFilter.REPORTED:
        if status is None:
            return False
    elif status_filter is StatusFilter.UNREPORTED:
        if status is not None:
            return False
    elif status is not status_filter.as_room_status():
        return False

    if filter_state.has_remark_filter and not (record is not None and record.has_remark()):
        return False
    return True


def count_visible(records: Optional[RoomRecords], filter_state: FilterState) -> int:
    """Number of visible rooms over the whole address space of a block."""
    records = records or {}
    return sum(
        1
        for floor in FLOORS
        for unit in UNITS
        if is_visible(records.get(room_key(floor, unit)), filter_state)
    )


def build_grid_model(
    block: str,
    records: Optional[RoomRecords],
    filter_state: FilterState,
    now: Any = None
) -> GridModel:
    """
    Lay out all 280 cells of a block, floors ascending.

    Every cell stays in place whatever the filters say; visibility only
    dims it. While the remark filter is on, dimmed cells also drop their
    remark marker and time badge.
    """
    records = records or {}
    rows = []
    filtered_count = 0

    for floor in FLOORS:
        row = GridRow(floor=floor)
        for unit in UNITS:
            key = room_key(floor, unit)
            record = as_record(records.get(key))
            status = _status_of(record)
            visible = is_visible(record, filter_state)
            show_badges = visible or not filter_state.has_remark_filter

            time_label = ""
            if show_badges and status is not None and record.updated_at is not None:
                time_label = format_relative_time(record.updated_at, now)

            row.cells.append(GridCell(
                floor=floor,
                unit=unit,
                room_key=key,
                record=record,
                visible=visible,
                style=CELL_STYLES[status],
                icon=CELL_ICONS[status],
                show_remark_marker=show_badges and record is not None and record.has_remark(),
                time_label=time_label
            ))
            if visible:
                filtered_count += 1
        rows.append(row)

    return GridModel(block=block, rows=rows, filtered_count=filtered_count)


def build_list_model(
    records: Optional[RoomRecords],
    filter_state: FilterState,
    now: Any = None
) -> List[ListRow]:
    """
    Project visible, existing records into sorted list rows.

    Sorting by floor uses the numeric floor; sorting by updatedAt treats a
    missing timestamp as the earliest possible. The sort is stable, so
    rooms with equal keys keep snapshot order in both directions.
    """
    rows = []
    for key, value in (records or {}).items():
        position = parse_room_key(key)
        if position is None:
            continue
        record = as_record(value)
        if record is None or not is_visible(record, filter_state):
            continue
        floor, unit = position
        rows.append(ListRow(
            floor=floor,
            unit=unit,
            room_key=key,
            record=record,
            time_label=format_relative_time(record.updated_at, now)
        ))

    if filter_state.sort_by is SortBy.FLOOR:
        sort_key = lambda row: row.floor
    else:
        sort_key = lambda row: row.updated_at or datetime.min

    return sorted(rows, key=sort_key, reverse=filter_state.sort_order is SortOrder.DESC)


def build_board_view(
    block: str,
    records: Optional[RoomRecords],
    filter_state: FilterState,
    view: ViewMode = ViewMode.GRID,
    now: Any = None
) -> BoardView:
    """Compute stats, danger list and the requested projection for one block."""
    block_info = get_block(block)
    view = ViewMode(view)

    grid = None
    rows = None
    if view is ViewMode.GRID:
        grid = build_grid_model(block, records, filter_state, now)
        filtered_count = grid.filtered_count
    else:
        rows = build_list_model(records, filter_state, now)
        filtered_count = count_visible(records, filter_state)

    return BoardView(
        block=block,
        block_name=block_info.name if block_info else block,
        stats=compute_stats(records),
        danger_list=compute_danger_list(records, now),
        filtered_count=filtered_count,
        view=view,
        grid=grid,
        rows=rows
    )
