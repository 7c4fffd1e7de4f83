# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Block and room status endpoints.

Reads are public; writing a room status needs a logged-in session.
"""

from flask import current_app, jsonify, request
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import ValidationError
import logging

from ..domain.address import BLOCKS, FLOORS, ROOMS_PER_BLOCK, UNITS, is_valid_block
from ..domain.board import FilterState, build_board_view
from ..middleware.auth import get_session_user, require_session
from ..middleware.error_handler import ValidationException
from ..models.requests import BlockPath, BoardViewQuery, UpsertStatusRequest
from ..models.responses import BlockUnitsResponse, BoardViewResponse, ErrorResponse, SuccessResponse

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

blocks_tag = Tag(name="Blocks", description="Room status board per block")
blocks_bp = APIBlueprint(
    'blocks',
    __name__,
    url_prefix='/api/blocks',
    abp_tags=[blocks_tag]
)

units_bp = APIBlueprint(
    'units',
    __name__,
    url_prefix='/api/units',
    abp_tags=[blocks_tag]
)


def _block_from_path(path: BlockPath) -> str:
    block = path.block.strip().upper()
    if not is_valid_block(block):
        raise ValidationException(f"Unknown block: {path.block}")
    return block


@blocks_bp.get('')
def list_blocks():
    """Describe the fixed address space."""
    return jsonify({
        "blocks": [{"id": block.id, "name": block.name} for block in BLOCKS],
        "floors": len(FLOORS),
        "units": len(UNITS),
        "roomsPerBlock": ROOMS_PER_BLOCK
    })


@blocks_bp.get('/<block>/units', responses={200: BlockUnitsResponse, 400: ErrorResponse, 500: ErrorResponse})
def get_block_units(path: BlockPath):
    """All stored room records of a block, keyed by room key."""
    block = _block_from_path(path)
    records = current_app.status_store.fetch_block(block)
    return jsonify({"units": {key: record.to_wire() for key, record in records.items()}})


@blocks_bp.get('/<block>/view', responses={200: BoardViewResponse, 400: ErrorResponse, 500: ErrorResponse})
def get_block_view(path: BlockPath):
    """
    Derived board view of a block.

    Query parameters: statusFilter, hasRemarkFilter, sortBy, sortOrder and
    view (grid or list).
    """
    block = _block_from_path(path)

    try:
        query = BoardViewQuery.model_validate(request.args.to_dict())
    except ValidationError as e:
        raise ValidationException.from_pydantic(e, "Invalid board view parameters")

    filter_state = FilterState(
        status_filter=query.status_filter,
        has_remark_filter=query.has_remark_filter,
        sort_by=query.sort_by,
        sort_order=query.sort_order
    )

    with tracer.start_as_current_span("board.build_view") as span:
        span.set_attributes({
            "statusboard.block": block,
            "statusboard.view": query.view.value,
            "statusboard.status_filter": filter_state.status_filter.value
        })
        records = current_app.status_store.fetch_block(block)
        view = build_board_view(block, records, filter_state, query.view)
        span.set_attribute("statusboard.filtered_count", view.filtered_count)

    return jsonify(view.to_dict())


@units_bp.post('', responses={200: SuccessResponse, 400: ErrorResponse, 401: ErrorResponse, 500: ErrorResponse})
@require_session
def upsert_unit_status():
    """Report the status of one room. The whole previous record is replaced."""
    request_data = request.get_json(silent=True)
    if not isinstance(request_data, dict):
        raise ValidationException("Missing request body")

    try:
        update = UpsertStatusRequest.model_validate(request_data)
    except ValidationError as e:
        raise ValidationException.from_pydantic(e, "Invalid room status update")

    current_app.status_store.upsert(
        block=update.block,
        floor=update.floor,
        unit=update.unit,
        status=update.status,
        remark=update.remark,
        source=update.source,
        source_url=update.source_url,
        actor=get_session_user()
    )
    return jsonify(SuccessResponse().model_dump())
