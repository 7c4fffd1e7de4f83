# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
News feed endpoints. Reading is public, publishing and deleting is admin only.
"""

from flask import current_app, jsonify, request
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from pydantic import ValidationError
import logging

from ..middleware.auth import get_session_user, require_admin
from ..middleware.error_handler import StoreError, ValidationException
from ..models.requests import CreateNewsRequest, NewsListQuery, NewsPath
from ..models.responses import ErrorResponse, NewsCreatedResponse, SuccessResponse

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

news_tag = Tag(name="News", description="Administrator news feed")
news_bp = APIBlueprint(
    'news',
    __name__,
    url_prefix='/api/news',
    abp_tags=[news_tag]
)


@news_bp.get('', responses={400: ErrorResponse})
def list_news():
    """
    List news newest first.

    A store failure yields an empty list so the board keeps rendering.
    """
    args = request.args.to_dict()
    if "limit" not in args:
        args["limit"] = current_app.config['NEWS_DEFAULT_LIMIT']

    try:
        query = NewsListQuery.model_validate(args)
    except ValidationError as e:
        raise ValidationException.from_pydantic(e, "Invalid news list parameters")

    try:
        items = current_app.news_feed.list(query.limit)
    except StoreError:
        logger.warning("News unavailable, returning empty list")
        return jsonify([])

    return jsonify([item.to_wire() for item in items])


@news_bp.post('', responses={200: NewsCreatedResponse, 400: ErrorResponse, 401: ErrorResponse, 403: ErrorResponse})
@require_admin
def add_news():
    """Publish a news item."""
    request_data = request.get_json(silent=True)
    if not isinstance(request_data, dict):
        raise ValidationException("Missing request body")

    try:
        news_request = CreateNewsRequest.model_validate(request_data)
    except ValidationError as e:
        raise ValidationException.from_pydantic(e, "Invalid news item")

    news_id = current_app.news_feed.add(
        news_request.content,
        news_request.link,
        news_request.link_text,
        actor=get_session_user()
    )
    return jsonify(NewsCreatedResponse(id=news_id).model_dump())


@news_bp.delete('/<news_id>', responses={200: SuccessResponse, 401: ErrorResponse, 403: ErrorResponse})
@require_admin
def delete_news(path: NewsPath):
    """Delete a news item. Deleting an item that is already gone succeeds."""
    current_app.news_feed.remove(path.news_id, actor=get_session_user())
    return jsonify(SuccessResponse().model_dump())
