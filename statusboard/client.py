# SPDX-License-Identifier: Apache-2.0

"""
HTTP client for the status board API.

Mirrors what the board frontend does: it keeps the session cookie in a
requests.Session, caches the selected block in a BlockViewState and patches
that cache optimistically after a successful write.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from .domain.view_state import BlockViewState
from .models.entities import NewsItem, RoomRecord, SessionUser
from .models.enums import InfoSource, RoomStatus

logger = logging.getLogger(__name__)


class BoardClientError(Exception):
    """Request failed, either on the network or with an error response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BoardClient:
    """Session-carrying client for the board API."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: float = 10.0, view_state: Optional[BlockViewState] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.view_state = view_state or BlockViewState()
        self.user: Optional[SessionUser] = None

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise BoardClientError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            raise BoardClientError(self._error_message(response), response.status_code)
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return body.get("error") or body.get("detail") or f"HTTP {response.status_code}"
        return f"HTTP {response.status_code}"

    # Session

    def check_session(self) -> Optional[SessionUser]:
        """Current identity, or None when logged out or unreachable."""
        try:
            body = self._request("GET", "/api/auth/session").json()
        except (BoardClientError, ValueError):
            return None

        if not body.get("authenticated") or not body.get("user"):
            self.user = None
            return None
        try:
            self.user = SessionUser.model_validate(body["user"])
        except ValidationError:
            self.user = None
        return self.user

    def login(self, email: str, password: str) -> SessionUser:
        body = self._request("POST", "/api/auth/login", json={"email": email, "password": password}).json()
        self.user = SessionUser.model_validate(body["user"])
        return self.user

    def logout(self) -> None:
        self._request("POST", "/api/auth/logout")
        self.user = None

    # Blocks

    def get_block(self, block: str) -> Dict[str, RoomRecord]:
        body = self._request("GET", f"/api/blocks/{block}/units").json()
        units = body.get("units") or {}
        return {key: RoomRecord.model_validate(value or {}) for key, value in units.items()}

    def load_block(self, block: str) -> bool:
        """
        Select a block and fetch it into the view state.

        Returns:
            False if a newer selection superseded this fetch
        """
        ticket = self.view_state.select_block(block)
        try:
            records = self.get_block(block)
        except BoardClientError:
            self.view_state.fail_fetch(ticket)
            raise
        return self.view_state.apply_fetch(ticket, records)

    def update_status(
        self,
        block: str,
        floor: int,
        unit: int,
        status: Optional[RoomStatus],
        remark: Optional[str] = None,
        source: InfoSource = InfoSource.CITIZEN,
        source_url: Optional[str] = None
    ) -> None:
        """Report a room status, then patch the cached block."""
        payload: Dict[str, Any] = {
            "block": block,
            "floor": floor,
            "unit": unit,
            "status": status.value if status else None,
            "remark": remark,
            "source": source.value if source else None,
            "sourceUrl": source_url
        }
        self._request("POST", "/api/units", json=payload)
        self.view_state.apply_local_patch(
            block, floor, unit, status, remark, source, source_url,
            actor_uid=self.user.uid if self.user else None
        )

    # News

    def get_news(self, limit: int = 20) -> List[NewsItem]:
        """Newest news first; any failure reads as an empty feed."""
        try:
            body = self._request("GET", "/api/news", params={"limit": limit}).json()
        except (BoardClientError, ValueError):
            return []
        if not isinstance(body, list):
            return []

        items = []
        for entry in body:
            try:
                items.append(NewsItem.model_validate(entry))
            except ValidationError:
                logger.debug("Skipping malformed news entry")
        return items

    def add_news(self, content: str, link: Optional[str] = None, link_text: Optional[str] = None) -> str:
        body = self._request("POST", "/api/news", json={
            "content": content,
            "link": link,
            "linkText": link_text
        }).json()
        return body["id"]

    def delete_news(self, news_id: str) -> None:
        self._request("DELETE", f"/api/news/{news_id}")

    def edit_news(self, news_id: str, content: str, link: Optional[str] = None,
                  link_text: Optional[str] = None) -> str:
        """Replace a news item. The edited item gets a new id and moves to the top."""
        if not content or not content.strip():
            raise BoardClientError("News content cannot be empty")
        self.delete_news(news_id)
        return self.add_news(content, link, link_text)
