"""
Business rule acceptance tests.

Drive the board through the HTTP API the way a reporter, an administrator
and an anonymous visitor would, and check the rules the board promises.
"""

import pytest
from datetime import datetime, timedelta

from statusboard.domain.board import FilterState, build_list_model
from statusboard.domain.timefmt import format_relative_time
from statusboard.models.enums import SortBy, SortOrder


class TestRoomReportingRules:
    """Room status reporting as seen on the board."""

    def test_single_danger_report(self, reporter_client):
        """One danger report shows up in stats, the danger list and the grid."""
        reporter_client.post('/api/units', json={
            "block": "A", "floor": 5, "unit": 3, "status": "danger", "remark": "stuck"
        })

        view = reporter_client.get('/api/blocks/A/view').get_json()

        assert view["stats"] == {"safe": 0, "danger": 1, "deceased": 0, "mixed": 0, "missing": 0}
        assert [(entry["floor"], entry["unit"], entry["remark"]) for entry in view["dangerList"]] == [(5, 3, "stuck")]

        cells = [cell for row in view["grid"] for cell in row["cells"]]
        assert len(cells) == 280
        styles = {cell["roomKey"]: cell["style"] for cell in cells}
        assert styles.pop("5_3") == "danger"
        assert set(styles.values()) == {"unreported"}

    def test_missing_with_remark_filter(self, reporter_client):
        """Only the missing room carrying a remark survives both filters."""
        reporter_client.post('/api/units', json={"block": "D", "floor": 2, "unit": 1, "status": "missing"})
        reporter_client.post('/api/units', json={
            "block": "D", "floor": 3, "unit": 4, "status": "missing", "remark": "seen at lobby"
        })

        view = reporter_client.get('/api/blocks/D/view?statusFilter=missing&hasRemarkFilter=true').get_json()

        assert view["filteredCount"] == 1
        visible = [cell["roomKey"] for row in view["grid"] for cell in row["cells"] if cell["visible"]]
        assert visible == ["3_4"]

        listing = reporter_client.get(
            '/api/blocks/D/view?statusFilter=missing&hasRemarkFilter=true&view=list'
        ).get_json()
        assert [row["roomKey"] for row in listing["list"]] == ["3_4"]
        assert listing["filteredCount"] == 1

    def test_second_write_replaces_first(self, reporter_client):
        """Sequential writes to one room keep only the latest report."""
        reporter_client.post('/api/units', json={
            "block": "A", "floor": 10, "unit": 2, "status": "danger",
            "remark": "smoke on the stairs", "sourceUrl": "https://example.com/a"
        })
        first = reporter_client.get('/api/blocks/A/units').get_json()["units"]["10_2"]

        reporter_client.post('/api/units', json={"block": "A", "floor": 10, "unit": 2, "status": "safe"})
        units = reporter_client.get('/api/blocks/A/units').get_json()["units"]

        assert list(units) == ["10_2"]
        assert units["10_2"]["status"] == "safe"
        assert units["10_2"].get("remark") is None
        assert units["10_2"].get("sourceUrl") is None
        assert units["10_2"]["updatedAt"] > first["updatedAt"]

    def test_reports_stay_in_their_block(self, reporter_client):
        reporter_client.post('/api/units', json={"block": "H", "floor": 35, "unit": 8, "status": "deceased"})

        assert reporter_client.get('/api/blocks/G/units').get_json() == {"units": {}}
        assert "35_8" in reporter_client.get('/api/blocks/H/units').get_json()["units"]

    def test_anonymous_visitor_can_read_but_not_write(self, test_client):
        assert test_client.get('/api/blocks/A/view').status_code == 200
        assert test_client.post('/api/units', json={
            "block": "A", "floor": 1, "unit": 1, "status": "safe"
        }).status_code == 401

    def test_floor_sort_reverses(self, reporter_client):
        """Ascending and descending floor order are mirror images."""
        for floor in (7, 30, 1, 18):
            reporter_client.post('/api/units', json={"block": "B", "floor": floor, "unit": 1, "status": "safe"})

        ascending = reporter_client.get('/api/blocks/B/view?view=list&sortBy=floor&sortOrder=asc').get_json()
        descending = reporter_client.get('/api/blocks/B/view?view=list&sortBy=floor&sortOrder=desc').get_json()

        ascending_floors = [row["floor"] for row in ascending["list"]]
        assert ascending_floors == [1, 7, 18, 30]
        assert [row["floor"] for row in descending["list"]] == list(reversed(ascending_floors))


class TestNewsRules:
    """News feed rules."""

    def test_add_list_delete(self, admin_client, test_client):
        admin_client.post('/api/news', json={"content": "Water restored"})
        news_id = admin_client.post('/api/news', json={"content": "Shelter open at the school"}).get_json()["id"]

        items = test_client.get('/api/news').get_json()
        assert items[0]["id"] == news_id
        assert items[0]["content"] == "Shelter open at the school"

        admin_client.delete(f'/api/news/{news_id}')
        assert news_id not in [item["id"] for item in test_client.get('/api/news').get_json()]

    def test_edit_moves_item_to_top_with_new_id(self, news_feed, admin):
        older = news_feed.add("First notice", actor=admin.to_session_user())
        news_feed.add("Second notice", actor=admin.to_session_user())

        new_id = news_feed.republish(older, "First notice, corrected", actor=admin.to_session_user())

        items = news_feed.list()
        assert new_id != older
        assert [item.content for item in items] == ["First notice, corrected", "Second notice"]


class TestTimeLabels:
    """Relative time boundaries."""

    @pytest.mark.parametrize("elapsed,label", [
        (timedelta(seconds=59), "just now"),
        (timedelta(minutes=1), "1 minutes ago"),
        (timedelta(minutes=59, seconds=59), "59 minutes ago"),
        (timedelta(minutes=60), "1 hours ago"),
        (timedelta(hours=23, minutes=59), "23 hours ago"),
        (timedelta(hours=24), "1 days ago"),
    ])
    def test_boundaries(self, elapsed, label):
        now = datetime(2024, 11, 26, 15, 0, 0)
        assert format_relative_time(now - elapsed, now) == label

    def test_list_rows_carry_relative_labels(self):
        now = datetime(2024, 11, 26, 15, 0, 0)
        records = {"4_4": {"status": "safe", "updatedAt": "2024-11-26T14:00:00Z"}}

        rows = build_list_model(records, FilterState(sort_by=SortBy.UPDATED_AT, sort_order=SortOrder.ASC), now)
        assert rows[0].time_label == "1 hours ago"
