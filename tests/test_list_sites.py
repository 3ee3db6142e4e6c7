"""
Listing endpoint: filter precedence, pagination and total counting.
"""

from unittest.mock import AsyncMock, patch

import pytest

from sites import repository


ROWS = [
    {"id": 1, "name": "Example", "url": "https://example.com", "catelog_id": 3, "sort_order": 0, "catelog": "Tools"},
    {"id": 2, "name": "Docs", "url": "https://docs.python.org", "catelog_id": 3, "sort_order": 5, "catelog": "Tools"},
]


@pytest.fixture
def store():
    with patch("sites.repository.list_sites", new=AsyncMock(return_value=ROWS)) as list_mock, patch(
        "sites.repository.count_sites", new=AsyncMock(return_value=42)
    ) as count_mock:
        yield list_mock, count_mock


class TestBuildListQuery:
    def test_no_filter(self):
        q = repository.build_list_query(limit=10, offset=20)
        assert "WHERE" not in q.select_sql
        assert "ORDER BY s.sort_order ASC, s.create_time DESC" in q.select_sql
        assert "LIMIT $1 OFFSET $2" in q.select_sql
        assert q.select_args == (10, 20)
        assert q.count_sql.strip() == "SELECT COUNT(*) AS total FROM sites"
        assert q.count_args == ()

    def test_catalog_id_filter(self):
        q = repository.build_list_query(limit=10, offset=0, catalog_id=7)
        assert "WHERE s.catelog_id = $1" in q.select_sql
        assert "LIMIT $2 OFFSET $3" in q.select_sql
        assert q.select_args == (7, 10, 0)
        assert q.count_args == (7,)

    def test_catalog_id_wins_over_catalog_name(self):
        q = repository.build_list_query(limit=10, offset=0, catalog_id=7, catalog="Tools")
        assert "c.catelog = $1" not in q.select_sql
        assert q.select_args == (7, 10, 0)

    def test_catalog_name_filter(self):
        q = repository.build_list_query(limit=5, offset=5, catalog="Tools")
        assert "WHERE c.catelog = $1" in q.select_sql
        assert "INNER JOIN category" in q.count_sql
        assert q.select_args == ("Tools", 5, 5)
        assert q.count_args == ("Tools",)

    def test_keyword_overrides_catalog_filters(self):
        q = repository.build_list_query(limit=10, offset=0, keyword="py", catalog_id=7, catalog="Tools")
        assert "s.name LIKE $1 OR s.url LIKE $2 OR c.catelog LIKE $3" in q.select_sql
        assert "catelog_id = $" not in q.select_sql
        assert "LIMIT $4 OFFSET $5" in q.select_sql
        assert q.select_args == ("%py%", "%py%", "%py%", 10, 0)
        assert q.count_args == ("%py%", "%py%", "%py%")
        assert "catelog_id = $" not in q.count_sql


class TestListEndpoint:
    def test_defaults(self, client, store):
        list_mock, count_mock = store
        response = client.get("/api/config")

        assert response.status_code == 200
        body = response.json()
        assert body == {"code": 200, "data": ROWS, "total": 42, "page": 1, "pageSize": 10}
        query = list_mock.await_args.args[0]
        assert query.select_args == (10, 0)
        count_mock.assert_awaited_once()

    def test_total_is_independent_of_paging(self, client, store):
        first = client.get("/api/config", params={"page": 1, "pageSize": 2}).json()
        later = client.get("/api/config", params={"page": 9, "pageSize": 50}).json()
        assert first["total"] == later["total"] == 42

    def test_offset_from_page(self, client, store):
        list_mock, _ = store
        body = client.get("/api/config", params={"page": 3, "pageSize": 20}).json()
        assert body["page"] == 3
        assert body["pageSize"] == 20
        assert list_mock.await_args.args[0].select_args == (20, 40)

    def test_non_numeric_paging_falls_back_to_defaults(self, client, store):
        body = client.get("/api/config", params={"page": "abc", "pageSize": ""}).json()
        assert body["page"] == 1
        assert body["pageSize"] == 10

    def test_unbounded_page_size_skips_count(self, client, store):
        _, count_mock = store
        body = client.get("/api/config", params={"page": 2, "pageSize": 1000}).json()
        count_mock.assert_not_awaited()
        # Approximation: offset + rows on this page.
        assert body["total"] == 1000 + len(ROWS)

    def test_count_missing_row_is_zero(self, client):
        with patch("sites.repository.list_sites", new=AsyncMock(return_value=[])), patch(
            "core.db.fetch_one", new=AsyncMock(return_value=None)
        ):
            body = client.get("/api/config").json()
        assert body["total"] == 0

    def test_keyword_ignores_catalog_id(self, client, store):
        list_mock, _ = store
        client.get("/api/config", params={"keyword": "doc", "catalogId": "3"})
        query = list_mock.await_args.args[0]
        assert query.select_args[:3] == ("%doc%", "%doc%", "%doc%")
        assert 3 not in query.select_args

    def test_catalog_id_is_passed_as_int(self, client, store):
        list_mock, _ = store
        client.get("/api/config", params={"catalogId": "3", "catalog": "Other"})
        assert list_mock.await_args.args[0].select_args == (3, 10, 0)

    def test_non_integer_catalog_id_is_rejected(self, client, store):
        response = client.get("/api/config", params={"catalogId": "abc"})
        assert response.status_code == 400
        assert response.json()["code"] == 400

    def test_store_error_is_500(self, client):
        with patch("sites.repository.list_sites", new=AsyncMock(side_effect=RuntimeError("connection refused"))):
            response = client.get("/api/config")
        assert response.status_code == 500
        assert response.json() == {
            "code": 500,
            "message": "Failed to fetch config data: connection refused",
        }

    def test_listing_works_when_index_creation_fails(self, client, store, index_batch):
        index_batch.side_effect = OSError("db down")
        response = client.get("/api/config")
        assert response.status_code == 200

    def test_out_of_range_catalog_id_is_rejected(self, client, store):
        list_mock, _ = store
        response = client.get("/api/config", params={"catalogId": "99999999999999999999"})
        assert response.status_code == 400
        assert response.json()["message"] == "catalogId is out of range."
        list_mock.assert_not_awaited()

    def test_huge_paging_stays_within_bigint(self, client, store):
        list_mock, count_mock = store
        body = client.get(
            "/api/config",
            params={"page": "99999999999999999999", "pageSize": "99999999999999999999"},
        ).json()

        limit, offset = list_mock.await_args.args[0].select_args
        assert limit == 2**63 - 1
        assert 0 <= offset <= 2**63 - 1
        assert body["pageSize"] == limit
        count_mock.assert_not_awaited()

    def test_huge_page_is_capped(self, client, store):
        list_mock, _ = store
        body = client.get("/api/config", params={"page": "99999999999999999999", "pageSize": "10"}).json()

        limit, offset = list_mock.await_args.args[0].select_args
        assert limit == 10
        assert offset <= 2**63 - 1
        assert body["page"] == (2**63 - 1) // 10 + 1
