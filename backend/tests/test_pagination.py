# Overview: Pytest coverage for row sorting and page slicing.

from salesops.services.pagination_service import paginate, sort_rows


def _rows():
    return [
        {"id": 3, "total": 50, "name": "c"},
        {"id": 1, "total": 50, "name": "a"},
        {"id": 2, "total": None, "name": "b"},
        {"id": 4, "total": 80, "name": "d"},
    ]


class TestSortRows:
    def test_descending_with_id_tie_break(self):
        ordered = sort_rows(_rows(), "total", descending=True)
        assert [row["id"] for row in ordered] == [4, 1, 3, 2]

    def test_ascending_keeps_nulls_last(self):
        ordered = sort_rows(_rows(), "total", descending=False)
        assert [row["id"] for row in ordered] == [1, 3, 4, 2]

    def test_string_keys(self):
        ordered = sort_rows(_rows(), "name", descending=False)
        assert [row["name"] for row in ordered] == ["a", "b", "c", "d"]


class TestPaginate:
    def test_last_partial_page(self):
        rows = list(range(25))

        page, info = paginate(rows, 3, 10)

        assert page == [20, 21, 22, 23, 24]
        assert info == {
            "current_page": 3,
            "total_pages": 3,
            "total_records": 25,
            "limit": 10,
            "has_next": False,
            "has_prev": True,
        }

    def test_page_past_the_end_is_empty(self):
        page, info = paginate(list(range(5)), 4, 10)

        assert page == []
        assert info["total_pages"] == 1
        assert info["has_prev"] is True

    def test_bounds_are_clamped(self):
        page, info = paginate(list(range(150)), 0, 1000)

        assert len(page) == 100
        assert info["current_page"] == 1
        assert info["limit"] == 100
        assert info["has_next"] is True

    def test_empty(self):
        page, info = paginate([], 1, 10)

        assert page == []
        assert info["total_pages"] == 0
        assert info["has_next"] is False
