import pytest

from data_cleaner.core import preview
from data_cleaner.core.preview import paginate
from data_cleaner.models import Dataset


def _numbers(n):
    return Dataset(rows=[{"n": str(i)} for i in range(n)], columns=["n"], source="numbers.csv")


def test_default_page_size_is_one_hundred():
    page = paginate(_numbers(250))
    assert page.page_size == 100
    assert page.total_pages == 3
    assert page.rows[0] == {"n": "0"}
    assert len(page.rows) == 100

def test_last_page_is_partial():
    page = paginate(_numbers(250), page=3)
    assert [row["n"] for row in page.rows] == [str(i) for i in range(200, 250)]

@pytest.mark.parametrize("requested, expected", [(0, 1), (-4, 1), (7, 3)])
def test_page_is_clamped(requested, expected):
    assert paginate(_numbers(250), page=requested).page == expected

def test_page_size_is_capped(monkeypatch):
    monkeypatch.setattr(preview.settings, "PREVIEW_MAX_PAGE_SIZE", 20)
    page = paginate(_numbers(50), page_size=500)
    assert page.page_size == 20
    assert page.total_pages == 3

def test_empty_dataset_has_one_empty_page():
    page = paginate(Dataset(rows=[], columns=["a"], source="empty.csv"), page=5)
    assert page.model_dump(by_alias=True) == {
        "page": 1,
        "pageSize": 100,
        "totalRows": 0,
        "totalPages": 1,
        "columns": ["a"],
        "rows": [],
    }
