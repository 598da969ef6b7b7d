from clinicsupply.utils import paginate, sanitize_input


def test_sanitize_removes_markup():
    out = sanitize_input("<script>alert(1)</script>gauze")
    assert "<script" not in out.lower()
    assert "gauze" in out.lower()


def test_sanitize_strips_sql_meta():
    s = "gloves; DROP TABLE products; --"
    out = sanitize_input(s)
    # separators removed, core words may remain but punctuation should be gone
    assert ";" not in out
    assert "--" not in out
    assert "drop" in out.lower()


def test_sanitize_none_and_null_bytes():
    assert sanitize_input(None) == ""
    assert sanitize_input("  swabs\x00 ") == "swabs"


def test_paginate_slices_pages():
    items = list(range(25))
    assert paginate(items, 1, 10) == list(range(10))
    assert paginate(items, 3, 10) == [20, 21, 22, 23, 24]
    assert paginate(items, 4, 10) == []
