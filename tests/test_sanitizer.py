from pizzeria.utils import sanitize_input


def test_sanitize_removes_script_tags():
    s = "<script>alert(1)</script>12 Main Street"
    out = sanitize_input(s)
    assert "<script" not in out.lower()
    assert "12 Main Street" in out


def test_sanitize_strips_markup_and_collapses_whitespace():
    s = "  <b>Flat 4</b>,\n  221B  Baker Street\x00 "
    assert sanitize_input(s) == "Flat 4, 221B Baker Street"


def test_sanitize_none():
    assert sanitize_input(None) == ""


def test_sanitize_keeps_special_characters_in_plain_text():
    assert sanitize_input("Flat 3 & 4, Rose Court") == "Flat 3 & 4, Rose Court"
    assert sanitize_input("Unit 1 < 2 > 0, Mill Lane") == "Unit 1 < 2 > 0, Mill Lane"
