import pytest

from intune.domain.music.text import sanitize_text


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        ("   ", ""),
        ("  plain words  ", "plain words"),
        ("<p>Soft <em>piano</em></p><script>alert(1)</script>", "Soft piano"),
        ("&lt;script&gt;alert(1)&lt;/script&gt;", "&lt;script&gt;alert(1)&lt;/script&gt;"),
        ("Rock & Roll", "Rock &amp; Roll"),
        ("Don't \"stop\"", "Don't \"stop\""),
    ],
)
def test_sanitize_text(value, expected):
    assert sanitize_text(value) == expected


@pytest.mark.unit
def test_encoded_markup_never_becomes_tags():
    assert "<" not in sanitize_text("&lt;img src=x onerror=alert(1)&gt;")
