import html

from bs4 import BeautifulSoup


def sanitize_text(value) -> str:
    """Plain-text form of a free-form field: trimmed, with all markup removed.

    Entities decoded by the parser are escaped again (``&``, ``<``, ``>``), so
    encoded markup in the input never comes back out as live tags.
    """
    if not isinstance(value, str):
        return ""
    trimmed = value.strip()
    if not trimmed:
        return ""
    soup = BeautifulSoup(trimmed, "html.parser")
    for node in soup(["script", "style"]):
        node.decompose()
    return html.escape(soup.get_text(), quote=False)
