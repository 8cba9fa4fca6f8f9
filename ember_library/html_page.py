"""Inject head and body fragments into a built index.html."""

import re

_HEAD_CLOSE = re.compile(r"</head", re.IGNORECASE)
_BODY_CLOSE = re.compile(r"</body", re.IGNORECASE)


class HtmlPage:
    """Render an HTML document with extra head/body markup.

    Fragments are inserted right before the closing ``</head>`` and
    ``</body>`` tags. A fragment whose tag is absent is dropped.

    Example:
        >>> page = HtmlPage(content="<html><head></head><body></body></html>", head="<meta>")
        >>> page.render()
        '<html><head><meta></head><body></body></html>'
    """

    def __init__(self: "HtmlPage", content: str, head: str = "", body: str = "") -> None:
        self.content = content
        self.head = head or ""
        self.body = body or ""

    def render(self: "HtmlPage") -> str:
        html = self.content

        # Body first so the head insertion does not shift its index
        html = _insert_before(html, _BODY_CLOSE, self.body)
        html = _insert_before(html, _HEAD_CLOSE, self.head)

        return html


def _insert_before(html: str, tag: re.Pattern[str], fragment: str) -> str:
    if not fragment:
        return html

    match = tag.search(html)
    if match is None:
        return html

    index = match.start()
    return html[:index] + fragment + html[index:]
