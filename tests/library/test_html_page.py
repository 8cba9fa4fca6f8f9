"""
Unit tests for index.html fragment injection.
"""

import pytest

from ember_library.html_page import HtmlPage

DOCUMENT = "<html><head><title>app</title></head><body><div></div></body></html>"


@pytest.mark.unit
class TestHtmlPage:
    """Test HtmlPage rendering."""

    def test_render_without_fragments_is_unchanged(self) -> None:
        assert HtmlPage(content=DOCUMENT).render() == DOCUMENT

    def test_render_inserts_head_and_body(self) -> None:
        html = HtmlPage(content=DOCUMENT, head="<meta charset=utf-8>", body="<script></script>").render()

        assert html == (
            "<html><head><title>app</title><meta charset=utf-8></head>"
            "<body><div></div><script></script></body></html>"
        )

    def test_closing_tags_are_case_insensitive(self) -> None:
        html = HtmlPage(content="<HTML><HEAD></HEAD><BODY></BODY></HTML>", head="<h>", body="<b>").render()

        assert html == "<HTML><HEAD><h></HEAD><BODY><b></BODY></HTML>"

    def test_missing_tags_drop_fragments(self) -> None:
        html = HtmlPage(content="<div>partial</div>", head="<meta>", body="<script>").render()

        assert html == "<div>partial</div>"

    def test_none_fragments(self) -> None:
        assert HtmlPage(content=DOCUMENT, head=None, body=None).render() == DOCUMENT  # type: ignore[arg-type]
