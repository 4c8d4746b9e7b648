"""
Unit Tests for SEO Rules
========================

Document metadata rules; all of them run on complete pages only.
"""

import pytest

from tests.utils.assertions import assert_has_diagnostic
from tests.utils.data_generators import HTMLDocumentGenerator
from tests.utils.helpers import run_rule

DESCRIPTION = "A practical guide to semantic, accessible and fast HTML pages for everyone."


def page_with_head(head: str) -> str:
    return HTMLDocumentGenerator.generate_page("<p>x</p>", head=head)


class TestTitle:
    """Test the title-required and title-length rules."""

    def test_missing_title(self):
        page = page_with_head('  <meta charset="utf-8">\n')
        d = assert_has_diagnostic(run_rule(page, "title-required"), "title-required", message_contains="no <title>")
        assert d.tag == "head"

    def test_empty_title(self):
        page = page_with_head("  <title>  </title>\n")
        assert_has_diagnostic(run_rule(page, "title-required"), "title-required", message_contains="empty")
        assert run_rule(page, "title-length") == []

    def test_duplicate_title(self):
        page = page_with_head("  <title>Home page title</title>\n  <title>Another title</title>\n")
        assert_has_diagnostic(run_rule(page, "title-required"), "title-required", line=5, message_contains="more than one")

    def test_svg_title_ignored(self):
        page = HTMLDocumentGenerator.generate_page('<svg role="img"><title>Chart</title></svg>')
        assert run_rule(page, "title-required") == []

    @pytest.mark.parametrize(
        "title,message",
        [("Home", "too short (4 < 10"), ("A" * 61, "too long (61 > 60")],
    )
    def test_length_bounds(self, title, message):
        page = page_with_head(f"  <title>{title}</title>\n")
        assert_has_diagnostic(run_rule(page, "title-length"), "title-length", message_contains=message)

    def test_length_options(self):
        page = page_with_head("  <title>Home</title>\n")
        assert run_rule(page, "title-length", options={"min_length": 3}) == []

    def test_fragment_skipped(self):
        assert run_rule("<title>x</title>", "title-required") == []


class TestMetaDescription:
    def test_missing(self):
        page = page_with_head("  <title>Description test</title>\n")
        assert_has_diagnostic(run_rule(page, "meta-description"), "meta-description", message_contains="no meta description")

    def test_too_short(self):
        page = page_with_head('  <meta name="description" content="Short">\n')
        assert_has_diagnostic(run_rule(page, "meta-description"), "meta-description", message_contains="too short (5 < 50")

    def test_duplicate(self):
        meta = f'  <meta name="description" content="{DESCRIPTION}">\n'
        page = page_with_head(meta + meta)
        diagnostics = run_rule(page, "meta-description")
        assert [d.message for d in diagnostics] == ["Duplicate meta description"]

    def test_good_description(self, clean_page):
        assert run_rule(clean_page, "meta-description") == []


class TestMetaViewport:
    @pytest.mark.parametrize(
        "content,message",
        [
            ("initial-scale=1", "width=device-width"),
            ("width=device-width, user-scalable=no", "disables zooming"),
            ("width=device-width, maximum-scale=1", "prevents zooming"),
            ("width=device-width, maximum-scale=big", "Invalid maximum-scale"),
        ],
    )
    def test_problems(self, content, message):
        page = page_with_head(f'  <meta name="viewport" content="{content}">\n')
        assert_has_diagnostic(run_rule(page, "meta-viewport"), "meta-viewport", message_contains=message)

    def test_missing(self):
        page = page_with_head("  <title>No viewport here</title>\n")
        assert_has_diagnostic(run_rule(page, "meta-viewport"), "meta-viewport", message_contains="no viewport")

    def test_zoom_allowed(self):
        page = page_with_head('  <meta name="viewport" content="width=device-width, initial-scale=1, maximum-scale=5">\n')
        assert run_rule(page, "meta-viewport") == []


class TestMetaCharset:
    def test_missing(self):
        page = page_with_head("  <title>Charset test</title>\n")
        assert_has_diagnostic(run_rule(page, "meta-charset"), "meta-charset", message_contains="no character encoding")

    def test_not_first_in_head(self):
        page = page_with_head('  <title>Charset test</title>\n  <meta charset="utf-8">\n')
        assert_has_diagnostic(run_rule(page, "meta-charset"), "meta-charset", line=5, message_contains="first element")

    def test_legacy_http_equiv(self):
        page = page_with_head('  <meta http-equiv="Content-Type" content="text/html; charset=ISO-8859-1">\n')
        assert_has_diagnostic(run_rule(page, "meta-charset"), "meta-charset", message_contains="'iso-8859-1' is not UTF-8")

    def test_duplicate(self):
        page = page_with_head('  <meta charset="utf-8">\n  <meta charset="utf-8">\n')
        assert_has_diagnostic(run_rule(page, "meta-charset"), "meta-charset", line=5, message_contains="Duplicate")


class TestCanonicalLink:
    def test_optional_by_default(self, clean_page):
        assert run_rule(clean_page, "canonical-link") == []

    def test_required_option(self, clean_page):
        diagnostics = run_rule(clean_page, "canonical-link", options={"required": True})
        assert_has_diagnostic(diagnostics, "canonical-link", message_contains="no canonical link")

    def test_relative_url(self):
        page = page_with_head('  <link rel="canonical" href="/about">\n')
        assert_has_diagnostic(run_rule(page, "canonical-link"), "canonical-link", message_contains="should be absolute")

    def test_multiple(self):
        link = '  <link rel="canonical" href="https://example.com/">\n'
        assert_has_diagnostic(run_rule(page_with_head(link + link), "canonical-link"), "canonical-link", message_contains="Multiple")


class TestCrawlableLinks:
    @pytest.mark.parametrize(
        "html,message",
        [
            ('<a href="">x</a>', "Empty href"),
            ('<a href="#">x</a>', 'href="#"'),
            ('<a href="javascript:void(0)">x</a>', "javascript:"),
            ('<a onclick="go()">x</a>', "without href"),
        ],
    )
    def test_not_crawlable(self, html, message):
        assert_has_diagnostic(run_rule(html, "crawlable-links"), "crawlable-links", message_contains=message)

    def test_fragment_links_to_sections(self):
        assert run_rule('<a href="#usage">Usage</a><a name="top"></a>', "crawlable-links") == []


class TestOpenGraph:
    def test_missing_properties(self, clean_page):
        diagnostics = run_rule(clean_page, "open-graph")
        assert len(diagnostics) == 3

    def test_custom_property_list(self):
        page = page_with_head('  <meta property="og:title" content="Guide">\n')
        assert run_rule(page, "open-graph", options={"properties": ["og:title"]}) == []
