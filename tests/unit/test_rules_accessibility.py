"""
Unit Tests for Accessibility Rules
==================================

Text alternatives, labels, accessible names and ARIA validity.
"""

import pytest

from html_linter.core.dom import build_dom
from html_linter.core.rules.accessibility import accessible_name, is_hidden
from html_linter.models.schemas import Severity
from tests.utils.assertions import assert_has_diagnostic
from tests.utils.data_generators import HTMLDocumentGenerator
from tests.utils.helpers import run_rule


class TestImgAlt:
    """Test the img-alt rule."""

    def test_missing_alt(self):
        d = assert_has_diagnostic(run_rule('<img src="cat.jpg">', "img-alt"), "img-alt", line=1)
        assert d.severity == Severity.ERROR
        assert d.tag == "img"
        assert 'alt=""' in d.hint

    def test_decorative_empty_alt(self):
        assert run_rule('<img src="divider.png" alt="">', "img-alt") == []

    def test_aria_label_is_a_text_alternative(self):
        assert run_rule('<img src="chart.png" aria-label="Sales by month">', "img-alt") == []

    def test_filename_as_alt(self):
        assert_has_diagnostic(run_rule('<img src="x.png" alt="IMG_0042.jpg">', "img-alt"), "img-alt", message_contains="file name")

    def test_redundant_alt(self):
        assert_has_diagnostic(run_rule('<img src="x.png" alt="Image of a cat">', "img-alt"), "img-alt", message_contains="should not announce")

    def test_quality_checks_can_be_disabled(self):
        assert run_rule('<img src="x.png" alt="photo.png">', "img-alt", options={"check_quality": False}) == []

    def test_image_input_and_area(self):
        html = '<input type="image" src="go.png"><input type="text" aria-label="q"><map name="m"><area href="/a"><area></map>'
        diagnostics = run_rule(html, "img-alt")
        assert [d.tag for d in diagnostics] == ["input", "area"]


class TestHtmlLang:
    def test_missing_lang(self):
        page = HTMLDocumentGenerator.generate_page("<p>x</p>", lang="")
        assert_has_diagnostic(run_rule(page, "html-lang"), "html-lang", line=2, message_contains="no lang")

    @pytest.mark.parametrize("lang", ["en", "en-US", "pt-BR", "zh-Hant"])
    def test_valid_lang(self, lang):
        assert run_rule(HTMLDocumentGenerator.generate_page("<p>x</p>", lang=lang), "html-lang") == []

    def test_invalid_lang(self):
        page = HTMLDocumentGenerator.generate_page("<p>x</p>", lang="english_us")
        assert_has_diagnostic(run_rule(page, "html-lang"), "html-lang", message_contains="Invalid language tag")

    def test_document_without_html_element(self):
        diagnostics = run_rule("<!DOCTYPE html>\n<p>x</p>", "html-lang")
        assert_has_diagnostic(diagnostics, "html-lang", line=1, message_contains="no <html> element")


class TestFormLabel:
    """Test the form-label rule."""

    def test_label_for(self):
        assert run_rule('<label for="n">Name</label><input id="n">', "form-label") == []

    def test_wrapping_label(self):
        assert run_rule("<label>Name <input></label>", "form-label") == []

    def test_aria_labelledby(self):
        html = '<span id="lbl">Search</span><input aria-labelledby="lbl">'
        assert run_rule(html, "form-label") == []

    def test_dangling_aria_labelledby(self):
        assert len(run_rule('<input aria-labelledby="missing">', "form-label")) == 1

    def test_placeholder_is_not_a_label(self):
        d = assert_has_diagnostic(run_rule('<input placeholder="Search">', "form-label"), "form-label")
        assert "Placeholder" in d.hint

    @pytest.mark.parametrize("input_type", ["hidden", "submit", "button"])
    def test_unlabelled_types_skipped(self, input_type):
        assert run_rule(f'<input type="{input_type}">', "form-label") == []

    def test_hidden_controls_skipped(self):
        assert run_rule('<div hidden><select></select></div><textarea aria-hidden="true"></textarea>', "form-label") == []

    def test_empty_label_does_not_count(self):
        assert len(run_rule('<label for="x"></label><textarea id="x"></textarea>', "form-label")) == 1


class TestLinkName:
    def test_empty_link(self):
        assert_has_diagnostic(run_rule('<a href="/next"></a>', "link-name"), "link-name", message_contains="no accessible name")

    def test_image_link_uses_alt(self):
        assert run_rule('<a href="/"><img src="logo.png" alt="Home"></a>', "link-name") == []

    def test_generic_text(self):
        assert_has_diagnostic(run_rule('<a href="/docs">Click here</a>', "link-name"), "link-name", message_contains="not descriptive")

    def test_anchor_without_href_ignored(self):
        assert run_rule('<a name="top"></a>', "link-name") == []


class TestButtonName:
    def test_icon_button_without_name(self):
        html = '<button type="button"><svg aria-hidden="true"></svg></button>'
        assert_has_diagnostic(run_rule(html, "button-name"), "button-name", message_contains="no accessible name")

    def test_aria_label(self):
        assert run_rule('<button type="button" aria-label="Close">×</button>', "button-name") == []

    def test_role_button(self):
        assert len(run_rule('<div role="button"></div>', "button-name")) == 1

    def test_input_buttons(self):
        html = '<input type="submit"><input type="button"><input type="button" value="Go">'
        diagnostics = run_rule(html, "button-name")
        assert len(diagnostics) == 1
        assert diagnostics[0].column == 22


class TestAria:
    """Test ARIA attribute and role validity."""

    def test_unknown_attribute(self):
        assert_has_diagnostic(run_rule('<div aria-labeledby="x"></div>', "aria-attr-valid"), "aria-attr-valid", message_contains="aria-labeledby")

    def test_bad_aria_hidden_value(self):
        assert_has_diagnostic(run_rule('<div aria-hidden="yes"></div>', "aria-attr-valid"), "aria-attr-valid", message_contains="'yes'")

    def test_valid_attributes(self):
        assert run_rule('<div aria-live="polite" aria-hidden="false"></div>', "aria-attr-valid") == []

    def test_unknown_role(self):
        assert_has_diagnostic(run_rule('<div role="nav"></div>', "aria-role-valid"), "aria-role-valid", message_contains="'nav'")

    def test_fallback_roles(self):
        assert run_rule('<div role="switch checkbox"></div>', "aria-role-valid") == []

    def test_empty_role(self):
        assert_has_diagnostic(run_rule('<div role=" "></div>', "aria-role-valid"), "aria-role-valid", message_contains="Empty role")


class TestTabindexNoPositive:
    @pytest.mark.parametrize("value,count", [("0", 0), ("-1", 0), ("3", 1), ("abc", 1)])
    def test_values(self, value, count):
        assert len(run_rule(f'<div tabindex="{value}"></div>', "tabindex-no-positive")) == count


class TestIframeTitle:
    def test_missing_title(self):
        assert len(run_rule('<iframe src="/map"></iframe>', "iframe-title")) == 1

    def test_title_present(self):
        assert run_rule('<iframe src="/map" title="Office location"></iframe>', "iframe-title") == []


class TestMedia:
    def test_video_without_captions(self):
        assert_has_diagnostic(run_rule('<video src="a.mp4" controls></video>', "media-captions"), "media-captions")

    def test_video_with_captions(self):
        html = '<video src="a.mp4" controls><track kind="captions" src="a.vtt"></video>'
        assert run_rule(html, "media-captions") == []

    def test_muted_background_video(self):
        assert run_rule('<video src="bg.mp4" muted autoplay></video>', "media-captions") == []

    def test_unmuted_autoplay(self):
        assert_has_diagnostic(run_rule('<audio src="a.mp3" autoplay></audio>', "media-autoplay"), "media-autoplay", message_contains="without user consent")

    def test_muted_autoplay_without_controls(self):
        assert_has_diagnostic(run_rule('<video src="a.mp4" autoplay muted></video>', "media-autoplay"), "media-autoplay", message_contains="no controls")

    def test_muted_autoplay_with_controls(self):
        assert run_rule('<video src="a.mp4" autoplay muted controls></video>', "media-autoplay") == []


class TestNoNestedInteractive:
    def test_button_inside_link(self):
        html = '<a href="/buy">\n<button type="button">Buy</button>\n</a>'
        d = assert_has_diagnostic(run_rule(html, "no-nested-interactive"), "no-nested-interactive", line=2)
        assert "(line 1)" in d.message

    def test_placeholder_link_without_href(self):
        assert run_rule('<a><button type="button">x</button></a>', "no-nested-interactive") == []

    def test_hidden_input_inside_button(self):
        assert run_rule('<button type="submit"><input type="hidden" name="a"></button>', "no-nested-interactive") == []


class TestTableHeaders:
    def test_data_table_without_headers(self):
        assert len(run_rule("<table><tr><td>1</td></tr></table>", "table-headers")) == 1

    def test_layout_table(self):
        assert run_rule('<table role="presentation"><tr><td>1</td></tr></table>', "table-headers") == []

    def test_table_with_headers(self):
        assert run_rule('<table><tr><th scope="col">A</th></tr><tr><td>1</td></tr></table>', "table-headers") == []


class TestNameComputation:
    """Test the accessible name helpers."""

    def test_labelledby_takes_precedence(self):
        document = build_dom('<h2 id="t">Settings</h2><section aria-labelledby="t" aria-label="ignored">x</section>')
        assert accessible_name(document.find("section"), document) == "Settings"

    def test_content_skips_aria_hidden_children(self):
        document = build_dom('<a href="/">Home <span aria-hidden="true">→</span></a>')
        assert accessible_name(document.find("a"), document) == "Home"

    def test_title_is_last_resort(self):
        document = build_dom('<a href="/" title="Start page"></a>')
        assert accessible_name(document.find("a"), document) == "Start page"

    def test_hidden_ancestor(self):
        document = build_dom('<div aria-hidden="true"><p><span>x</span></p></div>')
        assert is_hidden(document.find("span"))
        assert not is_hidden(build_dom("<span>x</span>").find("span"))
