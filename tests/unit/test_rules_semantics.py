"""
Unit Tests for Semantic Rules
=============================
"""

import pytest

from tests.utils.assertions import assert_has_diagnostic
from tests.utils.data_generators import HTMLDocumentGenerator
from tests.utils.helpers import run_rule


class TestHeadingOrder:
    """Test the heading-order rule."""

    def test_skipped_level(self):
        diagnostics = run_rule("<h1>A</h1>\n<h2>B</h2>\n<h4>C</h4>", "heading-order")
        d = assert_has_diagnostic(diagnostics, "heading-order", line=3)
        assert "<h4> follows <h2>" in d.message
        assert d.hint == "Use <h3> or restructure the outline"

    def test_going_back_up_is_fine(self):
        assert run_rule("<h1>A</h1><h2>B</h2><h3>C</h3><h2>D</h2>", "heading-order") == []

    def test_aria_heading_level(self):
        html = '<h1>A</h1><div role="heading" aria-level="3">B</div>'
        assert len(run_rule(html, "heading-order")) == 1

    def test_first_heading_may_start_anywhere(self):
        assert run_rule("<h3>Card title</h3>", "heading-order") == []


class TestSingleH1:
    def test_second_h1_reported(self):
        d = assert_has_diagnostic(run_rule("<h1>A</h1>\n<h1>B</h1>", "single-h1"), "single-h1", line=2)
        assert "line 1" in d.message

    def test_single_h1(self):
        assert run_rule("<h1>A</h1><h2>B</h2>", "single-h1") == []


class TestListChildren:
    """Test the list-children rule."""

    def test_div_inside_ul(self):
        diagnostics = run_rule("<ul>\n<div>x</div>\n</ul>", "list-children")
        d = assert_has_diagnostic(diagnostics, "list-children", line=2)
        assert d.tag == "div"

    def test_orphan_li(self):
        assert_has_diagnostic(run_rule("<div><li>x</li></div>", "list-children"), "list-children", message_contains="<li> must be")

    def test_valid_lists(self):
        html = "<ul><li>a</li><template>t</template></ul><ol><li>1</li></ol><menu><li>m</li></menu>"
        assert run_rule(html, "list-children") == []


class TestLandmarkMain:
    """Test the landmark-main rule."""

    def test_page_with_main(self, clean_page):
        assert run_rule(clean_page, "landmark-main") == []

    def test_page_without_main(self):
        page = HTMLDocumentGenerator.generate_clean_page().replace("<main>", "<div>").replace("</main>", "</div>")
        assert_has_diagnostic(run_rule(page, "landmark-main"), "landmark-main", message_contains="no <main>")

    def test_two_visible_mains(self):
        page = HTMLDocumentGenerator.generate_page("<main>nested</main>")
        assert_has_diagnostic(run_rule(page, "landmark-main"), "landmark-main", message_contains="more than one")

    def test_hidden_main_ignored(self):
        page = HTMLDocumentGenerator.generate_page("<p>x</p>").replace("</main>", "</main><main hidden>later</main>")
        assert run_rule(page, "landmark-main") == []

    def test_fragment_skipped(self):
        assert run_rule("<p>x</p>", "landmark-main") == []


class TestPreferSemanticElements:
    @pytest.mark.parametrize(
        "html,suggestion",
        [
            ('<div id="site-navigation">x</div>', "<nav>"),
            ('<div class="site-header footer">x</div>', "<footer>"),
            ('<div role="banner">x</div>', "<header>"),
            ('<span class="sidebar">x</span>', "<aside>"),
        ],
    )
    def test_suggestions(self, html, suggestion):
        diagnostics = run_rule(html, "prefer-semantic-elements")
        assert len(diagnostics) == 1
        assert suggestion in diagnostics[0].message

    def test_plain_div(self):
        assert run_rule('<div class="card">x</div>', "prefer-semantic-elements") == []


class TestButtonType:
    def test_untyped_button_in_form(self):
        diagnostics = run_rule("<form><button>Send</button></form>", "button-type")
        assert_has_diagnostic(diagnostics, "button-type", message_contains="defaults to submit")

    def test_untyped_button_outside_form(self):
        assert run_rule("<button>Toggle</button>", "button-type") == []

    def test_invalid_type(self):
        assert_has_diagnostic(run_rule('<button type="link">x</button>', "button-type"), "button-type", message_contains="'link'")
