"""
Document rendering tests: llms.txt index and llms-full.txt corpus.
"""
from __future__ import annotations

from llmstxt.crawler import PageResult, SkipRecord
from llmstxt.filters import SkipReason
from llmstxt.generator import group_by_section, render_full, render_index


def _page(url, title, description=None, section="docs", **kwargs):
    return PageResult(url=url, title=title, description=description, section=section, **kwargs)


class TestGroupBySection:
    def test_first_seen_order(self):
        pages = [
            _page("https://x.test/docs/a", "A"),
            _page("https://x.test/blog/b", "B", section="blog"),
            _page("https://x.test/docs/c", "C"),
        ]
        groups = group_by_section(pages)
        assert list(groups) == ["docs", "blog"]
        assert [p.title for p in groups["docs"]] == ["A", "C"]


class TestRenderIndex:
    def test_root_supplies_title_and_description(self):
        pages = [
            _page("https://x.test/docs/a", "A", "About A"),
            _page("https://x.test/", "Home", "Welcome", section="ROOT"),
            _page("https://x.test/docs/b", "B"),
            _page("https://x.test/api/c", "C", section="API"),
        ]
        assert render_index(pages) == (
            "# Home\n\n"
            "> Welcome\n\n"
            "## Docs\n\n"
            "- [A](https://x.test/docs/a): About A\n"
            "- [B](https://x.test/docs/b)\n\n"
            "## Api\n\n"
            "- [C](https://x.test/api/c)\n\n"
        )

    def test_explicit_title_and_description_win(self):
        pages = [_page("https://x.test/", "Home", "Welcome", section="ROOT")]
        out = render_index(pages, title="My Docs", description="Everything")
        assert out == "# My Docs\n\n> Everything\n\n"

    def test_defaults_without_root(self):
        out = render_index([_page("https://x.test/docs/a", "A")])
        assert out.startswith("# Documentation\n\n> Generated documentation\n\n")

    def test_root_without_description_uses_default(self):
        out = render_index([_page("https://x.test/", "Home", section="ROOT")])
        assert out == "# Home\n\n> Generated documentation\n\n"

    def test_root_never_becomes_a_section(self):
        pages = [
            _page("https://x.test/", "Home", section="ROOT"),
            _page("https://x.test/", "Home again", section="ROOT"),
        ]
        out = render_index(pages)
        assert "## " not in out
        assert "Home again" not in out

    def test_empty(self):
        assert render_index([]) == "# Documentation\n\n> Generated documentation\n\n"


class TestRenderFull:
    def test_layout(self):
        pages = [
            _page(
                "https://x.test/docs/start",
                "Getting Started",
                "First steps",
                content="## Install\n\nRun it.",
                last_modified="2024-05-01",
            ),
            _page("https://x.test/docs/faq", "FAQ", content="Answers."),
        ]
        skipped = [
            SkipRecord("https://x.test/blog/x", SkipReason.EXCLUDED),
            SkipRecord("https://x.test/docs/broken", SkipReason.FETCH_FAILED),
        ]
        assert render_full(pages, skipped) == (
            "# Full Documentation\n\n"
            "# Table of Contents\n"
            "- [Getting Started](#getting-started)\n"
            "- [FAQ](#faq)\n"
            "\n"
            "\n\n---\n\n"
            "## Getting Started\n\n"
            "[https://x.test/docs/start](https://x.test/docs/start)\n\n"
            "> First steps\n\n"
            "*Last modified: 2024-05-01*\n\n"
            "## Install\n\nRun it.\n"
            "\n\n---\n\n"
            "## FAQ\n\n"
            "[https://x.test/docs/faq](https://x.test/docs/faq)\n\n"
            "Answers.\n"
            "\n\n---\n\n## Skipped Pages\n"
            "- https://x.test/blog/x (excluded)\n"
            "- https://x.test/docs/broken (fetch_failed)\n"
        )

    def test_no_skipped_section_when_nothing_skipped(self):
        out = render_full([_page("https://x.test/docs/a", "A", content="x")], [], title="Corpus")
        assert out.startswith("# Corpus\n\n# Table of Contents\n- [A](#a)\n")
        assert "Skipped Pages" not in out

    def test_empty(self):
        assert render_full([], []) == "# Full Documentation\n\n# Table of Contents\n\n"
