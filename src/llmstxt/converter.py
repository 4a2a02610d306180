from __future__ import annotations

from markdownify import ASTERISK, ATX, MarkdownConverter

MARKDOWN_OPTIONS = dict(
    heading_style=ATX,
    bullets="-",
    strong_em_symbol=ASTERISK,
    code_language="",
)


class PageMarkdownConverter(MarkdownConverter):
    """
    Markdown flavour for llms-full.txt pages. A table is converted by running
    a fresh conversion over its own outer HTML, so tables nested anywhere in
    the page come out the same as a standalone table would.
    """

    def __init__(self, **options):
        super().__init__(**{**MARKDOWN_OPTIONS, **options})

    def convert_table(self, el, text, *args, **kwargs):
        table_md = MarkdownConverter(**MARKDOWN_OPTIONS).convert(str(el))
        return "\n" + table_md.strip("\n") + "\n"

    def convert_hr(self, el, text, *args, **kwargs):
        return "\n\n---\n\n"


def to_markdown(html: str) -> str:
    return PageMarkdownConverter().convert(html or "").strip()
