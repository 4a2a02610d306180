"""
llmstxt

Generate llms.txt / llms-full.txt documents from a website's sitemap.
"""

__all__ = [
    "__version__",
    "config",
    "converter",
    "crawler",
    "fetcher",
    "filters",
    "generator",
    "html_summary",
    "progress",
    "rewrite",
    "sitemap",
]

__version__ = "0.3.0"
