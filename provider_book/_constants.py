"""Common literal values used across provider_book.

These constants keep filenames and header keys centralized so the loader,
the site builder, and tests can import the same values without drifting.

Examples
--------
>>> from provider_book import _constants
>>> _constants.SECTION_INDEX_NAMES
('_index.md', 'index.md')
>>> _constants.SEARCH_INDEX_FILENAME
'search-index.json'
"""

MARKDOWN_SUFFIXES = (".md", ".markdown")
SECTION_INDEX_NAMES = ("_index.md", "index.md")
PAGE_OUTPUT_FILENAME = "index.html"
SEARCH_INDEX_FILENAME = "search-index.json"
SITEMAP_FILENAME = "sitemap.xml"
NOT_FOUND_FILENAME = "404.html"
SYNTAX_CSS_PATH = "css/syntax.css"
DEFAULT_THEME = "book"
DEFAULT_MENU_SECTION = "docs"
