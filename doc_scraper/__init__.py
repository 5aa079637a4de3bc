"""
Documentation scraper package.

Crawls a documentation site from its index page, extracts the main
content region of every linked page and turns the result into study
material: a combined Markdown digest, a CSV digest, an Anki flashcard
deck, a Q&A CSV and a JSON dump.

Pages are rendered one at a time through a single browser instance;
the crawl is strictly sequential.
"""

__version__ = "1.0.0"
