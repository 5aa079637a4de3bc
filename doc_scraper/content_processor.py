import re
import copy
import logging
from urllib.parse import urljoin
from bs4 import Comment
from markdownify import markdownify as md_convert

from doc_scraper.config import NOISE_SELECTORS
from doc_scraper.models import LinkRecord

logger = logging.getLogger(__name__)

MAX_LINK_TEXT = 100

BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "dd", "details", "div", "dl",
    "dt", "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "ol", "p", "pre", "section", "summary",
    "table", "tr", "ul",
]


def collect_link_candidates(soup, link_selector, origin):
    """
    Collect anchor text and absolute hrefs matched by a CSS selector.

    Text is trimmed, newlines are flattened to spaces and the result is
    cut to 100 characters. Relative hrefs are resolved against origin;
    anchors without an href get an empty one and are dropped later by
    build_link_set.

    Args:
        soup (BeautifulSoup): The parsed index page.
        link_selector (str): CSS selector for the navigation anchors.
        origin (str): URL of the index page, used to resolve relative links.

    Returns:
        list: A list of dictionaries with 'text' and 'href' keys.
    """
    links = []
    for a in soup.select(link_selector):
        text = re.sub(r"\s+", " ", a.get_text()).strip()[:MAX_LINK_TEXT]
        href = a.get("href")
        links.append({"text": text, "href": urljoin(origin, href) if href else ""})
    return links


def is_excluded(href, exclude_patterns):
    for pattern in exclude_patterns:
        if pattern in href or href.endswith(pattern):
            return True
    return False


def build_link_set(candidates, config):
    """
    Turn raw link candidates into the ordered crawl queue.

    Candidates with an empty href or text are dropped, as are hrefs that
    miss the configured link filter or hit an exclusion pattern. The
    remaining links are deduplicated by href: a repeated href keeps the
    position of its first appearance but takes the text of its last one.
    The queue is finally cut to max_pages.

    Args:
        candidates (list): Dictionaries with 'text' and 'href' keys.
        config (CrawlConfig): Supplies link_filter, exclude_patterns and max_pages.

    Returns:
        list: Ordered LinkRecord objects, at most one per href.
    """
    unique = {}
    for candidate in candidates:
        href = (candidate.get("href") or "").strip()
        text = (candidate.get("text") or "").strip()
        if not href or not text:
            continue
        if config.link_filter and config.link_filter not in href:
            continue
        if is_excluded(href, config.exclude_patterns):
            continue
        # dict keeps first insertion position on reassignment
        unique[href] = LinkRecord(text=text, href=href)

    links = list(unique.values())
    if config.max_pages is not None:
        links = links[:config.max_pages]
    logger.debug(f"Link set: {len(candidates)} candidates -> {len(links)} links")
    return links


def select_content_element(soup, content_selector, fallback_selectors=()):
    """Return the first element matched by the primary selector or a fallback, else None."""
    element = soup.select_one(content_selector)
    if element is not None:
        return element
    for selector in fallback_selectors:
        element = soup.select_one(selector)
        if element is not None:
            logger.debug(f"Content matched fallback selector: {selector}")
            return element
    return None


def remove_noise(element):
    for tag in element.select(NOISE_SELECTORS):
        # nested matches are already gone with their ancestor
        if not tag.decomposed:
            tag.decompose()
    for comment in element.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return element


def html_to_text(element):
    """
    Flatten an element to plain text the way a browser lays it out.

    Whitespace inside text runs is collapsed except under <pre>, block
    elements and <br> start new lines, and runs of blank lines are
    reduced to one.
    """
    for text in element.find_all(string=True):
        if text.find_parent("pre") is None:
            collapsed = re.sub(r"\s+", " ", text)
            if collapsed != text:
                text.replace_with(collapsed)
    for br in element.find_all("br"):
        br.replace_with("\n")
    for tag in element.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")

    lines = [line.strip() for line in element.get_text().split("\n")]
    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def extract_content(soup, content_selector, fallback_selectors=(), as_markdown=False):
    """
    Extract the main content region of a rendered page.

    The primary selector is tried first, then each fallback selector in
    order. The matched subtree is copied so that removing scripts,
    styles, navigation, sidebars and tables of contents never touches the
    page itself.

    Args:
        soup (BeautifulSoup): The parsed page.
        content_selector (str): Primary CSS selector for the content region.
        fallback_selectors (sequence, optional): Selectors tried in order if
            the primary one matches nothing.
        as_markdown (bool, optional): Convert the region to Markdown with
            markdownify instead of flattening it to plain text.

    Returns:
        str: The trimmed content, or an empty string if no selector matched.
    """
    element = select_content_element(soup, content_selector, fallback_selectors)
    if element is None:
        return ""

    clone = remove_noise(copy.copy(element))
    if as_markdown:
        md = md_convert(str(clone), heading_style="ATX")
        return re.sub(r"\n{3,}", "\n\n", md).strip()
    return html_to_text(clone)
