import time
import logging

from doc_scraper.browser_utils import SeleniumRenderer, settle
from doc_scraper.config import MIN_CONTENT_LENGTH
from doc_scraper.content_processor import collect_link_candidates, build_link_set, extract_content
from doc_scraper.errors import MissingURLError, RenderError, IndexPageError
from doc_scraper.exporters import export_all, render_page
from doc_scraper.file_utils import page_filename, save_file, format_bytes
from doc_scraper.models import CrawlResult, PageRecord, OutputArtifact
from doc_scraper.text_processing import extract_key_points, generate_qa_pairs

logger = logging.getLogger(__name__)

# Page outcomes
EXTRACTED = "extracted"
EMPTY = "empty"
NAVIGATION_FAILED = "navigation-failed"


def discover_links(renderer, config):
    """
    Load the index page and build the crawl queue from its navigation links.

    Args:
        renderer (PageRenderer): The renderer used for the whole crawl.
        config (CrawlConfig): The run configuration.

    Returns:
        list: Ordered LinkRecord objects.

    Raises:
        IndexPageError: If the index page cannot be loaded.
    """
    index_url = config.index_url
    logger.info(f"📦 Loading index page {index_url}")
    try:
        renderer.navigate(index_url, config.timeout)
    except RenderError as e:
        raise IndexPageError(f"Could not load index page {index_url}: {e}") from e
    settle(config.wait_time)

    origin = renderer.current_url or index_url
    candidates = renderer.evaluate(collect_link_candidates, config.link_selector, origin)
    links = build_link_set(candidates, config)
    logger.info(f"✅ Found {len(links)} pages to scrape ({len(candidates)} candidate links)")
    return links


def build_page_record(index, link, content, config):
    key_points = extract_key_points(content) if config.generate_summary else []
    qa = generate_qa_pairs(link.text, content) if config.generate_qa else []
    return PageRecord(
        index=index,
        title=link.text,
        url=link.href,
        content=content,
        key_points=tuple(key_points),
        qa=tuple(qa),
    )


def process_link(renderer, index, link, config):
    """
    Render, extract and annotate a single page.

    Any error while rendering the page, and short content, are reported
    through the returned outcome instead of being raised.

    Args:
        renderer (PageRenderer): The shared renderer.
        index (int): 1-based position of the link in the crawl queue.
        link (LinkRecord): The page to process.
        config (CrawlConfig): The run configuration.

    Returns:
        tuple: (outcome, PageRecord or None, content)
    """
    try:
        renderer.navigate(link.href, config.timeout)
        settle(config.wait_time)
        content = renderer.evaluate(
            extract_content, config.content_selector, config.fallback_selectors, config.as_markdown
        )
        logger.debug(f"Rendered '{renderer.title()}' from {link.href}")
    except RenderError as e:
        logger.error(f"[Navigation Error] {link.href} — {e}")
        return NAVIGATION_FAILED, None, ""
    except Exception as e:
        logger.error(f"[Page Error] {link.href} — {type(e).__name__}: {e}")
        return NAVIGATION_FAILED, None, ""

    if not content or len(content) <= MIN_CONTENT_LENGTH:
        return EMPTY, None, content or ""

    return EXTRACTED, build_page_record(index, link, content, config), content


def run_crawl(config, renderer=None):
    """
    Crawl every page listed on the index page and write the requested artifacts.

    Pages are processed strictly in link order. A page that fails to load
    or yields 50 characters or less of content is counted as a failure and
    skipped; the remaining pages keep their original positions.

    Args:
        config (CrawlConfig): The resolved run configuration.
        renderer (PageRenderer, optional): Renderer to use. A SeleniumRenderer
            is created, and closed afterwards, if none is given.

    Returns:
        CrawlResult: Counters, page records and written artifacts.

    Raises:
        MissingURLError: If config has no URL.
        RendererLaunchError: If the browser cannot be started.
        IndexPageError: If the index page cannot be loaded.
    """
    if not config.url:
        raise MissingURLError("No URL to crawl")

    owns_renderer = renderer is None
    if owns_renderer:
        logger.info("Launching browser...")
        renderer = SeleniumRenderer(headless=config.headless)

    result = CrawlResult()
    page_artifacts = []
    try:
        links = discover_links(renderer, config)
        result.link_count = len(links)

        for idx, link in enumerate(links, start=1):
            progress = f"[{idx:3d}/{len(links)}]"
            outcome, record, content = process_link(renderer, idx, link, config)

            if outcome == EXTRACTED:
                path = save_file(config.content_dir, page_filename(idx, link.text), render_page(record))
                if path:
                    page_artifacts.append(OutputArtifact(kind="page", path=path))
                result.pages.append(record)
                result.success_count += 1
                logger.info(f"✅ {progress} {link.text[:40]} ({format_bytes(len(content))})")
            elif outcome == EMPTY:
                result.fail_count += 1
                logger.warning(f"⚠️ {progress} {link.text[:40]} (empty content)")
            else:
                result.fail_count += 1
                logger.warning(f"❌ {progress} {link.text[:40]} (navigation failed)")

            # Throttle requests
            if config.request_delay > 0:
                time.sleep(config.request_delay)
    finally:
        if owns_renderer:
            renderer.close()

    result.artifacts = page_artifacts + export_all(result, config)
    return result
