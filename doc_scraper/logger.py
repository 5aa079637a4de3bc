import logging
import os

from doc_scraper.config import LOG_LEVEL


def setup_logging(output_dir=None, verbose=False):
    """
    Set up logging configuration.

    Configures logging to output to the console and, when an output
    directory is given, to a scraper.log file inside it.

    Args:
        output_dir (str, optional): Directory for the log file.
        verbose (bool, optional): Log at DEBUG level. Defaults to False.

    Returns:
        Logger: A configured logger instance.
    """
    handlers = [logging.StreamHandler()]
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(output_dir, "scraper.log"), encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )
    return logging.getLogger("doc_scraper")


def log_crawl_summary(result, config):
    """
    Log the end-of-run report.

    Args:
        result (CrawlResult): The finished crawl.
        config (CrawlConfig): The run configuration.
    """
    logger = logging.getLogger(__name__)
    logger.info("═" * 50)
    logger.info("📊 Crawl Summary:")
    logger.info(f"  - Pages found: {result.link_count}")
    logger.info(f"  - Succeeded: {result.success_count}")
    logger.info(f"  - Failed: {result.fail_count}")
    logger.info(f"  - Page files: {config.content_dir}/")
    for artifact in result.artifacts:
        if artifact.kind != "page":
            logger.info(f"  - {artifact.kind}: {artifact.path}")
