"""
Writers for the crawl artifacts.

Every writer takes the finished PageRecord sequence and produces one file.
None of them reads another artifact, so they can run in any order.
"""

import os
import re
import csv
import html
import json
import logging
from datetime import datetime

from doc_scraper import __version__
from doc_scraper.models import OutputArtifact

logger = logging.getLogger(__name__)

CSV_FILE = "content.csv"
ANKI_FILE = "anki-import.txt"
QA_CSV_FILE = "qa-pairs.csv"
JSON_FILE = "data.json"

CSV_HEADER = ["Index", "Title", "URL", "Content Length", "Key Points"]
QA_CSV_HEADER = ["Chapter", "Question", "Answer", "Source URL"]
ANKI_HEADER = "#separator:tab\n#html:true\n#tags column:3\n"

ANKI_BACK_KEY_POINTS = 3
ANKI_ANSWER_LENGTH = 300
ANKI_TAG_LENGTH = 30
QA_CSV_ANSWER_LENGTH = 500


def render_header(config, page_count):
    return (
        f"# {config.name or 'Documentation'}\n\n"
        f"> Source site: {config.url}\n"
        f"> Crawled at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"> Pages: {page_count}\n"
        f"> Tool: doc-scraper v{__version__}\n\n"
        f"---\n\n"
    )


def render_section(page):
    return (
        f"## {page.title}\n\n"
        f"> Source: {page.url}\n\n"
        f"{page.content}\n\n"
        f"---\n\n"
    )


def render_markdown(pages, config, page_count=None):
    """
    Build the combined Markdown digest.

    Args:
        pages (list): PageRecord objects in crawl order.
        config (CrawlConfig): Supplies the site name and URL for the header.
        page_count (int, optional): Count shown in the header. Defaults to len(pages).

    Returns:
        str: The digest text.
    """
    if page_count is None:
        page_count = len(pages)
    return render_header(config, page_count) + "".join(render_section(page) for page in pages)


def render_page(page):
    """
    Build the standalone Markdown file for a single page.

    Key points and Q&A pairs are appended when the page has any.
    """
    text = f"# {page.title}\n\n> Source: {page.url}\n\n{page.content}\n"
    if page.key_points:
        text += "\n## Key Points\n\n" + "".join(f"- {point}\n" for point in page.key_points)
    if page.qa:
        text += "\n## Q&A\n\n" + "".join(f"**Q:** {pair.question}\n\n**A:** {pair.answer}\n\n" for pair in page.qa)
    return text


def anki_field(text):
    """Escape text for Anki's HTML import and keep it on one line."""
    text = html.escape(text.replace("\t", " "), quote=False)
    return re.sub(r"\r?\n", "<br>", text)


def anki_tag(title):
    return re.sub(r"[^\w-]+", "_", title).strip("_")[:ANKI_TAG_LENGTH]


def anki_cards(page):
    """Yield (front, back, tag) tuples for one page."""
    tag = anki_tag(page.title)
    if page.key_points:
        back = "<br>".join(anki_field(point) for point in page.key_points[:ANKI_BACK_KEY_POINTS])
    else:
        back = anki_field(page.content[:ANKI_ANSWER_LENGTH])
    yield anki_field(f"What is {page.title}?"), back, tag
    for pair in page.qa:
        yield anki_field(pair.question), anki_field(pair.answer[:ANKI_ANSWER_LENGTH]), tag


def write_markdown(pages, config, path, page_count=None):
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_markdown(pages, config, page_count))
    return path


def write_csv(pages, path):
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_HEADER)
        for page in pages:
            writer.writerow([page.index, page.title, page.url, len(page.content), "; ".join(page.key_points)])
    return path


def write_qa_csv(pages, path):
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerow(QA_CSV_HEADER)
        for page in pages:
            for pair in page.qa:
                writer.writerow([page.title, pair.question, pair.answer[:QA_CSV_ANSWER_LENGTH], page.url])
    return path


def write_anki(pages, path):
    with open(path, "w", encoding="utf-8") as f:
        f.write(ANKI_HEADER)
        for page in pages:
            for front, back, tag in anki_cards(page):
                f.write(f"{front}\t{back}\t{tag}\n")
    return path


def write_json(pages, path):
    with open(path, "w", encoding="utf-8") as f:
        json.dump([page.to_dict() for page in pages], f, ensure_ascii=False, indent=2)
    return path


def selected_formats(output_format):
    if output_format == "all":
        return ("md", "csv", "anki", "json")
    return (output_format,)


def export_all(result, config):
    """
    Write every artifact requested by config.output_format.

    The Q&A CSV accompanies the CSV digest only when Q&A generation is enabled.

    Args:
        result (CrawlResult): The finished crawl; pages are read, not modified.
        config (CrawlConfig): Output directory, format selection and toggles.

    Returns:
        list: OutputArtifact objects in the order they were written.
    """
    os.makedirs(config.output_dir, exist_ok=True)
    pages = result.pages
    artifacts = []

    def emit(kind, path):
        artifacts.append(OutputArtifact(kind=kind, path=path))
        logger.info(f"📄 Wrote {kind}: {path}")

    for fmt in selected_formats(config.output_format):
        if fmt == "md":
            path = os.path.join(config.output_dir, config.combined_file)
            emit("markdown", write_markdown(pages, config, path, result.link_count))
        elif fmt == "csv":
            emit("csv", write_csv(pages, os.path.join(config.output_dir, CSV_FILE)))
            if config.generate_qa:
                emit("qa_csv", write_qa_csv(pages, os.path.join(config.output_dir, QA_CSV_FILE)))
        elif fmt == "anki":
            emit("anki", write_anki(pages, os.path.join(config.output_dir, ANKI_FILE)))
        elif fmt == "json":
            emit("json", write_json(pages, os.path.join(config.output_dir, JSON_FILE)))
        else:
            raise ValueError(f"Unknown output format: {fmt}")

    return artifacts
