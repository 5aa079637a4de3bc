"""
Rebuild CSV or Anki output from an archived Markdown digest.

This path only sees the digest text, so the result is an approximation:
there are no key points and no source URLs, just section titles and a
truncated preview of each section body.
"""

import os
import re
import csv
import logging

from doc_scraper.errors import UnsupportedFormatError
from doc_scraper.exporters import ANKI_HEADER, anki_field, anki_tag

logger = logging.getLogger(__name__)

CONVERT_FORMATS = ("csv", "anki")
CSV_PREVIEW_LENGTH = 200
ANKI_PREVIEW_LENGTH = 300
MIN_ANKI_PREVIEW = 50

SECTION_SPLIT = re.compile(r"^## ", re.MULTILINE)
TRAILING_RULE = re.compile(r"\n*-{3,}\s*$")


def split_sections(markdown):
    """
    Split a digest into (title, body) pairs on second-level headings.

    Text before the first "## " heading is the digest header and is dropped.
    """
    blocks = SECTION_SPLIT.split(markdown)[1:]
    sections = []
    for block in blocks:
        title, _, body = block.partition("\n")
        body = TRAILING_RULE.sub("", body.strip()).strip()
        sections.append((title.strip(), body))
    return sections


def default_output_path(input_path, fmt):
    stem, _ = os.path.splitext(input_path)
    return f"{stem}.csv" if fmt == "csv" else f"{stem}-anki.txt"


def convert_archive(input_path, fmt, output_path=None):
    """
    Convert a Markdown digest to CSV or an Anki import file.

    Args:
        input_path (str): Path to a combined Markdown digest.
        fmt (str): 'csv' or 'anki'.
        output_path (str, optional): Destination file. Defaults to the input
            path with a '.csv' or '-anki.txt' suffix.

    Returns:
        str: The path of the written file.

    Raises:
        UnsupportedFormatError: If fmt is not 'csv' or 'anki'.
        FileNotFoundError: If input_path does not exist.
    """
    if fmt not in CONVERT_FORMATS:
        raise UnsupportedFormatError(fmt)

    with open(input_path, "r", encoding="utf-8") as f:
        sections = split_sections(f.read())
    output_path = output_path or default_output_path(input_path, fmt)

    if fmt == "csv":
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL)
            writer.writerow(["Title", "Content"])
            for title, body in sections:
                writer.writerow([title, body[:CSV_PREVIEW_LENGTH]])
        written = len(sections)
    else:
        written = 0
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(ANKI_HEADER)
            for title, body in sections:
                preview = body[:ANKI_PREVIEW_LENGTH]
                if len(preview) <= MIN_ANKI_PREVIEW:
                    continue
                f.write(f"{anki_field(f'What is {title}?')}\t{anki_field(preview)}\t{anki_tag(title)}\n")
                written += 1

    logger.info(f"🔄 Converted {len(sections)} sections from {input_path} -> {output_path} ({written} {fmt} entries)")
    return output_path
