import csv

import pytest

from doc_scraper.config import CrawlConfig
from doc_scraper.converter import convert_archive, split_sections
from doc_scraper.errors import UnsupportedFormatError
from doc_scraper.exporters import ANKI_HEADER, render_markdown
from doc_scraper.models import PageRecord

HEADER_ONLY = "# Docs\n\n> Source site: https://d.com\n> Pages: 0\n\n---\n\n"


def write_digest(tmp_path, text, name="combined.md"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_split_sections_ignores_header_and_trailing_rule():
    md = HEADER_ONLY + "## Alpha\n\n> Source: https://d.com/a\n\nAlpha body\n\n---\n\n## Beta\n\nBeta body\n\n---\n\n"
    assert split_sections(md) == [
        ("Alpha", "> Source: https://d.com/a\n\nAlpha body"),
        ("Beta", "Beta body"),
    ]


def test_header_only_digest_converts_to_empty_csv(tmp_path):
    out = convert_archive(write_digest(tmp_path, HEADER_ONLY), "csv")
    assert out == str(tmp_path / "combined.csv")
    with open(out, encoding="utf-8", newline="") as f:
        assert list(csv.reader(f)) == [["Title", "Content"]]


def test_header_only_digest_converts_to_empty_deck(tmp_path):
    out = convert_archive(write_digest(tmp_path, HEADER_ONLY), "anki")
    assert out == str(tmp_path / "combined-anki.txt")
    assert open(out, encoding="utf-8").read() == ANKI_HEADER


def test_csv_preview_truncated_to_200(tmp_path):
    md = HEADER_ONLY + "## Long\n\n" + "w" * 400 + "\n\n---\n\n"
    out = convert_archive(write_digest(tmp_path, md), "csv", str(tmp_path / "out.csv"))
    with open(out, encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[1] == ["Long", "w" * 200]


def test_anki_skips_short_sections(tmp_path):
    md = HEADER_ONLY + "## Short\n\nonly a few words\n\n---\n\n## Long\n\n" + "k" * 400 + "\n\n---\n\n"
    out = convert_archive(write_digest(tmp_path, md), "anki")
    cards = open(out, encoding="utf-8").read()[len(ANKI_HEADER):].splitlines()
    assert cards == [f"What is Long?\t{'k' * 300}\tLong"]


def test_converts_digest_written_by_exporter(tmp_path):
    pages = [
        PageRecord(1, "First", "https://d.com/1", "First page body. " * 10),
        PageRecord(2, "Second", "https://d.com/2", "Second page body. " * 10),
    ]
    md = render_markdown(pages, CrawlConfig(url="https://d.com", name="Docs"))
    out = convert_archive(write_digest(tmp_path, md), "csv")
    with open(out, encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert [row[0] for row in rows[1:]] == ["First", "Second"]


def test_unsupported_format(tmp_path):
    with pytest.raises(UnsupportedFormatError):
        convert_archive(write_digest(tmp_path, HEADER_ONLY), "pdf")


def test_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        convert_archive(str(tmp_path / "missing.md"), "csv")
