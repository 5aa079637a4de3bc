"""
Heuristic study aids derived from extracted page text.

Both functions are plain pattern matching over lines and sentences,
with no language understanding. They are deterministic functions of
their inputs so the exported decks are reproducible between runs.
"""

import re
import logging
from typing import List, Tuple

from doc_scraper.models import QAPair

logger = logging.getLogger(__name__)

MAX_KEY_POINTS = 10
MAX_QA_PAIRS = 5
MAX_KEY_POINT_LENGTH = 100
MIN_SENTENCE_LENGTH = 20
KEYWORD_SENTENCES = 5
PREVIEW_LENGTH = 30
FALLBACK_ANSWER_LENGTH = 200

HEADING_MARKER = re.compile(r"^#{1,6}\s+")
ORDERED_MARKER = re.compile(r"^\d+[.)]\s+")
BULLET_MARKER = re.compile(r"^[-*•]\s+")
LEADING_MARKER = re.compile(r"^(?:#{1,6}|\d+[.)]|[-*•])\s+")
SENTENCE_SPLIT = re.compile(r"[.!?。！？\n]+")

# Checked in order; the first keyword found in a sentence picks the question
QUESTION_KEYWORDS: List[Tuple[str, str]] = [
    ("how", '{title}: how does "{preview}..." work?'),
    ("why", '{title}: why "{preview}..."?'),
    ("what is", '{title}: what is meant by "{preview}..."?'),
    ("feature", '{title}: which feature is described by "{preview}..."?'),
    ("advantage", '{title}: what advantage does "{preview}..." describe?'),
    ("step", '{title}: which step is "{preview}..."?'),
    ("method", '{title}: which method does "{preview}..." describe?'),
]

KEYWORD_PATTERNS = [
    (re.compile(r"\b" + re.escape(keyword) + r"s?\b", re.IGNORECASE), template)
    for keyword, template in QUESTION_KEYWORDS
]


def is_key_point(line: str) -> bool:
    if HEADING_MARKER.match(line) or ORDERED_MARKER.match(line) or BULLET_MARKER.match(line):
        return True
    return (":" in line or "：" in line) and len(line) < MAX_KEY_POINT_LENGTH


def extract_key_points(content: str) -> List[str]:
    """
    Pick out headings, list items and short "label: value" lines.

    Args:
        content: Extracted page text

    Returns:
        Up to 10 key points in document order, leading markers removed
    """
    points = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or not is_key_point(line):
            continue
        point = LEADING_MARKER.sub("", line).strip()
        if not point:
            continue
        points.append(point)
        if len(points) >= MAX_KEY_POINTS:
            break
    return points


def split_sentences(content: str) -> List[str]:
    """Split on sentence terminals and newlines, keeping fragments of 20+ characters."""
    fragments = (s.strip() for s in SENTENCE_SPLIT.split(content))
    return [s for s in fragments if len(s) >= MIN_SENTENCE_LENGTH]


def generate_qa_pairs(title: str, content: str) -> List[QAPair]:
    """
    Derive question/answer pairs from page text.

    The first pair always asks "What is {title}?" and is answered by the
    first sentence (or the first 200 characters if no sentence is long
    enough). Each of the first five sentences may add one more pair when
    it contains a keyword from QUESTION_KEYWORDS.

    Args:
        title: Page title used in every question
        content: Extracted page text

    Returns:
        At most 5 QAPair objects, the title question first
    """
    sentences = split_sentences(content)
    first_answer = sentences[0] if sentences else content[:FALLBACK_ANSWER_LENGTH]
    pairs = [QAPair(question=f"What is {title}?", answer=first_answer)]

    for sentence in sentences[:KEYWORD_SENTENCES]:
        for pattern, template in KEYWORD_PATTERNS:
            if pattern.search(sentence):
                question = template.format(title=title, preview=sentence[:PREVIEW_LENGTH])
                pairs.append(QAPair(question=question, answer=sentence))
                break

    logger.debug(f"Generated {len(pairs)} Q&A candidates for '{title}'")
    return pairs[:MAX_QA_PAIRS]
