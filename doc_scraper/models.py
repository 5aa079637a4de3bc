"""
Records passed between the crawl stages.

Link and page records are frozen: they are created once by the crawler
and only read afterwards by the exporters.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class LinkRecord:
    text: str
    href: str


@dataclass(frozen=True)
class QAPair:
    question: str
    answer: str


@dataclass(frozen=True)
class PageRecord:
    """
    Content extracted from one documentation page.

    Attributes:
        index (int): 1-based position of the page in the filtered link set.
            Failed links leave gaps; indices are never renumbered.
        title (str): Link text used as the page title.
        url (str): Absolute page URL.
        content (str): Extracted text of the main content region.
        key_points (tuple): Up to 10 key points derived from the content.
        qa (tuple): Up to 5 QAPair entries derived from the content.
    """
    index: int
    title: str
    url: str
    content: str
    key_points: Tuple[str, ...] = ()
    qa: Tuple[QAPair, ...] = ()

    def to_dict(self):
        data = asdict(self)
        data["key_points"] = list(self.key_points)
        data["qa"] = [asdict(pair) for pair in self.qa]
        return data


@dataclass(frozen=True)
class OutputArtifact:
    kind: str
    path: str


@dataclass
class CrawlResult:
    """Outcome of a single crawl run."""
    success_count: int = 0
    fail_count: int = 0
    link_count: int = 0
    pages: List[PageRecord] = field(default_factory=list)
    artifacts: List[OutputArtifact] = field(default_factory=list)

    def artifact(self, kind) -> Optional[OutputArtifact]:
        """Return the first artifact of the given kind, if any."""
        for artifact in self.artifacts:
            if artifact.kind == kind:
                return artifact
        return None
