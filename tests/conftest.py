import pytest
from bs4 import BeautifulSoup

from doc_scraper.browser_utils import PageRenderer
from doc_scraper.config import CrawlConfig
from doc_scraper.errors import RenderError

BASE_URL = "https://docs.example.com"


class FakeRenderer(PageRenderer):
    """Serves canned HTML per URL; URLs in `failing` raise RenderError."""

    def __init__(self, pages, failing=()):
        self.pages = pages
        self.failing = set(failing)
        self.visited = []
        self.closed = False
        self.current_url = ""

    def navigate(self, url, timeout):
        self.visited.append(url)
        if url in self.failing or url not in self.pages:
            raise RenderError(f"Timeout loading {url}")
        self.current_url = url

    def evaluate(self, fn, *args):
        return fn(BeautifulSoup(self.pages[self.current_url], "html.parser"), *args)

    def title(self):
        soup = BeautifulSoup(self.pages[self.current_url], "html.parser")
        return soup.title.get_text() if soup.title else ""

    def close(self):
        self.closed = True


def article(text, title="Doc"):
    return f"<html><head><title>{title}</title></head><body><article>{text}</article></body></html>"


def index_page(*links):
    anchors = "".join(f'<a href="{href}">{text}</a>' for text, href in links)
    return f"<html><body><nav>{anchors}</nav></body></html>"


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = dict(
            url=BASE_URL,
            name="Example Docs",
            index_path="/index",
            content_selector="article",
            link_selector="nav a",
            wait_time=0,
            timeout=5,
            request_delay=0,
            output_dir=str(tmp_path / "out"),
        )
        values.update(overrides)
        return CrawlConfig(**values)
    return _make
