import json
import os

import pytest

from doc_scraper.crawler import run_crawl, process_link, EMPTY, EXTRACTED, NAVIGATION_FAILED
from doc_scraper.errors import IndexPageError, MissingURLError
from doc_scraper.models import LinkRecord

from conftest import BASE_URL, FakeRenderer, article, index_page

LONG_TEXT = "This page explains how the feature works in enough detail to pass the gate."


def three_page_site(failing=()):
    pages = {
        f"{BASE_URL}/index": index_page(("Page One", "/p1"), ("Page Two", "/p2"), ("Page Three", "/p3")),
        f"{BASE_URL}/p1": article(f"<p>{LONG_TEXT} One.</p>"),
        f"{BASE_URL}/p2": article(f"<p>{LONG_TEXT} Two.</p>"),
        f"{BASE_URL}/p3": article(f"<p>{LONG_TEXT} Three.</p>"),
    }
    return FakeRenderer(pages, failing=failing)


def test_navigation_failure_is_isolated_and_indices_preserved(make_config):
    renderer = three_page_site(failing={f"{BASE_URL}/p2"})
    result = run_crawl(make_config(), renderer)

    assert result.success_count == 2
    assert result.fail_count == 1
    assert result.link_count == 3
    assert [page.index for page in result.pages] == [1, 3]
    assert [page.title for page in result.pages] == ["Page One", "Page Three"]
    assert renderer.visited == [f"{BASE_URL}/index", f"{BASE_URL}/p1", f"{BASE_URL}/p2", f"{BASE_URL}/p3"]


class CrashingRenderer(FakeRenderer):
    """Raises a non-renderer error, like a dropped chromedriver connection."""

    def __init__(self, pages, crash_url):
        super().__init__(pages)
        self.crash_url = crash_url

    def navigate(self, url, timeout):
        if url == self.crash_url:
            self.visited.append(url)
            raise ConnectionError("chromedriver connection refused")
        super().navigate(url, timeout)


def test_unexpected_page_error_does_not_abort_crawl(make_config):
    site = three_page_site()
    renderer = CrashingRenderer(site.pages, f"{BASE_URL}/p2")
    config = make_config(output_format="all")
    result = run_crawl(config, renderer)

    assert (result.success_count, result.fail_count) == (2, 1)
    assert [page.index for page in result.pages] == [1, 3]
    assert os.path.isfile(os.path.join(config.output_dir, "combined.md"))
    assert result.artifact("json") is not None


def test_process_link_reports_unexpected_error_as_failed(make_config):
    url = f"{BASE_URL}/p"
    renderer = CrashingRenderer({url: article(LONG_TEXT)}, url)
    outcome, record, content = process_link(renderer, 1, LinkRecord("P", url), make_config())
    assert (outcome, record, content) == (NAVIGATION_FAILED, None, "")


def test_injected_renderer_is_not_closed(make_config):
    renderer = three_page_site()
    run_crawl(make_config(), renderer)
    assert renderer.closed is False


@pytest.mark.parametrize("length, outcome", [(50, EMPTY), (51, EXTRACTED)])
def test_content_gate(make_config, length, outcome):
    url = f"{BASE_URL}/p"
    renderer = FakeRenderer({url: article("a" * length)})
    result, record, content = process_link(renderer, 1, LinkRecord("P", url), make_config())
    assert result == outcome
    assert (record is not None) == (outcome == EXTRACTED)


def test_process_link_no_selector_match_is_empty(make_config):
    url = f"{BASE_URL}/p"
    renderer = FakeRenderer({url: "<html><body><div>" + "x" * 200 + "</div></body></html>"})
    outcome, record, _ = process_link(renderer, 1, LinkRecord("P", url), make_config())
    assert outcome == EMPTY
    assert record is None


def test_process_link_navigation_failure(make_config):
    url = f"{BASE_URL}/p"
    renderer = FakeRenderer({url: article(LONG_TEXT)}, failing={url})
    outcome, record, content = process_link(renderer, 4, LinkRecord("P", url), make_config())
    assert (outcome, record, content) == (NAVIGATION_FAILED, None, "")


def test_empty_page_counts_as_failure(make_config):
    pages = {
        f"{BASE_URL}/index": index_page(("Good", "/good"), ("Empty", "/empty")),
        f"{BASE_URL}/good": article(LONG_TEXT),
        f"{BASE_URL}/empty": article("tiny"),
    }
    result = run_crawl(make_config(), FakeRenderer(pages))
    assert (result.success_count, result.fail_count) == (1, 1)
    assert [page.title for page in result.pages] == ["Good"]


def test_annotations_follow_toggles(make_config):
    content = "<h2>Setup</h2><ul><li>Install it</li></ul><p>" + LONG_TEXT + "</p>"
    pages = {
        f"{BASE_URL}/index": index_page(("Setup", "/setup")),
        f"{BASE_URL}/setup": article(content),
    }

    plain = run_crawl(make_config(), FakeRenderer(pages)).pages[0]
    assert plain.key_points == ()
    assert plain.qa == ()

    annotated = run_crawl(
        make_config(generate_qa=True, generate_summary=True, as_markdown=True), FakeRenderer(pages)
    ).pages[0]
    assert annotated.key_points[:2] == ("Setup", "Install it")
    assert annotated.qa[0].question == "What is Setup?"


def test_format_all_with_qa_writes_five_artifacts_plus_pages(make_config):
    config = make_config(output_format="all", generate_qa=True)
    result = run_crawl(config, three_page_site())

    page_files = [a for a in result.artifacts if a.kind == "page"]
    combined = [a for a in result.artifacts if a.kind != "page"]
    assert len(page_files) == 3
    assert sorted(a.kind for a in combined) == ["anki", "csv", "json", "markdown", "qa_csv"]
    assert sorted(os.listdir(config.content_dir)) == [
        "001-Page_One.md", "002-Page_Two.md", "003-Page_Three.md"
    ]
    for artifact in result.artifacts:
        assert os.path.isfile(artifact.path)


def test_default_format_writes_markdown_only(make_config):
    config = make_config()
    result = run_crawl(config, three_page_site())
    assert [a.kind for a in result.artifacts if a.kind != "page"] == ["markdown"]
    with open(os.path.join(config.output_dir, "combined.md"), encoding="utf-8") as f:
        digest = f.read()
    assert digest.index("## Page One") < digest.index("## Page Two") < digest.index("## Page Three")


def test_json_dump_matches_records(make_config):
    config = make_config(output_format="json", generate_qa=True, generate_summary=True)
    result = run_crawl(config, three_page_site())
    with open(result.artifact("json").path, encoding="utf-8") as f:
        data = json.load(f)
    assert data == [page.to_dict() for page in result.pages]
    assert data[0]["url"] == f"{BASE_URL}/p1"


def test_no_links_yields_zero_pages(make_config):
    renderer = FakeRenderer({f"{BASE_URL}/index": "<html><body><p>nothing</p></body></html>"})
    result = run_crawl(make_config(), renderer)
    assert (result.success_count, result.fail_count, result.pages) == (0, 0, [])


def test_index_page_failure_is_fatal(make_config):
    with pytest.raises(IndexPageError):
        run_crawl(make_config(), FakeRenderer({}))


def test_missing_url_is_fatal(make_config):
    with pytest.raises(MissingURLError):
        run_crawl(make_config(url=""), FakeRenderer({}))


def test_request_delay_applies_after_every_link(make_config, monkeypatch):
    sleeps = []
    monkeypatch.setattr("doc_scraper.crawler.time.sleep", sleeps.append)
    run_crawl(make_config(request_delay=0.3), three_page_site(failing={f"{BASE_URL}/p2"}))
    assert sleeps == [0.3, 0.3, 0.3]
