"""
Configuration settings for the documentation scraper.

This module loads environment defaults, the bundled site presets and
resolves both into the immutable CrawlConfig used for a single run.
"""

import os
import json
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from doc_scraper.errors import PresetNotFoundError, MissingURLError

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()

# Configuration defaults
DEFAULT_OUTPUT_DIR = os.getenv("DOC_SCRAPER_OUTPUT_DIR", "./output")
DEFAULT_WAIT_TIME = float(os.getenv("DOC_SCRAPER_WAIT_TIME", "1.0"))
DEFAULT_TIMEOUT = float(os.getenv("DOC_SCRAPER_TIMEOUT", "30"))
DEFAULT_REQUEST_DELAY = float(os.getenv("DOC_SCRAPER_REQUEST_DELAY", "0.3"))
DEFAULT_HEADLESS = os.getenv("DOC_SCRAPER_HEADLESS", "True").lower() == "true"
LOG_LEVEL = os.getenv("DOC_SCRAPER_LOG_LEVEL", "INFO").upper()

DEFAULT_COMBINED_FILE = "combined.md"
OUTPUT_FORMATS = ("md", "csv", "anki", "json", "all")

# Pages with this much extracted text or less count as empty
MIN_CONTENT_LENGTH = 50

# Elements stripped from the content region before reading its text
NOISE_SELECTORS = "script, style, nav, .sidebar, .toc"

PRESETS_PATH = os.path.join(os.path.dirname(__file__), "presets.json")


@dataclass(frozen=True)
class CrawlConfig:
    """
    Resolved run parameters.

    Times are in seconds. max_pages of None means no limit.
    """
    url: str
    name: str = ""
    index_path: str = ""
    content_selector: str = "main"
    link_selector: str = "a"
    fallback_selectors: Tuple[str, ...] = ()
    exclude_patterns: Tuple[str, ...] = ()
    link_filter: Optional[str] = None
    wait_time: float = DEFAULT_WAIT_TIME
    timeout: float = DEFAULT_TIMEOUT
    request_delay: float = DEFAULT_REQUEST_DELAY
    max_pages: Optional[int] = None
    output_format: str = "md"
    generate_qa: bool = False
    generate_summary: bool = False
    as_markdown: bool = False
    headless: bool = DEFAULT_HEADLESS
    output_dir: str = DEFAULT_OUTPUT_DIR
    combined_file: str = DEFAULT_COMBINED_FILE

    @property
    def index_url(self):
        return self.url + self.index_path

    @property
    def content_dir(self):
        return os.path.join(self.output_dir, "content")


def load_presets(path=PRESETS_PATH):
    """
    Load the site presets.

    Args:
        path (str, optional): Path to a presets JSON file. Defaults to the
            presets.json bundled with the package.

    Returns:
        dict: Mapping of preset key to preset settings.
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def resolve_config(preset_name, presets=None, **overrides):
    """
    Build a CrawlConfig from a named preset and command line overrides.

    Overrides that are None are ignored so that unset CLI options fall
    back to the preset value.

    Args:
        preset_name (str): Key of the preset in presets.json.
        presets (dict, optional): Preset mapping. Loaded from disk if omitted.
        **overrides: CrawlConfig fields that take precedence over the preset.

    Returns:
        CrawlConfig: The resolved configuration.

    Raises:
        PresetNotFoundError: If preset_name is unknown.
        MissingURLError: If no site URL is available.
    """
    if presets is None:
        presets = load_presets()
    preset = presets.get(preset_name)
    if preset is None:
        raise PresetNotFoundError(preset_name)

    values = {
        "name": preset.get("name", preset_name),
        "url": preset.get("url", ""),
        "index_path": preset.get("indexPath", ""),
        "content_selector": preset.get("contentSelector", "main"),
        "link_selector": preset.get("linkSelector", "a"),
        "fallback_selectors": tuple(preset.get("fallbackSelectors", [])),
        "exclude_patterns": tuple(preset.get("excludePatterns", [])),
        "link_filter": preset.get("linkFilter") or None,
    }
    # Preset timings are stored in milliseconds
    if preset.get("waitTime") is not None:
        values["wait_time"] = preset["waitTime"] / 1000
    if preset.get("timeout") is not None:
        values["timeout"] = preset["timeout"] / 1000

    for key, value in overrides.items():
        if value is not None:
            values[key] = value

    # A page limit of 0 (or less) means no limit
    if values.get("max_pages") is not None and values["max_pages"] <= 0:
        values["max_pages"] = None

    if not values["url"]:
        raise MissingURLError(f"No URL configured for preset '{preset_name}'")

    if values.get("output_format", "md") not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {values['output_format']}")

    config = CrawlConfig(**values)
    logger.debug(f"Resolved configuration: {config}")
    return config
