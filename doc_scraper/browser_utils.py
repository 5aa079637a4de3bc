import time
import logging
from bs4 import BeautifulSoup
from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from doc_scraper.errors import RenderError, RendererLaunchError

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

# Resolves once no resource has finished loading for `quiet_ms` milliseconds
NETWORK_IDLE_SCRIPT = """
const quietMs = arguments[0];
const done = arguments[arguments.length - 1];
let last = performance.getEntriesByType('resource').length;
let stableSince = Date.now();
const timer = setInterval(() => {
    const count = performance.getEntriesByType('resource').length;
    if (count !== last) {
        last = count;
        stableSince = Date.now();
    } else if (Date.now() - stableSince >= quietMs) {
        clearInterval(timer);
        done(true);
    }
}, 100);
"""


class PageRenderer:
    """
    Narrow interface the crawler uses to drive a browser.

    Implementations navigate to a URL, expose the rendered document to a
    caller-supplied function and report the document title. The crawler
    only ever talks to this interface, so tests can substitute a scripted
    renderer for a real browser.
    """

    current_url = ""

    def navigate(self, url, timeout):
        """Load url and wait until it has settled. Raises RenderError on failure."""
        raise NotImplementedError

    def evaluate(self, fn, *args):
        """Call fn(soup, *args) on the parsed current document and return its result."""
        raise NotImplementedError

    def title(self):
        raise NotImplementedError

    def close(self):
        pass


def create_browser(headless=True):
    """
    Create and return a new Chrome browser instance.

    Uses webdriver_manager to automatically download and manage the appropriate
    ChromeDriver version for the installed Chrome browser.

    Args:
        headless (bool, optional): Run Chrome without a window. Defaults to True.

    Returns:
        webdriver.Chrome: A configured Chrome WebDriver instance.

    Raises:
        RendererLaunchError: If Chrome or its driver cannot be started.
    """
    options = webdriver.ChromeOptions()
    if headless:
        options.add_argument("--headless=new")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument(f"--user-agent={USER_AGENT}")
    try:
        return webdriver.Chrome(service=Service(ChromeDriverManager().install()), options=options)
    except (WebDriverException, ValueError, OSError) as e:
        raise RendererLaunchError(f"Failed to launch browser: {e}") from e


def remaining(deadline, url):
    """Seconds left before deadline; raises RenderError once it has passed."""
    left = deadline - time.monotonic()
    if left <= 0:
        raise RenderError(f"Timeout loading {url}")
    return left


class SeleniumRenderer(PageRenderer):
    """
    PageRenderer backed by a single Chrome WebDriver session.

    One driver and one window are reused for the whole crawl.
    """

    def __init__(self, driver=None, headless=True, quiet_ms=500):
        self.driver = driver or create_browser(headless)
        self.quiet_ms = quiet_ms

    @property
    def current_url(self):
        return self.driver.current_url

    def navigate(self, url, timeout):
        """
        Load a URL and wait for the document and the network to go idle.

        Args:
            url (str): The URL to load.
            timeout (float): Total time in seconds shared by the load, ready and idle waits.

        Raises:
            RenderError: If the page fails to load or does not settle in time.
        """
        deadline = time.monotonic() + timeout
        try:
            self.driver.set_page_load_timeout(timeout)
            self.driver.get(url)
            WebDriverWait(self.driver, remaining(deadline, url)).until(
                lambda d: d.execute_script("return document.readyState") == "complete"
            )
            self.driver.set_script_timeout(remaining(deadline, url))
            self.driver.execute_async_script(NETWORK_IDLE_SCRIPT, self.quiet_ms)
        except TimeoutException as te:
            raise RenderError(f"Timeout loading {url}: {te.msg}") from te
        except WebDriverException as wde:
            raise RenderError(f"Failed to load {url}: {wde.msg}") from wde

    def evaluate(self, fn, *args):
        try:
            html = self.driver.page_source
        except WebDriverException as wde:
            raise RenderError(f"Could not read page source: {wde.msg}") from wde
        return fn(BeautifulSoup(html, "html.parser"), *args)

    def title(self):
        try:
            return self.driver.title
        except WebDriverException:
            return ""

    def close(self):
        try:
            self.driver.quit()
        except WebDriverException as e:
            logger.warning(f"Error closing browser: {e}")


def settle(seconds):
    """Wait for client-side rendering to finish after navigation."""
    if seconds > 0:
        time.sleep(seconds)
