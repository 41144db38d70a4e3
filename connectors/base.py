from selenium import webdriver
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import WebDriverWait
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.chrome.options import Options
from selenium.common.exceptions import TimeoutException, WebDriverException
from config import settings
from models.raw_task import RawTask, BoardConfig
from typing import List, Optional, Sequence
import logging
import time

logger = logging.getLogger(__name__)


class ConnectorError(Exception):
    """No session could be established with the external board"""


class BrowserSession:
    """One headless Chrome instance with bounded waits on every step"""

    def __init__(self, page_timeout: int = None, element_timeout: int = None):
        self.page_timeout = page_timeout or settings.CONNECTOR_PAGE_TIMEOUT_SECONDS
        self.element_timeout = element_timeout or settings.CONNECTOR_ELEMENT_TIMEOUT_SECONDS
        self.driver = None

    def start(self):
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--disable-extensions")
        chrome_options.add_argument("--window-size=1920,1080")

        self.driver = webdriver.Chrome(options=chrome_options)
        self.driver.set_page_load_timeout(self.page_timeout)

    def open(self, url: str):
        self.driver.get(url)

    def wait_for(self, selectors: Sequence[str], timeout: float = None):
        """First element matching any of the CSS selectors; raises TimeoutException"""
        wait = WebDriverWait(self.driver, timeout or self.element_timeout)
        return wait.until(
            EC.presence_of_element_located((By.CSS_SELECTOR, ", ".join(selectors)))
        )

    def fill(self, selectors: Sequence[str], value: str, timeout: float = None):
        element = self.wait_for(selectors, timeout)
        element.clear()
        element.send_keys(value)

    def click(self, selectors: Sequence[str], timeout: float = None):
        wait = WebDriverWait(self.driver, timeout or self.element_timeout)
        element = wait.until(
            EC.element_to_be_clickable((By.CSS_SELECTOR, ", ".join(selectors)))
        )
        element.click()

    def wait_until_url_leaves(self, fragment: str, timeout: float = None):
        wait = WebDriverWait(self.driver, timeout or self.page_timeout)
        wait.until(lambda driver: fragment not in driver.current_url)

    @property
    def page_source(self) -> str:
        return self.driver.page_source

    def close(self):
        if self.driver is not None:
            try:
                self.driver.quit()
            except WebDriverException as e:
                logger.warning(f"Error closing browser: {e}")
            self.driver = None


class SourceConnector:
    """Scrapes one family of external boards into RawTask records

    fetch() only raises ConnectorError when no session can be established.
    An unreachable board view or an empty board is logged and returns [].
    Use as a context manager so the browser is always closed.
    """

    source: str = ""

    def __init__(
        self,
        email: str,
        password: str,
        login_url: str,
        session_factory=BrowserSession,
        settle_seconds: float = None,
    ):
        self.email = email
        self.password = password
        self.login_url = login_url
        self.session_factory = session_factory
        self.settle_seconds = (
            settle_seconds if settle_seconds is not None else settings.BOARD_SETTLE_SECONDS
        )
        self._session = None
        self._session_error: Optional[str] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None

    def fetch(self, board: BoardConfig) -> List[RawTask]:
        """Scrape one board view

        Raises:
            ConnectorError: credentials missing, browser unavailable or login failed
        """
        session = self._ensure_session()
        logger.info(f"📋 Scraping {board.name}...")

        try:
            html = self.load_board(session, board)
        except WebDriverException as e:
            logger.warning(f"Board {board.name} unreachable after login: {e.__class__.__name__}: {e}")
            return []

        tasks = self.parse_rows(html, board)
        if tasks:
            logger.info(f"✅ {board.name}: Found {len(tasks)} items")
        else:
            logger.info(f"{board.name}: no rows found")
        return tasks

    def _ensure_session(self):
        # A failed login is not retried within the same run
        if self._session_error:
            raise ConnectorError(self._session_error)
        if self._session is not None:
            return self._session

        if not self.email or not self.password:
            self._session_error = f"{self.source} credentials not configured"
            raise ConnectorError(self._session_error)

        session = self.session_factory()
        try:
            session.start()
            logger.info(f"🔐 Logging into {self.source}...")
            self.login(session)
        except ConnectorError as e:
            session.close()
            self._session_error = str(e)
            raise
        except Exception as e:
            session.close()
            self._session_error = f"{self.source} session failed: {e.__class__.__name__}: {e}"
            logger.error(self._session_error)
            raise ConnectorError(self._session_error) from e

        self._session = session
        return session

    def login(self, session: BrowserSession):
        raise NotImplementedError

    def load_board(self, session: BrowserSession, board: BoardConfig) -> str:
        """Navigate to the board and return its HTML once rows appear (or the wait runs out)"""
        session.open(board.url)
        try:
            session.wait_for(self.ready_selectors)
        except TimeoutException:
            logger.info(f"{board.name}: rows did not appear within the wait budget")
        if self.settle_seconds:
            time.sleep(self.settle_seconds)
        return session.page_source

    @property
    def ready_selectors(self) -> Sequence[str]:
        return ("body",)

    def parse_rows(self, html: str, board: BoardConfig) -> List[RawTask]:
        raise NotImplementedError
