from __future__ import annotations

import logging
import threading
from typing import Any

from selenium import webdriver
from selenium.webdriver import ChromeOptions, FirefoxOptions

from a11y_enricher.config.schema import EnvironmentConfig
from a11y_enricher.core.page_scripts import PageScript
from a11y_enricher.utils.wait import document_ready, wait_until

logger = logging.getLogger(__name__)


class BrowserSession:
    """Creates browser instances using Selenium Manager."""

    def __init__(self, environment: EnvironmentConfig) -> None:
        self.environment = environment

    def start(self, browser_name: str | None = None):
        normalized = (browser_name or self.environment.browser).lower()
        if normalized == "chrome":
            options = ChromeOptions()
            if self.environment.headless:
                options.add_argument("--headless=new")
            options.add_argument("--window-size=1440,1200")
            driver = webdriver.Chrome(options=options)
        elif normalized == "firefox":
            options = FirefoxOptions()
            if self.environment.headless:
                options.add_argument("-headless")
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.environment.page_load_timeout_seconds)
        driver.set_script_timeout(self.environment.script_timeout_seconds)
        driver.implicitly_wait(0)
        return driver

    def open(self, driver, url: str) -> "PageContext":
        driver.get(url)
        wait_until(
            lambda: document_ready(driver),
            timeout=self.environment.page_load_timeout_seconds,
        )
        logger.info("Opened page %s", url[:80])
        return PageContext(driver)


class PageContext:
    """Executes page scripts against one live document.

    WebDriver sessions are not thread-safe, so calls are serialized.
    """

    def __init__(self, driver) -> None:
        self.driver = driver
        self._lock = threading.Lock()

    @property
    def url(self) -> str:
        with self._lock:
            return self.driver.current_url

    def page_source(self) -> str:
        with self._lock:
            return self.driver.page_source

    def run(self, script: PageScript, *args: Any) -> Any:
        with self._lock:
            if script.is_async:
                return self.driver.execute_async_script(script.source, *args)
            return self.driver.execute_script(script.source, *args)
