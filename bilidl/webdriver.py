#!/usr/bin/env python3
"""
Log in with a real browser

The user logs in by hand in a Chrome window driven by selenium, the cookies
of the finished session are handed back to the provider.
"""

import logging
import time

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service

from .cookies import Cookie
from .errors import LoginError

logger = logging.getLogger(__name__)

BILI_LOGIN_URL = "https://passport.bilibili.com/ajax/miniLogin/minilogin"
BILI_LOGIN_DONE_PREFIX = "https://passport.bilibili.com/ajax/miniLogin/redirect"


class WebDriverLogin:
    """Selenium session used for a manual login

    Args:
        settings: SettingStore
        options: dict of command line options (None for not given)
        poll_interval: seconds between two checks of the current URL
        timeout: give up after this many seconds, None to wait forever
    """

    def __init__(self, settings, options, poll_interval=10, timeout=None):
        self.settings = settings
        self.options = options
        self.poll_interval = poll_interval
        self.timeout = timeout

    def chrome_enabled(self):
        value = self.options.get("chrome")
        if value is None:
            value = self.settings.get_bool("WebDriver", "chrome")
        return True if value is None else value

    def create_driver(self):
        if not self.chrome_enabled():
            raise LoginError("No browser is enabled, use --chrome to enable Chrome.")
        options = Options()
        options.add_argument('--disable-blink-features=AutomationControlled')
        try:
            server = self.options.get("chromedriver-server")
            if server:
                logger.info("Using remote chromedriver at %s", server)
                return webdriver.Remote(command_executor=server, options=options)
            path = self.options.get("chromedriver")
            if path:
                return webdriver.Chrome(service=Service(executable_path=path), options=options)
            return webdriver.Chrome(options=options)
        except WebDriverException as e:
            raise LoginError(f"Can not start Chrome: {e.msg or e}") from e

    def wait_for(self, driver, prefix):
        start = time.time()
        while True:
            current = driver.current_url
            if current.startswith(prefix):
                return
            if self.timeout is not None and time.time() - start > self.timeout:
                raise LoginError("Timed out waiting for login.")
            time.sleep(self.poll_interval)

    def login(self, url, done_prefix):
        """Open ``url``, wait until the browser lands on ``done_prefix``

        Returns:
            list: Cookie objects of the browser session
        """
        driver = self.create_driver()
        try:
            driver.get(url)
            print("✓ Please log in inside the browser window.")
            self.wait_for(driver, done_prefix)
            cookies = [
                Cookie(
                    name=c['name'],
                    value=c.get('value', ''),
                    domain=c.get('domain'),
                    path=c.get('path'),
                )
                for c in driver.get_cookies()
            ]
        except WebDriverException as e:
            raise LoginError(f"Browser error: {e.msg or e}") from e
        finally:
            try:
                driver.quit()
            except WebDriverException as e:
                logger.warning("Can not close browser: %s", e)
        logger.info("Got %d cookies from browser", len(cookies))
        return cookies

    def login_bilibili(self):
        return self.login(BILI_LOGIN_URL, BILI_LOGIN_DONE_PREFIX)
