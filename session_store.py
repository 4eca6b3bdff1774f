"""Reusable login session between runs.

Two modes: a persistent Chrome profile (``--user-data-dir``) that keeps
cookies implicitly, or a JSON cookie snapshot written after a fresh login
and restored before the first navigation of the next run.
"""
import os
import json
import logging

from selenium.common.exceptions import WebDriverException

from errors import SessionIOError

logger = logging.getLogger(__name__)

# Fields Network.setCookies accepts from a Network.getAllCookies entry.
_COOKIE_PARAM_KEYS = ("name", "value", "domain", "path", "secure", "httpOnly", "sameSite", "expires")


def _cookie_param(cookie: dict) -> dict:
    param = {k: cookie[k] for k in _COOKIE_PARAM_KEYS if k in cookie}
    # Selenium names it "expiry"; CDP session cookies carry expires=-1.
    if "expires" not in param and "expiry" in cookie:
        param["expires"] = cookie["expiry"]
    if cookie.get("session") or param.get("expires", 0) < 0:
        param.pop("expires", None)
    return param


class SessionStore:
    def __init__(self, state_path: str, user_data_dir: str, persistent: bool = True):
        self.state_path = state_path
        self.user_data_dir = user_data_dir
        self.persistent = persistent

    def prepare_profile_dir(self) -> str:
        """Create the persistent profile directory on first use."""
        if not os.path.isdir(self.user_data_dir):
            os.makedirs(self.user_data_dir, exist_ok=True)
            logger.info(f"Created browser data directory: {self.user_data_dir}")
        return self.user_data_dir

    def has_saved_state(self) -> bool:
        if self.persistent:
            return os.path.isdir(self.user_data_dir) and bool(os.listdir(self.user_data_dir))
        return os.path.exists(self.state_path)

    def load(self):
        """Return the saved cookie list, or None when absent or unreadable."""
        if self.persistent or not os.path.exists(self.state_path):
            return None
        try:
            with open(self.state_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            cookies = data.get("cookies") if isinstance(data, dict) else None
            if not isinstance(cookies, list):
                raise SessionIOError(f"{self.state_path} has no cookie list")
            return [c for c in cookies if isinstance(c, dict)]
        except (OSError, ValueError, SessionIOError) as e:
            logger.warning(f"Could not load saved state: {e}")
            return None

    def apply(self, driver, cookies) -> int:
        """Install snapshot cookies into a fresh browser, returns how many were set."""
        if not cookies:
            return 0
        try:
            params = [_cookie_param(c) for c in cookies if isinstance(c, dict) and c.get("name")]
            driver.execute_cdp_cmd("Network.setCookies", {"cookies": params})
        except (TypeError, ValueError, WebDriverException) as e:
            logger.warning(f"Could not restore saved cookies: {e}")
            return 0
        logger.info("Loaded saved authentication state")
        return len(params)

    def save(self, driver) -> bool:
        """Write every browser cookie to the snapshot file; never raises."""
        if self.persistent:
            logger.info("Using persistent context - session will be automatically saved")
            return True
        try:
            try:
                cookies = driver.execute_cdp_cmd("Network.getAllCookies", {}).get("cookies", [])
            except (WebDriverException, AttributeError):
                cookies = driver.get_cookies()
            directory = os.path.dirname(self.state_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp_path = self.state_path + ".tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({"cookies": cookies}, f, indent=2)
            os.replace(tmp_path, self.state_path)
            try:
                os.chmod(self.state_path, 0o600)
            except OSError:
                pass
        except (OSError, TypeError, WebDriverException) as e:
            logger.warning(f"Could not save authentication state: {e}")
            return False
        logger.info("Authentication state saved for future use")
        return True
