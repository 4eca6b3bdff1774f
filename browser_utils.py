import os
import time
import logging
from dataclasses import dataclass
from typing import Optional

from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support.ui import WebDriverWait
from selenium.common.exceptions import TimeoutException, WebDriverException

from errors import NavigationTimeout

logger = logging.getLogger(__name__)

PAGE_LOAD_TIMEOUT = 30


@dataclass
class AppContext:
    driver: Optional[WebDriver]
    screenshot_dir: str
    dump_dir: Optional[str] = None


def _timestamp() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


def _is_visible(element) -> bool:
    try:
        return bool(element.is_displayed())
    except WebDriverException:
        return False


def first_visible_match(driver, candidates, wait_seconds=0):
    """Return ``(locator, element)`` for the first present and visible candidate.

    Candidates are tried strictly in order. Absent or hidden matches are
    skipped; when nothing qualifies the result is None.
    """
    for by, value in candidates:
        if wait_seconds:
            try:
                WebDriverWait(driver, wait_seconds).until(lambda d: d.find_element(by, value))
            except WebDriverException:
                pass
        try:
            element = driver.find_element(by, value)
        except WebDriverException:
            logger.debug(f"No element for {by}={value}")
            continue
        if _is_visible(element):
            return (by, value), element
        logger.debug(f"Element for {by}={value} found but not visible, trying next...")
    return None


def safe_click(ctx: AppContext, element):
    try:
        element.click()
        return True
    except Exception:
        try:
            ctx.driver.execute_script("arguments[0].click();", element)
            return True
        except Exception:
            return False


def scroll_into_view(ctx: AppContext, element) -> None:
    try:
        ctx.driver.execute_script("arguments[0].scrollIntoView({block: 'center'});", element)
    except WebDriverException as e:
        logger.debug(f"scrollIntoView failed: {e}")


def element_text(element) -> str:
    try:
        return (element.text or "").strip()
    except WebDriverException:
        return ""


def element_attribute(element, name: str) -> str:
    try:
        return (element.get_attribute(name) or "").strip()
    except WebDriverException:
        return ""


def current_url(ctx: AppContext) -> str:
    try:
        return ctx.driver.current_url or ""
    except WebDriverException:
        return ""


def navigate(ctx: AppContext, url: str) -> None:
    """Load ``url``, turning a page-load timeout into NavigationTimeout."""
    logger.info(f"Navigating to {url}...")
    try:
        ctx.driver.get(url)
    except TimeoutException:
        raise NavigationTimeout(url, PAGE_LOAD_TIMEOUT)


def capture_screenshot(ctx: AppContext, tag: str) -> Optional[str]:
    """Save a timestamped screenshot; with a dump dir also keep HTML and URL."""
    safe_tag = "".join(c if c.isalnum() or c in ("-", "_", ".") else "_" for c in (tag or "debug"))
    base_name = f"{_timestamp()}_{safe_tag}"
    path = None
    try:
        os.makedirs(ctx.screenshot_dir, exist_ok=True)
        path = os.path.join(ctx.screenshot_dir, base_name + ".png")
        ctx.driver.save_screenshot(path)
        logger.info(f"Screenshot saved to {path}")
    except Exception as e:
        logger.error(f"Could not take screenshot: {e}")
        path = None

    if ctx.dump_dir:
        try:
            os.makedirs(ctx.dump_dir, exist_ok=True)
            base = os.path.join(ctx.dump_dir, base_name)
            with open(base + ".html", "w", encoding="utf-8") as f:
                f.write(ctx.driver.page_source)
            with open(base + ".url.txt", "w", encoding="utf-8") as f:
                f.write(current_url(ctx))
            logger.debug(f"Wrote artifacts: {base}(.html/.url.txt)")
        except Exception as e:
            logger.debug(f"Artifact dump failed: {e}")
    return path
