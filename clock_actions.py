import time
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from browser_utils import AppContext
import browser_utils
import selector_defs as selectors
from config import Settings
from errors import NavigationTimeout
from notifications import notify_user

logger = logging.getLogger(__name__)

SELECTOR_WAIT = 10
PAGE_SETTLE = 2
CLICK_SETTLE = 5

CHECK_IN = "check-in"
CHECK_OUT = "check-out"


@dataclass
class ActionResult:
    performed: bool
    action_type: Optional[str] = None
    selector: Optional[tuple] = None
    text_before: str = ""
    text_after: str = ""


def classify_action(text: str, aria_label: str = "") -> str:
    """Check-in or check-out, judged from the control's text and aria-label."""
    text = (text or "").lower()
    aria_label = (aria_label or "").lower()
    if CHECK_IN in text or CHECK_IN in aria_label:
        return CHECK_IN
    if CHECK_OUT in text or CHECK_OUT in aria_label:
        return CHECK_OUT
    if "out" in text or "out" in aria_label:
        return CHECK_OUT
    return CHECK_IN


def on_checkin_page(url: str, checkin_url: str) -> bool:
    """Same portal page as ``checkin_url``, ignoring the query and the last
    segment of the hash route (the portal rewrites both after login)."""
    if not url:
        return False
    if url == checkin_url:
        return True
    current, target = urlsplit(url), urlsplit(checkin_url)
    if (current.netloc, current.path) != (target.netloc, target.path):
        return False
    route = target.fragment.rpartition("/")[0] + "/" if "/" in target.fragment else target.fragment
    return current.fragment.startswith(route)


def go_to_checkin_page(ctx: AppContext, settings: Settings) -> bool:
    if on_checkin_page(browser_utils.current_url(ctx), settings.checkin_url):
        logger.info("Already on check-in/check-out page")
        return True
    try:
        browser_utils.navigate(ctx, settings.checkin_url)
    except NavigationTimeout as e:
        logger.warning(str(e))
        return False
    time.sleep(PAGE_SETTLE)
    return True


def perform_check_action(ctx: AppContext, settings: Settings) -> ActionResult:
    """Click the first visible check-in/check-out control.

    Never raises for a missing control: a screenshot is taken, the operator
    is notified and the result reports ``performed=False``.
    """
    logger.info("Looking for check-in/check-out button...")
    candidates = selectors.resolve(settings.action_selectors, selectors.CHECKIN_BUTTON_SELECTORS)
    if settings.action_selectors:
        logger.info(f"Using custom selectors: {', '.join(settings.action_selectors)}")
    else:
        logger.info("Using default check-in/check-out selectors")

    match = browser_utils.first_visible_match(ctx.driver, candidates, wait_seconds=SELECTOR_WAIT)
    if match is None:
        logger.error("Could not find check-in/check-out button. Taking screenshot for debugging...")
        browser_utils.capture_screenshot(ctx, "checkin-not-found")
        notify_user(
            "Check-in button not found",
            "The check-in/check-out control was not found. Please check in manually and verify your attendance.",
        )
        return ActionResult(performed=False)

    (by, value), button = match
    text = browser_utils.element_text(button)
    aria_label = browser_utils.element_attribute(button, "aria-label")
    action_type = classify_action(text, aria_label)
    logger.info(f'Found {action_type} button. Button text: "{text}", Aria-label: "{aria_label}"')

    browser_utils.scroll_into_view(ctx, button)
    time.sleep(0.5)
    if not browser_utils.safe_click(ctx, button):
        logger.error(f"Clicking the {action_type} button failed")
        browser_utils.capture_screenshot(ctx, "checkin-click-failed")
        return ActionResult(performed=False, action_type=action_type, selector=(by, value), text_before=text)
    logger.info(f"{action_type} performed using selector: {by}={value}")

    time.sleep(CLICK_SETTLE)
    text_after = browser_utils.element_text(button)
    logger.info(f'Button text after action: "{text_after}"')
    logger.info(f"{action_type} action completed successfully!")
    return ActionResult(
        performed=True,
        action_type=action_type,
        selector=(by, value),
        text_before=text,
        text_after=text_after,
    )
