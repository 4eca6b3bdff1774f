import time
import enum
import logging

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.keys import Keys

from browser_utils import AppContext
import browser_utils
import selector_defs as selectors
from config import Settings
from errors import LoginFailure, SelectorNotFound

logger = logging.getLogger(__name__)

OAUTH_BUTTON_WAIT = 1
OAUTH_REDIRECT_WAIT = 10
MANUAL_CLICK_GRACE = 60
MANUAL_LOGIN_GRACE = 120
POST_LOGIN_SETTLE = 5
FIELD_SETTLE = 2


class LoginState(enum.Enum):
    UNKNOWN = "unknown"
    ALREADY_AUTHENTICATED = "already_authenticated"
    NEEDS_LOGIN = "needs_login"
    LOGIN_IN_PROGRESS = "login_in_progress"
    AUTHENTICATED = "authenticated"
    LOGIN_FAILED = "login_failed"


def is_login_page(url: str, markers) -> bool:
    url = url or ""
    return any(marker in url for marker in markers)


def _fill(element, value: str, purpose: str, locators) -> None:
    try:
        element.clear()
    except WebDriverException:
        pass
    try:
        element.send_keys(value)
    except WebDriverException as e:
        logger.debug(f"Typing into {purpose} failed: {e}")
        raise SelectorNotFound(purpose, locators) from e


class LoginResolver:
    """Gets the browser past the portal's sign-in page.

    ``resolve()`` walks UNKNOWN -> ALREADY_AUTHENTICATED, or
    NEEDS_LOGIN -> LOGIN_IN_PROGRESS -> AUTHENTICATED, raising LoginFailure
    when the sign-in page is still showing at the end.
    """

    def __init__(self, ctx: AppContext, settings: Settings, session_store=None):
        self.ctx = ctx
        self.settings = settings
        self.session_store = session_store
        self.state = LoginState.UNKNOWN

    def _on_login_page(self) -> bool:
        return is_login_page(browser_utils.current_url(self.ctx), self.settings.login_markers)

    def resolve(self) -> LoginState:
        url = browser_utils.current_url(self.ctx)
        logger.info(f"Current URL: {url}")
        if not is_login_page(url, self.settings.login_markers):
            self.state = LoginState.ALREADY_AUTHENTICATED
            logger.info("Already logged in using saved session")
            return self.state

        self.state = LoginState.NEEDS_LOGIN
        if self.settings.use_google_login:
            logger.info("Attempting Google OAuth login...")
            self.google_login()
        else:
            logger.info("Attempting password login...")
            try:
                self.password_login()
            except SelectorNotFound as e:
                logger.error(str(e))
                browser_utils.capture_screenshot(self.ctx, "login-field-not-found")

        logger.info("Waiting for login to complete...")
        time.sleep(POST_LOGIN_SETTLE)
        self._verify()
        return self.state

    def _verify(self) -> None:
        logger.info(f"URL after login attempt: {browser_utils.current_url(self.ctx)}")
        if not self._on_login_page():
            self._authenticated()
            return

        self.state = LoginState.LOGIN_FAILED
        logger.error("Still on login page. Login may have failed.")
        browser_utils.capture_screenshot(self.ctx, "login-failed")
        if not (self.settings.use_google_login and not self.settings.headless):
            raise LoginFailure("Login failed or requires additional authentication")

        logger.info(f"Please complete the Google login manually. Waiting {MANUAL_LOGIN_GRACE} seconds...")
        time.sleep(MANUAL_LOGIN_GRACE)
        if self._on_login_page():
            browser_utils.capture_screenshot(self.ctx, "login-failed")
            raise LoginFailure("Login was not completed within the manual grace window")
        self._authenticated()

    def _authenticated(self) -> None:
        self.state = LoginState.AUTHENTICATED
        logger.info("Login completed")
        if self.session_store is not None:
            self.session_store.save(self.ctx.driver)

    def google_login(self) -> None:
        logger.info("Looking for Google login button...")
        candidates = selectors.resolve(self.settings.oauth_selectors, selectors.GOOGLE_LOGIN_SELECTORS)
        if self.settings.oauth_selectors:
            logger.info(f"Using custom Google login selectors: {', '.join(self.settings.oauth_selectors)}")
        # Federated buttons render late on the Zoho sign-in page.
        match = browser_utils.first_visible_match(self.ctx.driver, candidates, wait_seconds=OAUTH_BUTTON_WAIT)

        if match is None:
            logger.error("Could not find Google login button. Taking screenshot for debugging...")
            browser_utils.capture_screenshot(self.ctx, "google-button-not-found")
            if self.settings.headless:
                raise LoginFailure(
                    "Google login button not found. Check the login page structure or set GOOGLE_LOGIN_SELECTORS"
                )
            logger.info(f"Running in headed mode - please click the Google login button manually. Waiting {MANUAL_CLICK_GRACE} seconds...")
            time.sleep(MANUAL_CLICK_GRACE)
        else:
            (by, value), button = match
            logger.info(f"Found Google login button using selector: {by}={value}")
            browser_utils.scroll_into_view(self.ctx, button)
            time.sleep(0.5)
            browser_utils.safe_click(self.ctx, button)
            self.state = LoginState.LOGIN_IN_PROGRESS
            logger.info("Clicked Google login button. Please complete authentication in the browser.")

        logger.info("Waiting for Google OAuth authentication to complete...")
        time.sleep(OAUTH_REDIRECT_WAIT)

    def password_login(self) -> None:
        logger.info("Filling in login credentials...")
        driver = self.ctx.driver

        match = browser_utils.first_visible_match(driver, selectors.EMAIL_INPUT_SELECTORS, wait_seconds=FIELD_SETTLE)
        if match is None:
            raise SelectorNotFound("email input", selectors.EMAIL_INPUT_SELECTORS)
        (by, value), email_field = match
        _fill(email_field, self.settings.email, "email input", selectors.EMAIL_INPUT_SELECTORS)
        logger.info(f"Email entered using selector: {by}={value}")

        self.state = LoginState.LOGIN_IN_PROGRESS
        match = browser_utils.first_visible_match(driver, selectors.NEXT_BUTTON_SELECTORS)
        if match is not None:
            browser_utils.safe_click(self.ctx, match[1])
            logger.info("Clicked next/continue button")
        time.sleep(FIELD_SETTLE)

        logger.info("Filling in password...")
        match = browser_utils.first_visible_match(driver, selectors.PASSWORD_INPUT_SELECTORS, wait_seconds=FIELD_SETTLE)
        if match is None:
            raise SelectorNotFound("password input", selectors.PASSWORD_INPUT_SELECTORS)
        (by, value), password_field = match
        _fill(password_field, self.settings.password, "password input", selectors.PASSWORD_INPUT_SELECTORS)
        logger.info(f"Password entered using selector: {by}={value}")

        logger.info("Submitting login form...")
        match = browser_utils.first_visible_match(driver, selectors.SUBMIT_BUTTON_SELECTORS)
        if match is not None and browser_utils.safe_click(self.ctx, match[1]):
            logger.info(f"Login form submitted using selector: {match[0][0]}={match[0][1]}")
        else:
            password_field.send_keys(Keys.RETURN)
            logger.info("Submitted login form using Enter key")
