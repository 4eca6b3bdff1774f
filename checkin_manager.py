import sys
import logging
import argparse
import warnings

from dotenv import load_dotenv
from selenium import webdriver
import chromedriver_autoinstaller

from browser_utils import AppContext, PAGE_LOAD_TIMEOUT
import browser_utils
import clock_actions
import wifi_check
from config import Settings, configure_logging
from errors import ConfigurationError, LoginFailure, NavigationTimeout
from login_flow import LoginResolver
from notifications import notify_user
from session_store import SessionStore

logger = logging.getLogger("checkin_manager")

warnings.filterwarnings(
    "ignore",
    message=r".*only supports OpenSSL.*",
    category=Warning,
    module=r"urllib3",
)


def init_browser(settings: Settings, store: SessionStore):
    """Start Chrome, on the persistent profile when that mode is selected."""
    chromedriver_autoinstaller.install()

    chrome_options = webdriver.ChromeOptions()
    if settings.headless:
        chrome_options.add_argument("--headless=new")
    chrome_options.add_argument("--window-size=1920,1080")
    chrome_options.add_argument("--disable-gpu")
    chrome_options.add_argument("--disable-dev-shm-usage")
    chrome_options.add_argument("--disable-notifications")
    chrome_options.add_experimental_option("prefs", {
        "credentials_enable_service": False,
        "profile.password_manager_enabled": False,
    })
    if store.persistent:
        chrome_options.add_argument(f"--user-data-dir={store.prepare_profile_dir()}")
        logger.info("Using persistent browser context - your login will be remembered after first use")

    driver = webdriver.Chrome(options=chrome_options)
    driver.set_page_load_timeout(PAGE_LOAD_TIMEOUT)
    return driver


def run_checkin(ctx: AppContext, settings: Settings, store: SessionStore) -> int:
    """Log in if needed, press the check-in/check-out control, screenshot.

    Returns the process exit code; every failure is caught here.
    """
    try:
        if not store.persistent:
            cookies = store.load()
            if cookies:
                store.apply(ctx.driver, cookies)

        try:
            browser_utils.navigate(ctx, settings.login_url)
        except NavigationTimeout as e:
            raise LoginFailure(str(e)) from e

        LoginResolver(ctx, settings, session_store=store).resolve()

        clock_actions.go_to_checkin_page(ctx, settings)
        result = clock_actions.perform_check_action(ctx, settings)
        if not result.performed:
            logger.warning("No check-in/check-out action was performed")

        browser_utils.capture_screenshot(ctx, "zoho-checkin")
        logger.info("Zoho check-in automation completed")
        return 0
    except Exception as e:
        logger.error(f"Error during automation: {type(e).__name__}: {e}")
        logger.debug("Stack trace:", exc_info=True)
        browser_utils.capture_screenshot(ctx, "error")
        notify_user(
            "Zoho check-in failed",
            "Check-in automation failed. Please check the logs and verify your attendance.",
            require_ack=True,
        )
        return 1


def main(argv=None):
    parser = argparse.ArgumentParser(description="Zoho People automatic check-in/check-out")
    parser.add_argument("--headless", action="store_true", help="Run Chrome headless (overrides HEADLESS)")
    parser.add_argument("--debug", action="store_true", help="Verbose debug output and HTML/URL dumps next to screenshots")
    parser.add_argument("--dump-dir", default=None, help="Directory to write debug artifacts (html/url)")
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging(args.debug)

    try:
        settings = Settings.from_env(
            headless=True if args.headless else None,
            debug=args.debug,
            dump_dir=args.dump_dir,
        )
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    if settings.office_wifi and not wifi_check.is_on_office_wifi(settings.office_wifi):
        logger.error("Not on office Wi-Fi, skipping check-in")
        return 1

    store = SessionStore(settings.storage_state_path, settings.user_data_dir, persistent=settings.use_persistent_context)
    if store.has_saved_state():
        logger.info("Found saved authentication state. Attempting to reuse session...")
    elif settings.use_google_login:
        logger.info("No saved authentication state found. Complete the Google login in the browser window if prompted.")

    logger.info(f"Launching browser (headless: {settings.headless})...")
    logger.debug(f"persistent={store.persistent} dump_dir={settings.dump_dir or '(disabled)'}")
    try:
        driver = init_browser(settings, store)
    except Exception as e:
        logger.error(f"Could not start the browser: {e}")
        return 1

    ctx = AppContext(
        driver=driver,
        screenshot_dir=settings.logs_dir,
        dump_dir=settings.dump_dir or (settings.logs_dir if settings.debug else None),
    )
    try:
        return run_checkin(ctx, settings, store)
    finally:
        try:
            driver.quit()
            logger.info("Browser closed")
        except Exception:
            pass


if __name__ == "__main__":
    sys.exit(main())
