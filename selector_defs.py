from selenium.webdriver.common.by import By

# Zoho accounts renders the federated sign-in buttons as spans; the generic
# entries cover other portals that use plain buttons/links.
GOOGLE_LOGIN_SELECTORS = [
    (By.CSS_SELECTOR, "span[aria-label='Sign in with Google']"),
    (By.CSS_SELECTOR, "span.google_icon"),
    (By.CSS_SELECTOR, "span[value='google']"),
    (By.CSS_SELECTOR, ".google_fed"),
    (By.CSS_SELECTOR, "span.fed_div.google_icon"),
    (By.XPATH, "//button[contains(.,'Google')]"),
    (By.XPATH, "//button[contains(.,'Sign in with Google')]"),
    (By.XPATH, "//a[contains(.,'Google')]"),
    (By.XPATH, "//a[contains(.,'Sign in with Google')]"),
    (By.CSS_SELECTOR, "[data-provider='google']"),
    (By.CSS_SELECTOR, ".google-signin"),
    (By.CSS_SELECTOR, "button[aria-label*='Google']"),
    (By.CSS_SELECTOR, "a[aria-label*='Google']"),
    (By.CSS_SELECTOR, "span[aria-label*='Google']"),
]

EMAIL_INPUT_SELECTORS = [
    (By.CSS_SELECTOR, "input[type='email']"),
    (By.NAME, "login_id"),
    (By.CSS_SELECTOR, "input[id*='email']"),
    (By.CSS_SELECTOR, "input[id*='login']"),
    (By.ID, "login_id"),
    (By.ID, "email"),
]

NEXT_BUTTON_SELECTORS = [
    (By.XPATH, "//button[contains(.,'Next')]"),
    (By.XPATH, "//button[contains(.,'Continue')]"),
    (By.CSS_SELECTOR, "button[type='submit']"),
    (By.ID, "nextbtn"),
    (By.CSS_SELECTOR, ".zgh-button"),
]

PASSWORD_INPUT_SELECTORS = [
    (By.CSS_SELECTOR, "input[type='password']"),
    (By.NAME, "password"),
    (By.ID, "password"),
    (By.CSS_SELECTOR, "input[id*='password']"),
]

SUBMIT_BUTTON_SELECTORS = [
    (By.CSS_SELECTOR, "button[type='submit']"),
    (By.XPATH, "//button[contains(.,'Sign in')]"),
    (By.XPATH, "//button[contains(.,'Login')]"),
    (By.ID, "nextbtn"),
    (By.CSS_SELECTOR, "input[type='submit']"),
]

CHECKIN_BUTTON_SELECTORS = [
    (By.ID, "ZPAtt_check_in_out"),
    (By.CSS_SELECTOR, "button#ZPAtt_check_in_out"),
    (By.CSS_SELECTOR, "button[aria-label*='Check']"),
    (By.XPATH, "//button[contains(.,'Check-in')]"),
    (By.XPATH, "//button[contains(.,'Check-out')]"),
    (By.XPATH, "//button[contains(.,'Check In')]"),
    (By.CSS_SELECTOR, "[onclick*='TAMSUtil.Attendance.punch']"),
]

_PREFIX_MAP = {
    "xpath": By.XPATH,
    "id": By.ID,
    "name": By.NAME,
    "css": By.CSS_SELECTOR,
}


def parse_locator(raw: str):
    """Turn an override string into a (By, value) pair.

    Plain strings are CSS selectors; ``xpath=``, ``id=``, ``name=`` and
    ``css=`` prefixes pick another strategy.
    """
    raw = raw.strip()
    prefix, sep, rest = raw.partition("=")
    method = _PREFIX_MAP.get(prefix.strip().lower()) if sep else None
    if method is not None and rest.strip():
        return method, rest.strip()
    return By.CSS_SELECTOR, raw


def resolve(overrides, defaults):
    """Configured overrides win over the built-in list when any are given."""
    if overrides:
        return [parse_locator(raw) for raw in overrides]
    return list(defaults)
