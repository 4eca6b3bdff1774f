import os

import pytest

from selenium.common.exceptions import InvalidSelectorException, TimeoutException
from selenium.webdriver.common.by import By

import browser_utils
import selector_defs
from browser_utils import AppContext
from conftest import FakeDriver, FakeElement
from errors import NavigationTimeout


def test_first_visible_match_skips_absent_and_hidden():
    hidden = FakeElement("hidden", visible=False)
    wanted = FakeElement("wanted")
    later = FakeElement("later")
    driver = FakeDriver(elements={
        (By.ID, "hidden"): hidden,
        (By.ID, "wanted"): wanted,
        (By.ID, "later"): later,
    })
    candidates = [(By.ID, "missing"), (By.ID, "hidden"), (By.ID, "wanted"), (By.ID, "later")]

    locator, element = browser_utils.first_visible_match(driver, candidates)

    assert locator == (By.ID, "wanted")
    assert element is wanted
    assert driver.lookups == candidates[:3]


def test_first_visible_match_returns_none_when_nothing_visible():
    driver = FakeDriver(elements={(By.ID, "hidden"): FakeElement(visible=False)})
    assert browser_utils.first_visible_match(driver, [(By.ID, "missing"), (By.ID, "hidden")]) is None


def test_first_visible_match_with_wait_finds_present_element():
    driver = FakeDriver(elements={(By.CSS_SELECTOR, ".go"): FakeElement("Go")})
    match = browser_utils.first_visible_match(driver, [(By.CSS_SELECTOR, ".go")], wait_seconds=1)
    assert match[0] == (By.CSS_SELECTOR, ".go")


def test_first_visible_match_skips_invalid_locator_while_waiting():
    class StrictDriver(FakeDriver):
        def find_element(self, by, value):
            if ":has-text" in value:
                self.lookups.append((by, value))
                raise InvalidSelectorException("invalid selector")
            return super().find_element(by, value)

    button = FakeElement("Check-in")
    driver = StrictDriver(elements={(By.ID, "ZPAtt_check_in_out"): button})
    candidates = [(By.CSS_SELECTOR, 'button:has-text("Check-in")'), (By.ID, "ZPAtt_check_in_out")]

    match = browser_utils.first_visible_match(driver, candidates, wait_seconds=1)

    assert match == ((By.ID, "ZPAtt_check_in_out"), button)


def test_parse_locator_prefixes():
    assert selector_defs.parse_locator("#ZPAtt_check_in_out") == (By.CSS_SELECTOR, "#ZPAtt_check_in_out")
    assert selector_defs.parse_locator("xpath=//button[1]") == (By.XPATH, "//button[1]")
    assert selector_defs.parse_locator(" id=checkin ") == (By.ID, "checkin")
    assert selector_defs.parse_locator("a[href='x=y']") == (By.CSS_SELECTOR, "a[href='x=y']")


def test_resolve_prefers_overrides():
    assert selector_defs.resolve((), selector_defs.CHECKIN_BUTTON_SELECTORS) == selector_defs.CHECKIN_BUTTON_SELECTORS
    assert selector_defs.resolve(("#a", "name=b"), selector_defs.CHECKIN_BUTTON_SELECTORS) == [
        (By.CSS_SELECTOR, "#a"),
        (By.NAME, "b"),
    ]


def test_capture_screenshot_writes_png_and_dump(tmp_path):
    driver = FakeDriver(url="https://people.zoho.com/")
    ctx = AppContext(driver=driver, screenshot_dir=str(tmp_path / "shots"), dump_dir=str(tmp_path / "dump"))

    path = browser_utils.capture_screenshot(ctx, "login failed")

    assert path.endswith("_login_failed.png")
    assert os.path.exists(path)
    dumped = sorted(os.listdir(tmp_path / "dump"))
    assert [name.split("_", 2)[-1] for name in dumped] == ["login_failed.html", "login_failed.url.txt"]


def test_navigate_wraps_timeout(tmp_path):
    class SlowDriver(FakeDriver):
        def get(self, url):
            raise TimeoutException("slow")

    ctx = AppContext(driver=SlowDriver(), screenshot_dir=str(tmp_path))
    with pytest.raises(NavigationTimeout):
        browser_utils.navigate(ctx, "https://example.com")
