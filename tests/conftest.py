import time

import pytest
from selenium.common.exceptions import NoSuchElementException

import checkin_manager
import clock_actions
import login_flow
from config import Settings


class FakeElement:
    def __init__(self, text="", visible=True, attrs=None, on_click=None):
        self.text = text
        self.visible = visible
        self.attrs = dict(attrs or {})
        self.on_click = on_click
        self.clicks = 0
        self.typed = []

    def is_displayed(self):
        return self.visible

    def get_attribute(self, name):
        return self.attrs.get(name)

    def click(self):
        self.clicks += 1
        if self.on_click:
            self.on_click()

    def clear(self):
        self.typed = []

    def send_keys(self, *values):
        self.typed.extend(values)


class FakeDriver:
    page_source = "<html><body>fake</body></html>"

    def __init__(self, url="", elements=None, redirects=None):
        self.current_url = url
        self.elements = dict(elements or {})
        self.redirects = dict(redirects or {})
        self.lookups = []
        self.visited = []
        self.screenshots = []
        self.cdp_calls = []
        self.cookies = []

    def find_element(self, by, value):
        self.lookups.append((by, value))
        try:
            return self.elements[(by, value)]
        except KeyError:
            raise NoSuchElementException(f"{by}={value}")

    def get(self, url):
        self.visited.append(url)
        self.current_url = self.redirects.get(url, url)

    def execute_script(self, script, *args):
        return None

    def save_screenshot(self, path):
        self.screenshots.append(path)
        with open(path, "wb") as f:
            f.write(b"png")
        return True

    def execute_cdp_cmd(self, cmd, params):
        self.cdp_calls.append((cmd, params))
        if cmd == "Network.getAllCookies":
            return {"cookies": list(self.cookies)}
        return {}

    def get_cookies(self):
        return list(self.cookies)


@pytest.fixture(autouse=True)
def no_waiting(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda seconds: None)
    monkeypatch.setattr(clock_actions, "SELECTOR_WAIT", 0)
    monkeypatch.setattr(login_flow, "FIELD_SETTLE", 0)
    monkeypatch.setattr(login_flow, "OAUTH_BUTTON_WAIT", 0)


@pytest.fixture(autouse=True)
def notifications(monkeypatch):
    sent = []

    def record(title, message, require_ack=False):
        sent.append((title, message))

    monkeypatch.setattr(clock_actions, "notify_user", record)
    monkeypatch.setattr(checkin_manager, "notify_user", record)
    return sent


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides):
        values = dict(
            email="me@example.com",
            password="hunter2",
            use_google_login=False,
            logs_dir=str(tmp_path / "logs"),
            user_data_dir=str(tmp_path / "logs" / "browser-data"),
            use_persistent_context=False,
            headless=True,
        )
        values.update(overrides)
        return Settings(**values)
    return _make
