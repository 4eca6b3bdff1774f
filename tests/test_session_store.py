import json
import os

from conftest import FakeDriver
from session_store import SessionStore, _cookie_param

COOKIES = [
    {"name": "JSESSIONID", "value": "abc", "domain": ".zoho.com", "path": "/", "expires": -1,
     "size": 13, "httpOnly": True, "secure": True, "session": True},
    {"name": "IAMAGENTTICKET", "value": "t", "domain": "accounts.zoho.com", "path": "/",
     "expires": 1893456000, "httpOnly": True, "secure": True, "session": False, "sameSite": "Lax"},
]


def test_snapshot_save_then_restore(tmp_path):
    path = tmp_path / "state" / "zoho-auth-state.json"
    store = SessionStore(str(path), str(tmp_path / "profile"), persistent=False)
    assert not store.has_saved_state()

    source = FakeDriver()
    source.cookies = COOKIES
    assert store.save(source)
    assert store.has_saved_state()
    assert json.loads(path.read_text())["cookies"] == COOKIES

    target = FakeDriver()
    assert store.apply(target, store.load()) == 2
    command, params = target.cdp_calls[0]
    assert command == "Network.setCookies"
    session_cookie, persistent_cookie = params["cookies"]
    assert "expires" not in session_cookie and "size" not in session_cookie
    assert persistent_cookie["expires"] == 1893456000
    assert persistent_cookie["sameSite"] == "Lax"


def test_corrupt_snapshot_loads_as_none(tmp_path):
    path = tmp_path / "zoho-auth-state.json"
    path.write_text("{not json")
    store = SessionStore(str(path), str(tmp_path / "profile"), persistent=False)
    assert store.load() is None

    path.write_text(json.dumps({"cookies": "nope"}))
    assert store.load() is None


def test_save_failure_is_swallowed(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    store = SessionStore(str(blocker / "state.json"), str(tmp_path / "profile"), persistent=False)
    assert store.save(FakeDriver()) is False


def test_persistent_mode_creates_profile_and_skips_snapshot(tmp_path):
    profile = tmp_path / "browser-data"
    store = SessionStore(str(tmp_path / "state.json"), str(profile), persistent=True)

    assert not store.has_saved_state()
    assert store.prepare_profile_dir() == str(profile)
    assert os.path.isdir(profile)
    assert store.load() is None
    assert store.save(FakeDriver())
    assert not (tmp_path / "state.json").exists()


def test_selenium_style_expiry_is_kept():
    assert _cookie_param({"name": "a", "value": "b", "expiry": 42}) == {"name": "a", "value": "b", "expires": 42}


def test_malformed_cookie_entries_are_dropped(tmp_path):
    path = tmp_path / "zoho-auth-state.json"
    path.write_text(json.dumps({"cookies": ["oops", COOKIES[1]]}))
    store = SessionStore(str(path), str(tmp_path / "profile"), persistent=False)

    cookies = store.load()

    assert cookies == [COOKIES[1]]


def test_unusable_cookie_values_do_not_raise(tmp_path):
    store = SessionStore(str(tmp_path / "state.json"), str(tmp_path / "profile"), persistent=False)
    driver = FakeDriver()

    assert store.apply(driver, [{"name": "sid", "value": "1", "expires": "tomorrow"}]) == 0
    assert store.apply(driver, ["oops"]) == 0
