import os
import sys
import logging
from dataclasses import dataclass, field
from typing import Optional

from errors import ConfigurationError

PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))

DEFAULT_LOGIN_URL = "https://accounts.zoho.com/signin?servicename=zohopeople&signupurl=https://www.zoho.com/people/signup.html"
DEFAULT_CHECKIN_URL = "https://people.zoho.com/iscalesolutions/zp#home/myspace/overview-actionlist"
DEFAULT_LOGIN_MARKERS = ("signin", "login")

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


def split_list(raw: Optional[str]):
    """Split a comma-separated setting, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_clock(raw: str, key: str):
    try:
        hour_s, minute_s = raw.strip().split(":")
        hour, minute = int(hour_s), int(minute_s)
    except (ValueError, AttributeError):
        raise ConfigurationError(f"{key} must look like HH:MM, got {raw!r}")
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ConfigurationError(f"{key} is out of range: {raw!r}")
    return hour, minute


def parse_weekdays(raw: str):
    try:
        days = frozenset(int(d) for d in split_list(raw))
    except ValueError:
        raise ConfigurationError(f"SCHEDULE_WEEKDAYS must be comma-separated numbers, got {raw!r}")
    if not days or not days.issubset(range(1, 8)):
        raise ConfigurationError(f"SCHEDULE_WEEKDAYS must use ISO weekdays 1-7, got {raw!r}")
    return days


@dataclass(frozen=True)
class Settings:
    email: str
    password: str = ""
    use_google_login: bool = False
    login_url: str = DEFAULT_LOGIN_URL
    checkin_url: str = DEFAULT_CHECKIN_URL
    action_selectors: tuple = ()
    oauth_selectors: tuple = ()
    use_persistent_context: bool = True
    user_data_dir: str = ""
    headless: bool = False
    office_wifi: tuple = ()
    logs_dir: str = ""
    login_markers: tuple = DEFAULT_LOGIN_MARKERS
    dump_dir: Optional[str] = None
    debug: bool = False

    @property
    def storage_state_path(self) -> str:
        return os.path.join(self.logs_dir, "zoho-auth-state.json")

    @classmethod
    def from_env(cls, environ=None, **overrides):
        """Build settings from environment-style keys.

        Email is mandatory. Password is mandatory unless Google login is
        selected; leaving USE_GOOGLE_LOGIN unset picks Google login whenever
        no password is configured.
        """
        env = os.environ if environ is None else environ

        email = env.get("ZOHO_EMAIL", "").strip()
        if not email:
            raise ConfigurationError("Zoho email not configured. Please set ZOHO_EMAIL.")

        password = env.get("ZOHO_PASSWORD", "")
        google_raw = env.get("USE_GOOGLE_LOGIN")
        use_google = _flag(google_raw) if google_raw is not None else not password
        if not use_google and not password:
            raise ConfigurationError("No password provided. Please set ZOHO_PASSWORD or USE_GOOGLE_LOGIN=true.")

        logs_dir = env.get("LOGS_DIR") or os.path.join(PROJECT_DIR, "logs")
        values = dict(
            email=email,
            password=password,
            use_google_login=use_google,
            login_url=env.get("ZOHO_URL") or DEFAULT_LOGIN_URL,
            checkin_url=env.get("ZOHO_CHECKIN_URL") or DEFAULT_CHECKIN_URL,
            action_selectors=tuple(split_list(env.get("CHECKIN_SELECTORS"))),
            oauth_selectors=tuple(split_list(env.get("GOOGLE_LOGIN_SELECTORS"))),
            use_persistent_context=env.get("USE_PERSISTENT_CONTEXT", "").strip().lower() != "false",
            user_data_dir=env.get("USER_DATA_DIR") or os.path.join(logs_dir, "browser-data"),
            headless=_flag(env.get("HEADLESS")),
            office_wifi=tuple(split_list(env.get("OFFICE_WIFI_SSID"))),
            logs_dir=logs_dir,
            login_markers=tuple(split_list(env.get("LOGIN_MARKERS"))) or DEFAULT_LOGIN_MARKERS,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class ScheduleSettings:
    """When check-in and check-out should fire, shared by launchd and the monitor."""
    checkin: tuple = (6, 0)
    checkout: tuple = (13, 45)
    weekdays: frozenset = field(default_factory=lambda: frozenset(range(1, 6)))

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        return cls(
            checkin=parse_clock(env.get("CHECKIN_TIME") or "06:00", "CHECKIN_TIME"),
            checkout=parse_clock(env.get("CHECKOUT_TIME") or "13:45", "CHECKOUT_TIME"),
            weekdays=parse_weekdays(env.get("SCHEDULE_WEEKDAYS") or "1,2,3,4,5"),
        )

    def entries(self):
        """Yield (name, hour, minute) for each scheduled action."""
        yield "check-in", self.checkin[0], self.checkin[1]
        yield "check-out", self.checkout[0], self.checkout[1]


class _BelowError(logging.Filter):
    def filter(self, record):
        return record.levelno < logging.ERROR


def configure_logging(debug: bool = False) -> None:
    """Route INFO/DEBUG to stdout and ERROR+ to stderr, ISO-8601 timestamps."""
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    out_handler = logging.StreamHandler(sys.stdout)
    out_handler.addFilter(_BelowError())
    out_handler.setFormatter(formatter)
    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setLevel(logging.ERROR)
    err_handler.setFormatter(formatter)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(out_handler)
    root.addHandler(err_handler)
    root.setLevel(level)

    # Suppress verbose selenium/urllib3 logging
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("selenium").setLevel(logging.WARNING)
    logging.getLogger("selenium.webdriver.remote.remote_connection").setLevel(logging.WARNING)
