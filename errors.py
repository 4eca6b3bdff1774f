class CheckinError(Exception):
    """Base class for failures raised by the check-in automation."""


class ConfigurationError(CheckinError):
    """A mandatory setting is missing or malformed."""


class SelectorNotFound(CheckinError):
    """No locator in a fallback list matched a visible element."""

    def __init__(self, purpose, locators=()):
        self.purpose = purpose
        self.locators = list(locators)
        super().__init__(f"No visible element for {purpose} ({len(self.locators)} selectors tried)")


class LoginFailure(CheckinError):
    pass


class NavigationTimeout(CheckinError):
    def __init__(self, url, seconds):
        self.url = url
        self.seconds = seconds
        super().__init__(f"Timed out after {seconds}s loading {url}")


class SessionIOError(CheckinError):
    pass
