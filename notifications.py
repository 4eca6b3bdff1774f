import sys
import logging
import subprocess

from plyer import notification as plyer_notification

logger = logging.getLogger(__name__)

APP_NAME = "ZohoAutoCheckin"


def _escape_osascript(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\"", "\\\"")


def notify_user(title: str, message: str, require_ack: bool = False) -> None:
    """Pop a desktop notification; an acknowledged alert on macOS when asked."""
    if require_ack and sys.platform == "darwin":
        try:
            script = (
                f'tell application "System Events" to display alert "{_escape_osascript(title)}" '
                f'message "{_escape_osascript(message)}" buttons {{"OK"}} default button "OK" as critical'
            )
            result = subprocess.run(["osascript", "-e", script], check=False, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
            if result.returncode == 0:
                logger.info(message)
                return
        except OSError as e:
            logger.debug(f"osascript alert failed: {e}")
    try:
        plyer_notification.notify(
            title=title,
            message=message,
            app_name=APP_NAME,
            timeout=10,
        )
    except Exception as e:
        logger.debug(f"Desktop notification failed: {e}")
    logger.info(message)
