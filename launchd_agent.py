#!/usr/bin/env python3
"""Render (and optionally install) the launchd agent that runs check-ins.

One StartCalendarInterval entry is emitted per (hour, minute, weekday) of
the configured schedule; launchd starts checkin_manager.py at each one.
"""
import os
import sys
import logging
import argparse
import plistlib

from dotenv import load_dotenv

from config import PROJECT_DIR, ScheduleSettings, configure_logging
from errors import ConfigurationError

logger = logging.getLogger("launchd_agent")

LABEL = "com.zoho.autocheckin"
DEFAULT_PATH = "/usr/local/bin:/opt/homebrew/bin:/usr/bin:/bin:/usr/sbin:/sbin"


def calendar_intervals(schedule: ScheduleSettings):
    intervals = []
    for _, hour, minute in schedule.entries():
        for weekday in sorted(schedule.weekdays):
            # launchd accepts 7 as Sunday, same as ISO.
            intervals.append({"Hour": hour, "Minute": minute, "Weekday": weekday})
    return intervals


def build_plist(schedule: ScheduleSettings, logs_dir: str, python: str = sys.executable, headless: bool = False) -> dict:
    return {
        "Label": LABEL,
        "ProgramArguments": [python, os.path.join(PROJECT_DIR, "checkin_manager.py")],
        "WorkingDirectory": PROJECT_DIR,
        "EnvironmentVariables": {
            "PATH": DEFAULT_PATH,
            "HEADLESS": "true" if headless else "false",
        },
        "StartCalendarInterval": calendar_intervals(schedule),
        "StandardOutPath": os.path.join(logs_dir, "launchd.out.log"),
        "StandardErrorPath": os.path.join(logs_dir, "launchd.err.log"),
        "RunAtLoad": False,
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate the launchd plist for scheduled check-ins")
    parser.add_argument("-o", "--output", help="Write the plist here (default: print to stdout)")
    parser.add_argument("--install", action="store_true", help=f"Write to ~/Library/LaunchAgents/{LABEL}.plist")
    parser.add_argument("--headless", action="store_true", help="Run the scheduled browser headless")
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging()

    try:
        schedule = ScheduleSettings.from_env()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    logs_dir = os.environ.get("LOGS_DIR") or os.path.join(PROJECT_DIR, "logs")
    plist = build_plist(schedule, logs_dir, headless=args.headless)

    output = args.output
    if args.install:
        output = os.path.expanduser(f"~/Library/LaunchAgents/{LABEL}.plist")
    if not output:
        sys.stdout.write(plistlib.dumps(plist).decode("utf-8"))
        return 0

    os.makedirs(os.path.dirname(os.path.abspath(output)), exist_ok=True)
    os.makedirs(logs_dir, exist_ok=True)
    with open(output, "wb") as f:
        plistlib.dump(plist, f)
    logger.info(f"Wrote launchd agent to {output}")
    logger.info(f"Load it with: launchctl load -w {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
