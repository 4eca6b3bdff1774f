#!/usr/bin/env python3
"""
Zoho check-in/check-out monitor.

Runs 24/7 and starts checkin_manager.py at the scheduled times. Each
target fires at most once per day; run markers are cleared when the local
date changes. Prefer the launchd agent (launchd_agent.py) where available,
both read the same CHECKIN_TIME / CHECKOUT_TIME / SCHEDULE_WEEKDAYS settings.
"""
import os
import sys
import time
import signal
import logging
import argparse
import subprocess
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from dotenv import load_dotenv

from config import PROJECT_DIR, ScheduleSettings, configure_logging
from errors import ConfigurationError

logger = logging.getLogger("monitor")

TICK_SECONDS = 60
CHECKIN_SCRIPT = os.path.join(PROJECT_DIR, "checkin_manager.py")


@dataclass(frozen=True)
class ScheduleTarget:
    name: str
    hour: int
    minute: int
    weekdays: frozenset

    def matches(self, now: datetime) -> bool:
        return now.isoweekday() in self.weekdays and now.hour == self.hour and now.minute == self.minute

    def describe(self) -> str:
        return f"{self.name} at {self.hour:02d}:{self.minute:02d} (ISO weekdays {','.join(str(d) for d in sorted(self.weekdays))})"


@dataclass
class SchedulerState:
    targets: list
    last_run: dict = field(default_factory=dict)
    current_date: Optional[date] = None
    running: list = field(default_factory=list)


def targets_from_schedule(schedule: ScheduleSettings):
    return [ScheduleTarget(name, hour, minute, schedule.weekdays) for name, hour, minute in schedule.entries()]


def spawn_checkin(target: ScheduleTarget):
    """Start one independent check-in run, returns the child process."""
    return subprocess.Popen([sys.executable, CHECKIN_SCRIPT], cwd=PROJECT_DIR, env=dict(os.environ))


def reap_finished(state: SchedulerState) -> None:
    still_running = []
    for name, proc in state.running:
        code = proc.poll()
        if code is None:
            still_running.append((name, proc))
        elif code == 0:
            logger.info(f"{name} run completed successfully")
        else:
            logger.error(f"{name} run exited with code {code}")
    state.running = still_running


def tick(state: SchedulerState, now: datetime, spawn=spawn_checkin):
    """Evaluate one minute; returns the names of the targets that fired."""
    reap_finished(state)

    today = now.date()
    if state.current_date != today:
        if state.current_date is not None:
            logger.info("Daily reset - Ready for new check-in/check-out")
        state.last_run.clear()
        state.current_date = today

    fired = []
    for target in state.targets:
        if not target.matches(now) or state.last_run.get(target.name) == today:
            continue
        state.last_run[target.name] = today
        fired.append(target.name)
        logger.info(f"{target.name} time detected - Running {target.name}...")
        try:
            proc = spawn(target)
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Error running script: {e}")
            continue
        if proc is not None:
            state.running.append((target.name, proc))
    return fired


def _handle_stop(signum, frame):
    logger.info("Shutting down monitor...")
    sys.exit(0)


def run_forever(state: SchedulerState, clock=datetime.now, sleep=time.sleep) -> None:
    signal.signal(signal.SIGINT, _handle_stop)
    signal.signal(signal.SIGTERM, _handle_stop)
    logger.info("Monitor is running. Press Ctrl+C to stop.")
    while True:
        tick(state, clock())
        sleep(TICK_SECONDS)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run check-in/check-out at the configured times")
    parser.add_argument("--debug", action="store_true", help="Verbose debug output")
    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging(args.debug)

    try:
        schedule = ScheduleSettings.from_env()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    state = SchedulerState(targets=targets_from_schedule(schedule))
    logger.info("Zoho Check-in/Check-out Monitor started - Running 24/7")
    for target in state.targets:
        logger.info(f"Scheduled: {target.describe()}")
    run_forever(state)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
