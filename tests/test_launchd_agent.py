import plistlib

import launchd_agent
from config import PROJECT_DIR, ScheduleSettings


def test_one_interval_per_time_and_weekday():
    schedule = ScheduleSettings(checkin=(6, 0), checkout=(13, 45), weekdays=frozenset({1, 2, 7}))
    intervals = launchd_agent.calendar_intervals(schedule)
    assert intervals == [
        {"Hour": 6, "Minute": 0, "Weekday": 1},
        {"Hour": 6, "Minute": 0, "Weekday": 2},
        {"Hour": 6, "Minute": 0, "Weekday": 7},
        {"Hour": 13, "Minute": 45, "Weekday": 1},
        {"Hour": 13, "Minute": 45, "Weekday": 2},
        {"Hour": 13, "Minute": 45, "Weekday": 7},
    ]


def test_plist_runs_checkin_from_project_dir(tmp_path):
    plist = launchd_agent.build_plist(ScheduleSettings(), str(tmp_path), python="/usr/bin/python3")
    assert plist["ProgramArguments"][0] == "/usr/bin/python3"
    assert plist["ProgramArguments"][1].endswith("checkin_manager.py")
    assert plist["WorkingDirectory"] == PROJECT_DIR
    assert plist["EnvironmentVariables"]["HEADLESS"] == "false"
    assert len(plist["StartCalendarInterval"]) == 10


def test_main_writes_plist_file(tmp_path, monkeypatch):
    monkeypatch.setattr(launchd_agent, "load_dotenv", lambda: None)
    monkeypatch.setattr(launchd_agent, "configure_logging", lambda debug=False: None)
    monkeypatch.setenv("LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("CHECKIN_TIME", "09:15")
    monkeypatch.setenv("SCHEDULE_WEEKDAYS", "3")
    out = tmp_path / "agent.plist"

    assert launchd_agent.main(["--output", str(out), "--headless"]) == 0

    with open(out, "rb") as f:
        written = plistlib.load(f)
    assert written["Label"] == launchd_agent.LABEL
    assert written["EnvironmentVariables"]["HEADLESS"] == "true"
    assert {"Hour": 9, "Minute": 15, "Weekday": 3} in written["StartCalendarInterval"]
