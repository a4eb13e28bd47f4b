from xuimanager import cron
from xuimanager.config import CRON_TAG


def test_cron_line():
    line = cron.cron_line("*/5 * * * *", python="/usr/bin/python3")
    assert line == "*/5 * * * * /usr/bin/python3 -m xuimanager --quota-cron >/dev/null 2>&1 # MULTI_3XUI_QUOTA"


def test_strip_tagged_keeps_other_jobs():
    text = "0 3 * * * /usr/bin/backup\n*/5 * * * * old-job # MULTI_3XUI_QUOTA\n"
    assert cron.strip_tagged(text) == ["0 3 * * * /usr/bin/backup"]


def test_enable_replaces_existing_entry(monkeypatch):
    written = []
    monkeypatch.setattr(cron, "read_crontab", lambda: "0 3 * * * backup\n*/1 * * * * stale " + CRON_TAG)
    monkeypatch.setattr(cron, "write_crontab", lambda lines: written.append(lines) or True)

    assert cron.enable("*/5 * * * *", python="/usr/bin/python3")

    lines = written[0]
    assert lines[0] == "0 3 * * * backup"
    assert sum(CRON_TAG in ln for ln in lines) == 1
    assert lines[1].startswith("*/5 * * * * /usr/bin/python3")


def test_disable_and_status(monkeypatch):
    written = []
    monkeypatch.setattr(cron, "read_crontab", lambda: "x " + CRON_TAG)
    monkeypatch.setattr(cron, "write_crontab", lambda lines: written.append(lines) or True)

    assert cron.is_enabled()
    assert cron.disable()
    assert written == [[]]


def test_read_crontab_without_crontab(monkeypatch):
    monkeypatch.setattr(cron, "run_cmd", lambda cmd: (1, "", "no crontab for root"))
    assert cron.read_crontab() == ""
    assert not cron.is_enabled()
