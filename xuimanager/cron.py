# -*- coding: utf-8 -*-
"""Register the unattended quota check in root's crontab."""

import logging
import shlex
import subprocess
import sys

from xuimanager.config import CRON_TAG
from xuimanager.docker_cli import run_cmd

log = logging.getLogger("xuimanager.cron")


def cron_line(cron_expr, python=None):
    python = python or sys.executable
    return f"{cron_expr} {shlex.quote(python)} -m xuimanager --quota-cron >/dev/null 2>&1 {CRON_TAG}"


def strip_tagged(crontab_text):
    return [ln for ln in crontab_text.splitlines() if CRON_TAG not in ln]


def read_crontab():
    rc, out, _ = run_cmd(["crontab", "-l"])
    # "no crontab for root" is rc 1 with an empty listing
    return out if rc == 0 else ""


def write_crontab(lines):
    text = "\n".join(lines) + "\n" if lines else ""
    try:
        p = subprocess.run(["crontab", "-"], input=text, capture_output=True, text=True, timeout=30, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        log.error("crontab update failed: %s", e)
        return False
    if p.returncode != 0:
        log.error("crontab update failed rc=%s err=%s", p.returncode, (p.stderr or "").strip())
        return False
    return True


def is_enabled():
    return CRON_TAG in read_crontab()


def enable(cron_expr, python=None):
    lines = strip_tagged(read_crontab())
    lines.append(cron_line(cron_expr, python))
    ok = write_crontab(lines)
    if ok:
        log.info("quota cron enabled (%s)", cron_expr)
    return ok


def disable():
    ok = write_crontab(strip_tagged(read_crontab()))
    if ok:
        log.info("quota cron disabled")
    return ok
