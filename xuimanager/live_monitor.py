# -*- coding: utf-8 -*-
"""
Live quota view, similar to `docker stats`: meter every panel, then redraw a
fixed block of rows in place. Ctrl+C exits.
"""

import logging
import sys
import time

from xuimanager import reporting
from xuimanager.errors import RegistryError
from xuimanager.quota_monitor import run_sweep

log = logging.getLogger("xuimanager.live_monitor")


def render_rows(panels, store, runtime, server_ip):
    rows = []
    for panel in panels:
        record = store.record(panel.index)
        running = runtime.is_running(panel.container)
        net_io = runtime.net_io(panel.container) if running else None
        rows.append(reporting.live_row(panel, record, running, net_io, server_ip))
    return rows


def run_live(registry, store, runtime, settings, server_ip, out=None, sleep=time.sleep, max_ticks=None):
    out = out or sys.stdout
    panels = registry.load().panels()
    if not panels:
        out.write("No panels found.\n")
        return 0

    out.write("🧮 Live quota monitor (like docker stats)\n")
    out.write("Ctrl + C For Exit.\n\n")
    for line in reporting.live_header():
        out.write(line + "\n")
    # placeholder lines that the first tick overwrites
    out.write("\n" * len(panels))
    out.flush()

    ticks = 0
    try:
        while max_ticks is None or ticks < max_ticks:
            try:
                run_sweep(registry, store, runtime, settings, verbose=False)
            except RegistryError as e:
                log.warning("live view: %s", e)
            store.load()

            out.write(f"\033[{len(panels)}A")
            for row in render_rows(panels, store, runtime, server_ip):
                out.write("\033[2K" + row + "\n")
            out.flush()

            ticks += 1
            sleep(settings.live_interval)
    except KeyboardInterrupt:
        out.write("\n")
    return ticks
