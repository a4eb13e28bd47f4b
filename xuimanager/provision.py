# -*- coding: utf-8 -*-
"""
Interactive panel lifecycle: install/rebuild, add, reset, uninstall.
"""

import logging
import os
import shutil

from xuimanager.compose import write_compose
from xuimanager.console import ask_int, ask_yes_no, color_green, color_red, color_yellow
from xuimanager.errors import PortAllocationError
from xuimanager.ports import PortAllocator, default_range, default_web_port
from xuimanager.registry import Panel

log = logging.getLogger("xuimanager.provision")


def prompt_panel(index, allocator, input_fn=input):
    """Ask for one panel's ports and quota until the allocator accepts them."""
    while True:
        web_port = ask_int(f"Panel #{index} web port (host)?", default_web_port(index), input_fn)
        try:
            allocator.allocate_web_port(web_port)
            break
        except PortAllocationError as e:
            color_red(str(e))

    default_start, default_end = default_range(index)
    while True:
        start = ask_int(f"Inbound port range START for panel #{index}?", default_start, input_fn)
        end = ask_int(f"Inbound port range END for panel #{index}?", default_end, input_fn)
        try:
            allocator.allocate_range(start, end)
            break
        except PortAllocationError as e:
            color_red(str(e))

    quota_gb = ask_int(f"Monthly quota for panel #{index} in GB (0 = unlimited)?", 0, input_fn)
    return Panel(index=index, web_port=web_port, range_start=start, range_end=end), quota_gb


def _bring_up(settings, registry, runtime):
    write_compose(settings, registry)
    color_green(f"docker-compose.yml generated at: {settings.compose_file}")
    if not runtime.compose_up(settings.compose_file):
        color_red("docker compose up failed, see the log for details.")
        return False
    return True


def initial_install(settings, registry, store, runtime, server_ip, input_fn=input):
    runtime.compose_cmd()
    registry.load()
    color_green("=== Initial multi-3x-ui setup ===")
    if len(registry):
        color_yellow(f"An installation with {len(registry)} panel(s) already exists in {settings.base_dir}.")
        if not ask_yes_no("Rebuild it? Panel definitions and usage counters will be replaced.", input_fn):
            color_yellow("Aborted.")
            return []

    count = ask_int("How many panels do you want to create?", 2, input_fn)

    registry.clear()
    store.clear()
    allocator = PortAllocator()
    created = []
    for index in range(1, count + 1):
        color_yellow(f"--- Panel #{index} configuration ---")
        panel, quota_gb = prompt_panel(index, allocator, input_fn)
        registry.add(panel)
        store.init_record(index, quota_gb)
        created.append(panel)

    color_green("Bringing up all panels with Docker...")
    if _bring_up(settings, registry, runtime):
        color_green("Done. Use the following URLs:")
        for p in created:
            print(f"  Panel #{p.index} => {p.url(server_ip)}")
    log.info("initial install finished with %d panel(s)", len(created))
    return created


def add_panel(settings, registry, store, runtime, server_ip, input_fn=input):
    runtime.compose_cmd()
    registry.load()
    if not len(registry):
        color_red("No panels found. Run initial installation first.")
        return None

    index = registry.next_index()
    color_green(f"=== Add new panel (Panel #{index}) ===")
    allocator = PortAllocator.from_registry(registry)
    panel, quota_gb = prompt_panel(index, allocator, input_fn)
    registry.add(panel)
    store.init_record(index, quota_gb)

    if _bring_up(settings, registry, runtime):
        color_green(f"Panel #{index} is starting...")
        print(f"URL: {panel.url(server_ip)}")
    return panel


def wipe_panel_db(settings, index):
    db_dir = os.path.join(settings.panel_dir(index), "db")
    if not os.path.isdir(db_dir):
        return
    for name in os.listdir(db_dir):
        path = os.path.join(db_dir, name)
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)


def reset_panel(settings, registry, store, runtime, index, input_fn=input):
    """Wipe one panel's 3x-ui database and usage counters, then restart it."""
    registry.load()
    panel = registry.get(index)
    if panel is None:
        color_red("Invalid panel number.")
        return False
    if not ask_yes_no(f"Are you sure you want to RESET panel #{index}? This will wipe its DB.", input_fn):
        color_yellow("Aborted.")
        return False

    runtime.stop(panel.container)
    wipe_panel_db(settings, index)
    color_green(f"DB for panel #{index} wiped.")
    store.reset_usage(index)

    if _bring_up(settings, registry, runtime):
        color_green(f"Panel #{index} restarted with fresh DB (default admin/admin).")
    log.info("panel #%s reset", index)
    return True


def uninstall_all(settings, runtime, input_fn=input):
    if not os.path.isdir(settings.base_dir):
        color_red(f"Base directory {settings.base_dir} not found. Nothing to uninstall.")
        return False
    color_red("=== WARNING: Full uninstall ===")
    print("This will:")
    print("  - Stop and remove all multi 3x-ui containers")
    print("  - Remove docker-compose.yml, usage data and all xuiN data directories")
    if not ask_yes_no("Are you sure you want to continue?", input_fn):
        color_yellow("Aborted.")
        return False

    if os.path.isfile(settings.compose_file):
        runtime.compose_down(settings.compose_file)
    shutil.rmtree(settings.base_dir)
    color_green("All multi 3x-ui data and containers removed.")
    log.info("uninstalled %s", settings.base_dir)
    return True


def reset_panel_usage(panel, store, runtime):
    """Zero the usage counters. Returns True if the container exists but is stopped."""
    store.reset_usage(panel.index)
    return runtime.exists(panel.container) and not runtime.is_running(panel.container)
