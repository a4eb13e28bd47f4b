#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
xui-manager: run several 3x-ui panels in Docker with a monthly traffic quota
per panel.

    xui-manager                 interactive menu
    xui-manager --quota-cron    one silent quota check (used by cron)
"""

import argparse
import logging
import os
import sys

from xuimanager import cron, provision, reporting
from xuimanager.app import Context
from xuimanager.config import Settings, setup_logging
from xuimanager.console import ask_int, ask_yes_no, color_green, color_red, color_yellow, pause
from xuimanager.errors import XuiManagerError
from xuimanager.live_monitor import run_live
from xuimanager.quota_monitor import run_sweep

log = logging.getLogger("xuimanager.cli")


# ---------- commands ----------

def quota_cron(ctx):
    """Unattended sweep: silent unless a panel is stopped or something breaks."""
    if not os.path.isfile(ctx.settings.registry_file):
        return 0
    run_sweep(ctx.registry, ctx.store, ctx.runtime, ctx.settings, verbose=False)
    return 0


def show_status(ctx):
    ctx.reload()
    color_green("🧷 Docker containers (xui_panel_*)")
    print()
    table = ctx.runtime.ps_table("xui_panel_")
    if table is None:
        color_red("Unable to query docker.")
    else:
        for line in table:
            print(line)
    print()

    if os.path.isfile(ctx.settings.compose_file):
        color_green(f"📄 docker-compose.yml: {ctx.settings.compose_file}")
    else:
        color_yellow("⚠️ docker-compose.yml not found.")
    print()

    print(f"Base directory: {ctx.settings.base_dir}")
    print(f"Server IP     : {ctx.server_ip}")
    print()
    panels = ctx.registry.panels()
    if not panels:
        color_yellow("No panels found.")
        return 0
    for line in reporting.status_header():
        print(line)
    for p in panels:
        running = ctx.runtime.is_running(p.container)
        print(reporting.status_row(p, ctx.store.record(p.index), running, ctx.server_ip))
    print(reporting.RULE)
    return 0


def _panel_or_error(ctx, index):
    ctx.reload()
    panel = ctx.registry.get(index)
    if panel is None:
        color_red(f"Invalid panel number (1-{ctx.registry.next_index() - 1}).")
    return panel


def set_quota(ctx, index, quota_gb):
    if _panel_or_error(ctx, index) is None:
        return 1
    ctx.store.set_quota(index, quota_gb)
    color_green(f"Quota for panel #{index} set to {quota_gb} GB.")
    return 0


def reset_usage(ctx, index, assume_yes=False, start=False, input_fn=input):
    panel = _panel_or_error(ctx, index)
    if panel is None:
        return 1
    if not assume_yes and not ask_yes_no(f"Are you sure you want to reset usage for panel #{index}?", input_fn):
        color_yellow("Aborted.")
        return 0

    stopped = provision.reset_panel_usage(panel, ctx.store, ctx.runtime)
    color_green(f"Usage for panel #{index} reset to 0.")
    if stopped:
        color_yellow(f"Panel #{index} ({panel.container}) is currently STOPPED.")
        if start or (not assume_yes and ask_yes_no("Do you want to START this panel now?", input_fn)):
            if ctx.runtime.start(panel.container):
                color_green(f"Panel #{index} started successfully ✅")
            else:
                color_red(f"Failed to start panel #{index}. You can try manually: docker start {panel.container}")
        else:
            color_yellow("Panel remains stopped.")
    return 0


def quota_check(ctx):
    if not os.path.isfile(ctx.settings.registry_file):
        color_yellow(f"No panels registered in {ctx.settings.base_dir}, nothing to do.")
        return 0
    run_sweep(ctx.registry, ctx.store, ctx.runtime, ctx.settings, verbose=True)
    return 0


def cron_command(ctx, action):
    if action == "enable":
        ok = cron.enable(ctx.settings.cron_expr)
        (color_green if ok else color_red)(
            f"Quota cron enabled (every {ctx.settings.cron_expr})." if ok else "Failed to update crontab.")
        return 0 if ok else 1
    if action == "disable":
        ok = cron.disable()
        (color_yellow if ok else color_red)("Quota cron disabled." if ok else "Failed to update crontab.")
        return 0 if ok else 1
    if cron.is_enabled():
        color_green("Quota cron is currently: ENABLED")
    else:
        color_yellow("Quota cron is currently: DISABLED")
    return 0


def toggle_cron(ctx, input_fn=input):
    if cron.is_enabled():
        color_green("Quota cron is currently: ENABLED")
        if ask_yes_no("Do you want to DISABLE it?", input_fn):
            return cron_command(ctx, "disable")
    else:
        color_yellow("Quota cron is currently: DISABLED")
        if ask_yes_no(f"Do you want to ENABLE it (every {ctx.settings.cron_expr})?", input_fn):
            return cron_command(ctx, "enable")
    color_yellow("No changes made.")
    return 0


def run_bot_command(ctx):
    if not ctx.settings.bot_token or not ctx.settings.admin_id:
        color_red("Set XUI_BOT_TOKEN and XUI_ADMIN_ID to run the Telegram console.")
        return 1
    from xuimanager.bot import run_bot
    run_bot(ctx)
    return 0


# ---------- interactive menu ----------

MENU = """
📦 Panel Management
  1) 🚀 Initial install / Rebuild multi 3x-ui
  2) ➕ Add new panel
  3) ♻️  Reset a panel (wipe DB and restart)
  4) 🗑  Uninstall all panels (FULL REMOVE)

📊 Quota & Status
  5) 📋 Show status
  6) 🎯 Set / change monthly quota for a panel
  7) 🔁 Reset usage (USED_GB/bytes) for a panel
  8) 🧮 Live quota monitor
  9) ⏱  Enable/Disable automatic quota check (cron)

  0) ❌ Exit
"""


def _ask_panel(ctx, what, input_fn):
    ctx.reload()
    count = len(ctx.registry)
    if not count:
        color_red("No panels found.")
        return None
    last = ctx.registry.next_index() - 1
    print(f"Existing panels: {count}")
    return ask_int(f"Which panel number do you want to {what}? (1-{last})", 1, input_fn)


def menu(ctx, input_fn=input):
    while True:
        print("========================================")
        print("       Multi 3x-ui Docker Manager       ")
        print("========================================")
        print(MENU)
        choice = input_fn("Select an option: ").strip()
        try:
            if choice == "1":
                provision.initial_install(ctx.settings, ctx.registry, ctx.store, ctx.runtime, ctx.server_ip, input_fn)
            elif choice == "2":
                provision.add_panel(ctx.settings, ctx.registry, ctx.store, ctx.runtime, ctx.server_ip, input_fn)
            elif choice == "3":
                idx = _ask_panel(ctx, "reset", input_fn)
                if idx is not None:
                    provision.reset_panel(ctx.settings, ctx.registry, ctx.store, ctx.runtime, idx, input_fn)
            elif choice == "4":
                provision.uninstall_all(ctx.settings, ctx.runtime, input_fn)
            elif choice == "5":
                show_status(ctx)
            elif choice == "6":
                idx = _ask_panel(ctx, "configure", input_fn)
                if idx is not None and _panel_or_error(ctx, idx) is not None:
                    current = ctx.store.record(idx).quota_gb
                    color_yellow(f"Current quota for panel #{idx}: {current} GB (0 = unlimited)")
                    set_quota(ctx, idx, ask_int("New monthly quota in GB (0 = unlimited)?", current, input_fn))
            elif choice == "7":
                idx = _ask_panel(ctx, "reset usage for", input_fn)
                if idx is not None:
                    reset_usage(ctx, idx, input_fn=input_fn)
            elif choice == "8":
                run_live(ctx.registry, ctx.store, ctx.runtime, ctx.settings, ctx.server_ip)
            elif choice == "9":
                toggle_cron(ctx, input_fn)
            elif choice == "0":
                return 0
            else:
                color_red("Invalid choice.")
                continue
        except XuiManagerError as e:
            log.error("%s", e)
            color_red(str(e))
        pause(input_fn)


# ---------- entry point ----------

def build_parser():
    ap = argparse.ArgumentParser(prog="xui-manager", description="Multi 3x-ui Docker manager with monthly quotas")
    ap.add_argument("--quota-cron", action="store_true",
                    help="run one quota check silently and exit (for cron)")
    sub = ap.add_subparsers(dest="command")

    sub.add_parser("menu", help="interactive menu (default)")
    sub.add_parser("install", help="initial install / rebuild")
    sub.add_parser("add", help="add a new panel")
    p = sub.add_parser("reset-panel", help="wipe a panel's DB and restart it")
    p.add_argument("panel", type=int)
    sub.add_parser("uninstall", help="remove all panels and data")
    sub.add_parser("status", help="show panels, quota and usage")
    p = sub.add_parser("set-quota", help="set a panel's monthly quota")
    p.add_argument("panel", type=int)
    p.add_argument("quota_gb", type=int, help="quota in GB, 0 = unlimited")
    p = sub.add_parser("reset-usage", help="reset a panel's usage counters")
    p.add_argument("panel", type=int)
    p.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    p.add_argument("--start", action="store_true", help="start the panel if it is stopped")
    sub.add_parser("check", help="run one quota check with debug output")
    sub.add_parser("monitor", help="live quota monitor")
    p = sub.add_parser("cron", help="manage the automatic quota check")
    p.add_argument("action", choices=["enable", "disable", "status"])
    sub.add_parser("bot", help="run the Telegram admin console")
    return ap


def require_root():
    if hasattr(os, "geteuid") and os.geteuid() != 0:
        color_red("Please run this as root (sudo -i && xui-manager)")
        return False
    return True


def dispatch(ctx, args):
    cmd = args.command or "menu"
    if cmd == "menu":
        return menu(ctx)
    if cmd == "install":
        provision.initial_install(ctx.settings, ctx.registry, ctx.store, ctx.runtime, ctx.server_ip)
        return 0
    if cmd == "add":
        return 0 if provision.add_panel(ctx.settings, ctx.registry, ctx.store, ctx.runtime, ctx.server_ip) else 1
    if cmd == "reset-panel":
        return 0 if provision.reset_panel(ctx.settings, ctx.registry, ctx.store, ctx.runtime, args.panel) else 1
    if cmd == "uninstall":
        return 0 if provision.uninstall_all(ctx.settings, ctx.runtime) else 1
    if cmd == "status":
        return show_status(ctx)
    if cmd == "set-quota":
        return set_quota(ctx, args.panel, args.quota_gb)
    if cmd == "reset-usage":
        return reset_usage(ctx, args.panel, assume_yes=args.yes, start=args.start)
    if cmd == "check":
        return quota_check(ctx)
    if cmd == "monitor":
        run_live(ctx.registry, ctx.store, ctx.runtime, ctx.settings, ctx.server_ip)
        return 0
    if cmd == "cron":
        return cron_command(ctx, args.action)
    if cmd == "bot":
        return run_bot_command(ctx)
    return 2


def main(argv=None):
    args = build_parser().parse_args(argv)
    if not require_root():
        return 1

    settings = Settings.from_env()
    # the console only shows warnings (quota alerts, failures); the log file gets everything
    setup_logging(settings, logging.WARNING)
    ctx = Context(settings)

    try:
        if args.quota_cron:
            return quota_cron(ctx)
        return dispatch(ctx, args)
    except XuiManagerError as e:
        log.error("%s", e)
        return 1
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
