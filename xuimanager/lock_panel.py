# -*- coding: utf-8 -*-
import logging
from datetime import datetime

import requests

log = logging.getLogger("xuimanager.lock_panel")

TELEGRAM_API = "https://api.telegram.org"


def send_telegram_message(settings, text):
    """Best effort; a delivery failure is logged and forgotten."""
    if not settings.bot_token or not settings.admin_id:
        return False
    try:
        r = requests.post(f"{TELEGRAM_API}/bot{settings.bot_token}/sendMessage",
                          data={"chat_id": settings.admin_id, "text": text, "parse_mode": "Markdown"},
                          timeout=10)
        r.raise_for_status()
        return True
    except requests.RequestException as e:
        log.warning("Failed to send telegram message: %s", e)
        return False


def stop_panel(panel, runtime, settings, used_gb, quota_gb) -> bool:
    """
    Stop an over-quota panel. Stopping a stopped container is a no-op.
    A failed stop is not retried here; the next sweep sees the same usage
    and tries again.
    """
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log.warning("%s Panel #%s exceeded quota: used ~%.2f GB / quota %s GB. Stopping container %s.",
                now, panel.index, used_gb, quota_gb, panel.container)

    ok = runtime.stop(panel.container)
    if ok:
        log.info("Panel #%s (%s) stopped (reason=quota)", panel.index, panel.container)
        status = "✅ stopped"
    else:
        log.error("Panel #%s: failed to stop %s, will retry on next check", panel.index, panel.container)
        status = "❌ stop failed, retrying next check"

    send_telegram_message(
        settings,
        f"⛔ *Panel #{panel.index} over quota*\n"
        f"Used: `{used_gb:.2f} GB` / `{quota_gb} GB`\n"
        f"Container `{panel.container}`: {status}\n"
        f"🕒 {now}",
    )
    return ok
