# -*- coding: utf-8 -*-
"""
Status rendering shared by the terminal views and the Telegram console.
"""

from typing import List

from xuimanager.units import percent_used

PROGRESS_BAR_WIDTH = 20
PAGE_SIZE = 10

STATUS_ROW = " {:<4} │ {:<22} │ {:<12} │ {:<16} │ {:<10}"
LIVE_ROW = " {:<4} │ {:<22} │ {:<14} │ {:<18} │ {:<12} │ {:<8}"
RULE = "─" * 80


def quota_text(quota_gb: int, short=False) -> str:
    if quota_gb == 0:
        return "♾️  unltd" if short else "♾️  unlimited"
    return f"{quota_gb} GB"


def used_text(record) -> str:
    if not record.unlimited:
        pct = percent_used(record.used_bytes, record.quota_gb)
        return f"{record.used_gb:.2f} GB ({pct:.1f}%)"
    return f"{record.used_gb:.2f} GB"


def make_progress_bar(pct: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    pct = max(0.0, min(100.0, pct))
    filled = int(round((pct / 100.0) * width))
    return "▮" * filled + "▯" * (width - filled)


def status_header() -> List[str]:
    return [
        "📊 Panels summary",
        RULE,
        STATUS_ROW.format("ID", "URL", "Quota", "Used", "Status"),
        RULE,
    ]


def status_row(panel, record, running: bool, server_ip: str) -> str:
    return STATUS_ROW.format(
        f"#{panel.index}",
        panel.url(server_ip),
        quota_text(record.quota_gb),
        used_text(record),
        "✅ RUNNING" if running else "⛔ STOPPED",
    )


def live_header() -> List[str]:
    return [
        LIVE_ROW.format("ID", "URL", "NetIO", "Used", "Quota", "Status"),
        RULE,
    ]


def live_row(panel, record, running: bool, net_io, server_ip: str) -> str:
    return LIVE_ROW.format(
        f"#{panel.index}",
        panel.url(server_ip),
        net_io or "-",
        used_text(record),
        quota_text(record.quota_gb, short=True),
        "✅ RUN" if running else "⛔ STOP",
    )


def format_panel_block(panel, record, running: bool, server_ip: str) -> str:
    """Multi-line entry for the Telegram report."""
    if not record.unlimited:
        pct = percent_used(record.used_bytes, record.quota_gb)
        bar = make_progress_bar(pct)
        usage = f"{record.used_gb:.2f} GB / {record.quota_gb} GB ({pct:.1f}%)"
    else:
        bar = "—" * PROGRESS_BAR_WIDTH
        usage = "♾ unlimited"
    status = "✅" if running else "⛔"
    return (
        f"🧷 *Panel #{panel.index}* {status}\n"
        f"🌐 {panel.url(server_ip)}\n"
        f"📊 Used: {usage}\n"
        f"▒{bar}▒\n"
    )


def page_bounds(total: int, page: int, page_size: int = PAGE_SIZE):
    total_pages = max(1, (total + page_size - 1) // page_size)
    page = max(0, min(page, total_pages - 1))
    start = page * page_size
    return page, total_pages, start, min(start + page_size, total)
