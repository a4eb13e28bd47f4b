# -*- coding: utf-8 -*-
"""
Telegram admin console for the panels (python-telegram-bot v20+).

Only XUI_ADMIN_ID may use it. Commands:
  /start, /menu     main menu
  /report           paginated usage report
  /cancel           leave a running conversation
"""

import logging
from typing import Tuple

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import (
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    ConversationHandler,
    MessageHandler,
    filters,
)

from xuimanager import reporting
from xuimanager.errors import XuiManagerError
from xuimanager.provision import reset_panel_usage
from xuimanager.quota_monitor import Outcome, run_sweep

log = logging.getLogger("xuimanager.bot")

# conversation states
ASK_QUOTA_PANEL, ASK_QUOTA_VALUE = range(2)
ASK_RESET_PANEL, ASK_RESET_CONFIRM = range(2, 4)

main_menu_keyboard = InlineKeyboardMarkup([
    [InlineKeyboardButton("📋 Status", callback_data="rep:page=0")],
    [
        InlineKeyboardButton("🎯 Set quota", callback_data="set_quota"),
        InlineKeyboardButton("🔁 Reset usage", callback_data="reset_usage"),
    ],
    [InlineKeyboardButton("🧮 Check now", callback_data="check_now")],
])


def _ctx(context: ContextTypes.DEFAULT_TYPE):
    return context.bot_data["ctx"]


def is_admin(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    user = update.effective_user
    return user is not None and user.id == _ctx(context).settings.admin_id


def get_reply_func(update: Update):
    """reply_text of the message or of the message behind a callback query."""
    if update.message:
        return update.message.reply_text
    if update.callback_query and update.callback_query.message:
        return update.callback_query.message.reply_text
    return None


def build_report_page(ctx, page: int) -> Tuple[str, InlineKeyboardMarkup]:
    ctx.reload()
    panels = ctx.registry.panels()
    page, total_pages, start, end = reporting.page_bounds(len(panels), page)

    chunk = panels[start:end]
    if not chunk:
        body = "➖ No panels to show."
    else:
        body = "\n".join(
            reporting.format_panel_block(p, ctx.store.record(p.index), ctx.runtime.is_running(p.container),
                                         ctx.server_ip)
            for p in chunk
        )
    header = f"📄 Panels report\nPage {page + 1} of {total_pages} | Panels: {len(panels)}\n\n"

    kb = InlineKeyboardMarkup([
        [
            InlineKeyboardButton("⬅️ Prev", callback_data=f"rep:page={max(0, page - 1)}"),
            InlineKeyboardButton("➡️ Next", callback_data=f"rep:page={min(total_pages - 1, page + 1)}"),
        ],
        [InlineKeyboardButton("🔄 Refresh", callback_data=f"rep:refresh={page}")],
    ])
    return header + body, kb


def parse_report_callback(data: str):
    """'rep:page=2' -> (False, 2), 'rep:refresh=0' -> (True, 0)."""
    try:
        _, tail = data.split(":", 1)
        action, num = tail.split("=", 1)
        return action == "refresh", max(0, int(num))
    except ValueError:
        return False, 0


def summarize_sweep(results) -> str:
    if not results:
        return "No panels defined."
    icons = {
        Outcome.SKIPPED: "⚠️ skipped (not running / no NetIO)",
        Outcome.BASELINED: "🟢 baseline set",
        Outcome.RESET: "🔄 counters reset, baseline updated",
        Outcome.ACCUMULATED: "📊 updated",
        Outcome.ENFORCED: "⛔ over quota, stopped",
        Outcome.ENFORCE_FAILED: "❌ over quota, stop failed",
    }
    return "\n".join(f"Panel #{r.index}: {icons[r.outcome]}" for r in results)


# ---------- handlers ----------

async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    reply = get_reply_func(update)
    if not is_admin(update, context):
        if reply:
            await reply("⛔ Access denied.")
        return
    await reply("📲 Multi 3x-ui manager:", reply_markup=main_menu_keyboard)


async def report_entry(update: Update, context: ContextTypes.DEFAULT_TYPE):
    if not is_admin(update, context):
        return
    text, kb = build_report_page(_ctx(context), 0)
    await update.message.reply_text(text, reply_markup=kb, parse_mode="Markdown")


async def report_pagination_cb(update: Update, context: ContextTypes.DEFAULT_TYPE):
    q = update.callback_query
    await q.answer()
    if not is_admin(update, context):
        return
    ctx = _ctx(context)
    refresh, page = parse_report_callback(q.data or "")
    if refresh:
        try:
            run_sweep(ctx.registry, ctx.store, ctx.runtime, ctx.settings)
        except XuiManagerError as e:
            log.error("sweep before refresh failed: %s", e)
    text, kb = build_report_page(ctx, page)
    await q.edit_message_text(text, reply_markup=kb, parse_mode="Markdown")


async def check_now(update: Update, context: ContextTypes.DEFAULT_TYPE):
    q = update.callback_query
    await q.answer()
    if not is_admin(update, context):
        return
    ctx = _ctx(context)
    try:
        results = run_sweep(ctx.registry, ctx.store, ctx.runtime, ctx.settings)
    except XuiManagerError as e:
        log.error("check from bot failed: %s", e)
        await q.message.reply_text(f"❌ Check failed:\n`{e}`", parse_mode="Markdown")
        return
    await q.message.reply_text("🧮 Quota check\n\n" + summarize_sweep(results))


async def _read_panel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    text = (update.message.text or "").strip()
    ctx = _ctx(context)
    ctx.reload()
    if not text.isdigit() or int(text) not in ctx.registry:
        await update.message.reply_text("❌ Invalid panel number. Try again or /cancel.")
        return None
    return int(text)


# set quota flow

async def ask_quota_panel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.callback_query.answer()
    if not is_admin(update, context):
        return ConversationHandler.END
    await update.callback_query.message.reply_text("🎯 Which panel number?")
    return ASK_QUOTA_PANEL


async def handle_quota_panel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    idx = await _read_panel(update, context)
    if idx is None:
        return ASK_QUOTA_PANEL
    context.user_data["quota_panel"] = idx
    current = _ctx(context).store.record(idx).quota_gb
    await update.message.reply_text(
        f"Current quota for panel #{idx}: {reporting.quota_text(current)}\n"
        f"New monthly quota in GB (0 = unlimited)?")
    return ASK_QUOTA_VALUE


async def handle_quota_value(update: Update, context: ContextTypes.DEFAULT_TYPE):
    text = (update.message.text or "").strip()
    if not text.isdigit():
        await update.message.reply_text("❌ Please enter a whole number of GB.")
        return ASK_QUOTA_VALUE
    idx = context.user_data.pop("quota_panel", None)
    if idx is None:
        return ConversationHandler.END
    _ctx(context).store.set_quota(idx, int(text))
    await update.message.reply_text(f"✅ Quota for panel #{idx} set to {int(text)} GB.")
    return ConversationHandler.END


# reset usage flow

async def ask_reset_panel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    await update.callback_query.answer()
    if not is_admin(update, context):
        return ConversationHandler.END
    await update.callback_query.message.reply_text("🔁 Reset usage of which panel number?")
    return ASK_RESET_PANEL


async def handle_reset_panel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    idx = await _read_panel(update, context)
    if idx is None:
        return ASK_RESET_PANEL
    kb = InlineKeyboardMarkup([[
        InlineKeyboardButton("✅ Yes", callback_data=f"reset_yes:{idx}"),
        InlineKeyboardButton("❌ No", callback_data="reset_no"),
    ]])
    await update.message.reply_text(f"Reset usage for panel #{idx}?", reply_markup=kb)
    return ASK_RESET_CONFIRM


async def handle_reset_confirm(update: Update, context: ContextTypes.DEFAULT_TYPE):
    q = update.callback_query
    await q.answer()
    if not is_admin(update, context):
        return ConversationHandler.END
    if q.data == "reset_no":
        await q.edit_message_text("Aborted.")
        return ConversationHandler.END

    ctx = _ctx(context)
    idx = int(q.data.split(":", 1)[1])
    panel = ctx.registry.get(idx)
    if panel is None:
        await q.edit_message_text("❌ Panel not found.")
        return ConversationHandler.END

    stopped = reset_panel_usage(panel, ctx.store, ctx.runtime)
    await q.edit_message_text(f"✅ Usage for panel #{idx} reset to 0.")
    if stopped:
        kb = InlineKeyboardMarkup([[
            InlineKeyboardButton("▶️ Start", callback_data=f"start_panel:{idx}"),
            InlineKeyboardButton("Keep stopped", callback_data="keep_stopped"),
        ]])
        await q.message.reply_text(f"Panel #{idx} ({panel.container}) is STOPPED. Start it now?", reply_markup=kb)
    return ConversationHandler.END


async def handle_start_panel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    q = update.callback_query
    await q.answer()
    if not is_admin(update, context):
        return
    if q.data == "keep_stopped":
        await q.edit_message_text("Panel remains stopped.")
        return
    ctx = _ctx(context)
    idx = int(q.data.split(":", 1)[1])
    panel = ctx.registry.load().get(idx)
    if panel is not None and ctx.runtime.start(panel.container):
        await q.edit_message_text(f"✅ Panel #{idx} started.")
    else:
        await q.edit_message_text(f"❌ Failed to start panel #{idx}.")


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE):
    context.user_data.clear()
    await update.message.reply_text("Cancelled.")
    return ConversationHandler.END


def build_app(ctx):
    app = ApplicationBuilder().token(ctx.settings.bot_token).build()
    app.bot_data["ctx"] = ctx

    quota_conv = ConversationHandler(
        entry_points=[CallbackQueryHandler(ask_quota_panel, pattern="^set_quota$")],
        states={
            ASK_QUOTA_PANEL: [MessageHandler(filters.TEXT & ~filters.COMMAND, handle_quota_panel)],
            ASK_QUOTA_VALUE: [MessageHandler(filters.TEXT & ~filters.COMMAND, handle_quota_value)],
        },
        fallbacks=[CommandHandler("cancel", cancel)],
    )
    reset_conv = ConversationHandler(
        entry_points=[CallbackQueryHandler(ask_reset_panel, pattern="^reset_usage$")],
        states={
            ASK_RESET_PANEL: [MessageHandler(filters.TEXT & ~filters.COMMAND, handle_reset_panel)],
            ASK_RESET_CONFIRM: [CallbackQueryHandler(handle_reset_confirm, pattern=r"^reset_(yes:\d+|no)$")],
        },
        fallbacks=[CommandHandler("cancel", cancel)],
    )

    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("menu", start))
    app.add_handler(CommandHandler("report", report_entry))
    app.add_handler(quota_conv)
    app.add_handler(reset_conv)
    app.add_handler(CallbackQueryHandler(report_pagination_cb, pattern=r"^rep:(page|refresh)=\d+$"))
    app.add_handler(CallbackQueryHandler(check_now, pattern="^check_now$"))
    app.add_handler(CallbackQueryHandler(handle_start_panel, pattern=r"^(start_panel:\d+|keep_stopped)$"))
    return app


def run_bot(ctx):
    log.info("starting telegram console for admin %s", ctx.settings.admin_id)
    app = build_app(ctx)
    app.run_polling(allowed_updates=["message", "callback_query"])
