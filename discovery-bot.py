import os
import html
import logging

from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.constants import ParseMode
from telegram.error import TelegramError
from dotenv import load_dotenv
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from backend.db import SessionLocal
from backend.crud import get_public_hackathons
from backend.discovery import discover, count_by_status
from backend.schemas import FilterState, SORT_KEYS

load_dotenv()

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
logger = logging.getLogger(__name__)

LISTING_REFRESH_SECONDS = int(os.getenv("LISTING_REFRESH_SECONDS", "120"))
SEARCH_RESULT_LIMIT = int(os.getenv("SEARCH_RESULT_LIMIT", "5"))

STATUS_EMOJI = {"live": "🟢", "upcoming": "🗓️", "past": "🏁"}

SEARCH_HELP = (
    "<b>Search syntax</b>\n"
    "Plain words match title, description, organizer, location or a tag.\n"
    "Filters: <code>status:live</code> <code>category:AI/ML</code> "
    "<code>difficulty:beginner</code> <code>mode:online</code> "
    "<code>org:acme</code> <code>tag:nlp</code> <code>prize:&gt;10000</code>\n"
    "Example: <code>/search status:upcoming prize:&gt;=25000 climate</code>"
)


def format_hackathon_message(hackathon):
    """Format a hackathon as a Telegram message with HTML formatting."""
    emoji = STATUS_EMOJI.get(hackathon.status, "🎉")

    text = f"{emoji} <b>{html.escape(hackathon.title)}</b>\n\n"
    text += f"📅 <b>Duration:</b> {hackathon.start_date.strftime('%B %d')} - {hackathon.end_date.strftime('%B %d, %Y')}\n"
    text += f"🏢 <b>Organizer:</b> {html.escape(hackathon.organizer or 'Anonymous')}\n"
    text += f"📍 <b>Location:</b> {html.escape(hackathon.location or 'Virtual')}\n"
    text += f"✅ <b>Status:</b> {hackathon.status.capitalize()}\n"
    text += f"🗂️ <b>Category:</b> {html.escape(hackathon.category)}\n"

    if hackathon.mode:
        text += f"💻 <b>Mode:</b> {html.escape(hackathon.mode)}\n"
    if hackathon.difficulty:
        text += f"📈 <b>Difficulty:</b> {html.escape(hackathon.difficulty)}\n"
    if hackathon.prize_amount:
        text += f"🏆 <b>Prizes:</b> ${hackathon.prize_amount:,}\n"
    if hackathon.registrations:
        text += f"👥 <b>Registrations:</b> {hackathon.registrations:,}\n"

    if hackathon.tags:
        text += f"\n🏷️ <b>Tags:</b> {html.escape(', '.join(hackathon.tags[:5]))}\n"

    return text, hackathon.banner_url


def refresh_listing(application):
    """Reload the public listing from the database into bot_data."""
    db = SessionLocal()
    try:
        hackathons = get_public_hackathons(db)
    finally:
        db.close()

    application.bot_data["hackathons"] = hackathons
    logger.info(f"Refreshed hackathon listing: {len(hackathons)} hackathons")
    return hackathons


async def send_hackathons(bot, chat_id, hackathons):
    """Send one message per hackathon; a failed send does not stop the rest."""
    for hackathon in hackathons:
        try:
            text, photo_url = format_hackathon_message(hackathon)

            if photo_url:
                await bot.send_photo(
                    chat_id=chat_id,
                    photo=photo_url,
                    caption=text,
                    parse_mode=ParseMode.HTML
                )
            else:
                await bot.send_message(
                    chat_id=chat_id,
                    text=text,
                    parse_mode=ParseMode.HTML
                )
        except TelegramError as e:
            logger.error(f"Failed to send hackathon '{hackathon.title}' to chat {chat_id}: {e}")


def chat_sort(context: ContextTypes.DEFAULT_TYPE) -> str:
    return context.chat_data.get("sort_by", "latest")


async def run_search(update: Update, context: ContextTypes.DEFAULT_TYPE, state: FilterState):
    hackathons = context.bot_data.get("hackathons")
    if hackathons is None:
        hackathons = refresh_listing(context.application)

    result = discover(hackathons, state)
    filters_text = ", ".join(html.escape(f) for f in result.active_filters) or "none"

    if not result.total:
        await update.message.reply_text(
            f"❌ No hackathons match these filters.\n<b>Active filters:</b> {filters_text}",
            parse_mode=ParseMode.HTML
        )
        return

    shown = result.hackathons[:SEARCH_RESULT_LIMIT]
    await update.message.reply_text(
        f"🔍 Found <b>{result.total}</b> hackathon(s), showing {len(shown)} "
        f"sorted by <b>{state.sort_by}</b>.\n<b>Active filters:</b> {filters_text}",
        parse_mode=ParseMode.HTML
    )
    await send_hackathons(context.bot, update.effective_chat.id, shown)


# Command Handlers

async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    welcome_text = (
        "🎉 <b>Welcome to HackRadar Discovery!</b>\n\n"
        "Search live, upcoming and past hackathons with filters like "
        "<code>status:live</code> or <code>prize:&gt;10000</code>.\n\n"
        "Use /help to see all available commands!"
    )

    keyboard = [
        [InlineKeyboardButton("🔍 Search Hackathons", switch_inline_query_current_chat="/search ")],
    ]

    await update.message.reply_text(
        welcome_text,
        parse_mode=ParseMode.HTML,
        reply_markup=InlineKeyboardMarkup(keyboard)
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    help_text = (
        "📖 <b>HackRadar Discovery Commands</b>\n\n"
        "/search [query] - Search hackathons\n"
        "/live [query] - Only hackathons happening now\n"
        "/upcoming [query] - Only hackathons that have not started\n"
        f"/sort [{'|'.join(SORT_KEYS)}] - Change result order\n"
        "/stats - Count hackathons by status\n"
        "/help - Show this message\n\n"
        + SEARCH_HELP
    )
    await update.message.reply_text(help_text, parse_mode=ParseMode.HTML)


async def search_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /search command."""
    if not context.args:
        await update.message.reply_text(
            "❌ Please provide a search query.\n\n" + SEARCH_HELP,
            parse_mode=ParseMode.HTML
        )
        return

    state = FilterState(search_text=" ".join(context.args), sort_by=chat_sort(context))
    await run_search(update, context, state)


async def status_search(update: Update, context: ContextTypes.DEFAULT_TYPE, status: str):
    state = FilterState(
        search_text=" ".join(context.args or []),
        selected_statuses={status},
        sort_by=chat_sort(context),
    )
    await run_search(update, context, state)


async def live_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /live command."""
    await status_search(update, context, "live")


async def upcoming_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /upcoming command."""
    await status_search(update, context, "upcoming")


async def sort_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /sort command."""
    if not context.args or context.args[0].lower() not in SORT_KEYS:
        await update.message.reply_text(
            f"❌ Please choose one of: {', '.join(SORT_KEYS)}\n\n"
            f"Current order: {chat_sort(context)}"
        )
        return

    sort_by = context.args[0].lower()
    context.chat_data["sort_by"] = sort_by
    await update.message.reply_text(f"✅ Results will be sorted by <b>{sort_by}</b>.", parse_mode=ParseMode.HTML)


async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /stats command."""
    hackathons = context.bot_data.get("hackathons")
    if hackathons is None:
        hackathons = refresh_listing(context.application)

    counts = count_by_status(hackathons)
    await update.message.reply_text(
        f"📊 <b>{len(hackathons)}</b> hackathons listed\n"
        f"{STATUS_EMOJI['live']} {counts['live']} live\n"
        f"{STATUS_EMOJI['upcoming']} {counts['upcoming']} upcoming\n"
        f"{STATUS_EMOJI['past']} {counts['past']} past",
        parse_mode=ParseMode.HTML
    )


async def post_init(application: Application) -> None:
    """Load the listing and schedule refreshes after the application starts."""
    refresh_listing(application)

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        refresh_listing,
        'interval',
        seconds=LISTING_REFRESH_SECONDS,
        args=[application]
    )
    scheduler.start()
    logger.info(f"Background scheduler started (listing refresh every {LISTING_REFRESH_SECONDS}s)")


def main():
    """Start the bot."""
    token = os.getenv("TELEGRAM_TOKEN")
    if not token:
        raise RuntimeError("TELEGRAM_TOKEN is not set in the environment")

    application = Application.builder().token(token).post_init(post_init).build()

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("search", search_command))
    application.add_handler(CommandHandler("live", live_command))
    application.add_handler(CommandHandler("upcoming", upcoming_command))
    application.add_handler(CommandHandler("sort", sort_command))
    application.add_handler(CommandHandler("stats", stats_command))

    logger.info("Starting bot polling")
    # run_polling drives post_init and blocks until interrupted
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == '__main__':
    main()
