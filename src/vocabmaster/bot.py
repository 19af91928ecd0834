"""Telegram host for lesson sessions."""
import logging
from html import escape
from pathlib import Path
from typing import List, Optional, Tuple

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Message, Update
from telegram.error import TelegramError
from telegram.ext import CallbackContext

from vocabmaster.config import settings
from vocabmaster.models.lesson_models import LessonPhase, SessionSnapshot
from vocabmaster.services.lesson_client import LessonClient
from vocabmaster.services.session_controller import LessonSessionController
from vocabmaster.services.speech import AudioCallback, GTTSSpeechPlayer

# Get logger for this module
logger = logging.getLogger(__name__)

# Conversation states
MAIN_MENU, LESSON = range(2)

# Button texts
MENU = "🏠 Menu"
DASHBOARD = "📚 Dashboard"
KNOW_THIS_WORD = "✔️ I Know This Word"
PRONOUNCE = "🔊 Pronunciation"
BACK = "← Back"
BACK_TO_DASHBOARD = "Back to Dashboard ➡️"

WELCOME_MESSAGE = (
    "Welcome to VocabMaster, {name}! 👋\n\n"
    "Master vocabulary 3x faster.\n"
    "Learn new words through interactive quizzes and personalized learning paths.\n\n"
    "Start a lesson with /lesson [unit id]."
)
DASHBOARD_MESSAGE = (
    "📚 Dashboard\n\n"
    "Pick your next unit and start it with /lesson [unit id]."
)
LOADING_MESSAGE = "⏳ Loading lesson..."
NOT_FOUND_MESSAGE = "Lesson not found"
NO_UNIT_MESSAGE = "Please tell me which unit to open: /lesson [unit id]"
NO_LESSON_MESSAGE = "There is no active lesson. Start one with /lesson [unit id]."

CALLBACK_PREFIX = "lesson_"
CB_KNOWN = "lesson_known"
CB_ANSWER = "lesson_answer_"
CB_PRONOUNCE = "lesson_pronounce"
CB_COMPLETE = "lesson_complete"
CB_BACK = "lesson_back"

PROGRESS_BAR_WIDTH = 10

KB_MENU = [[InlineKeyboardButton(DASHBOARD, callback_data="dashboard")]]
KB_DASHBOARD = [[InlineKeyboardButton(MENU, callback_data="back_to_menu")]]


async def log_received(update: Update, context_type: str) -> None:
    """Log message."""
    txt = ""
    if update.callback_query:
        txt = f" {update.callback_query.data}"
    elif update.message:
        txt = f" {update.message.text}"
    user = update.effective_user
    logger.info(f"Received @{context_type:8} from user {user.username if user else None} ({user.id if user else None}){txt}")


def progress_bar(fraction: float, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Text progress bar for a fraction between 0 and 1."""
    filled = round(fraction * width)
    return "▓" * filled + "░" * (width - filled) + f" {round(fraction * 100)}%"


def render_snapshot(snapshot: SessionSnapshot) -> Tuple[str, InlineKeyboardMarkup]:
    """Render a lesson session as message text and keyboard."""
    header = (
        f"<b>{escape(snapshot.title)}</b>  ·  {snapshot.phase.label}\n"
        f"{progress_bar(snapshot.progress)}\n\n"
    )
    word = snapshot.current_word
    keyboard: List[List[InlineKeyboardButton]] = []

    if snapshot.phase is LessonPhase.LEARN and word:
        body = f"<b>{escape(word.word)}</b>\n"
        if word.pronunciation:
            body += f"<i>{escape(word.pronunciation)}</i>\n"
        body += (
            f"\n📖 Definition\n<b>{escape(word.definition)}</b>\n"
            f"\n💬 Example\n{escape(word.example_sentence)}\n"
            f"\n🏷️ Part of Speech\n<b>{escape(word.part_of_speech)}</b>"
        )
        keyboard.append([InlineKeyboardButton(PRONOUNCE, callback_data=CB_PRONOUNCE)])
        keyboard.append([InlineKeyboardButton(KNOW_THIS_WORD, callback_data=CB_KNOWN)])
    elif snapshot.phase is LessonPhase.PRACTICE and word:
        body = f'What does "<b>{escape(word.word)}</b>" mean?'
        for i, option in enumerate(word.practice_options()):
            keyboard.append([InlineKeyboardButton(option, callback_data=f"{CB_ANSWER}{i}")])
    else:
        body = (
            "✅ <b>Lesson Complete!</b>\n\n"
            f"You've learned {snapshot.learned_count} words. Keep practicing to master them all."
        )
        keyboard.append([InlineKeyboardButton(BACK_TO_DASHBOARD, callback_data=CB_COMPLETE)])

    keyboard.append([InlineKeyboardButton(BACK, callback_data=CB_BACK)])
    return header + body, InlineKeyboardMarkup(keyboard)


class LessonView:
    """Subscriber that keeps the lesson message in sync with the session."""

    def __init__(self, message: Optional[Message] = None):
        self.message = message
        self.snapshot: Optional[SessionSnapshot] = None
        self.dirty = False

    def on_change(self, snapshot: SessionSnapshot) -> None:
        self.snapshot = snapshot
        self.dirty = True

    async def flush(self) -> None:
        """Edit the lesson message if the session changed since the last flush."""
        if not self.dirty or self.snapshot is None or self.message is None:
            return
        self.dirty = False
        text, reply_markup = render_snapshot(self.snapshot)
        await self.show(text, reply_markup)

    async def show(self, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None) -> None:
        if self.message is None:
            return
        try:
            await self.message.edit_text(text, reply_markup=reply_markup, parse_mode="HTML")
        except TelegramError as e:
            logger.warning(f"Error updating lesson message: {e}")


class TelegramNavigator:
    """Navigator that turns navigation signals into message edits."""

    def __init__(self, view: LessonView, name: str = ""):
        self.view = view
        self.name = name

    async def go_back(self) -> None:
        await self.view.show(WELCOME_MESSAGE.format(name=escape(self.name)), InlineKeyboardMarkup(KB_MENU))

    async def go_to_dashboard(self) -> None:
        await self.view.show(DASHBOARD_MESSAGE, InlineKeyboardMarkup(KB_DASHBOARD))


def make_audio_sender(context: CallbackContext, chat_id: int) -> AudioCallback:
    """Build a callback sending a pronunciation file to a chat."""

    async def send_audio(path: Path) -> None:
        with open(path, "rb") as audio:
            await context.bot.send_audio(chat_id=chat_id, audio=audio, title=path.stem)

    return send_audio


def get_lesson_client(context: CallbackContext) -> LessonClient:
    """Shared lesson client of the application."""
    client = context.bot_data.get("lesson_client")
    if client is None:
        client = LessonClient()
        context.bot_data["lesson_client"] = client
    return client


def close_controller(context: CallbackContext) -> None:
    """Tear down the chat's current lesson controller, if any."""
    controller: Optional[LessonSessionController] = context.user_data.pop("lesson_controller", None)
    context.user_data.pop("lesson_view", None)
    context.user_data.pop("lesson_unit_id", None)
    if controller is not None:
        controller.close()


async def handle_start(update: Update, context: CallbackContext) -> int:
    """Show the welcome message."""
    await log_received(update, "start")
    close_controller(context)
    name = update.effective_user.first_name if update.effective_user else ""
    message = WELCOME_MESSAGE.format(name=name)
    reply_markup = InlineKeyboardMarkup(KB_MENU)

    if update.callback_query:
        await update.callback_query.edit_message_text(message, reply_markup=reply_markup)
    else:
        await update.message.reply_text(message, reply_markup=reply_markup)
    return MAIN_MENU


async def show_dashboard(update: Update, context: CallbackContext) -> int:
    """Show the dashboard."""
    await update.callback_query.edit_message_text(DASHBOARD_MESSAGE, reply_markup=InlineKeyboardMarkup(KB_DASHBOARD))
    return MAIN_MENU


async def handle_callback(update: Update, context: CallbackContext) -> int:
    """Handle menu callback queries."""
    query = update.callback_query
    if query.data.startswith(CALLBACK_PREFIX):
        return await handle_lesson_callback(update, context)

    await query.answer()
    await log_received(update, "callback")

    if query.data == "back_to_menu":
        return await handle_start(update, context)
    elif query.data == "dashboard":
        return await show_dashboard(update, context)

    return MAIN_MENU


async def handle_lesson_command(update: Update, context: CallbackContext) -> int:
    """Open the lesson of the unit given as command argument."""
    await log_received(update, "lesson")
    unit_id = context.args[0] if context.args else None
    if not unit_id:
        await update.message.reply_text(NO_UNIT_MESSAGE)
        return MAIN_MENU

    close_controller(context)

    message = await update.message.reply_text(LOADING_MESSAGE)
    view = LessonView(message)
    name = update.effective_user.first_name if update.effective_user else ""
    speech = None
    if settings.speech.enabled:
        speech = GTTSSpeechPlayer(on_audio=make_audio_sender(context, update.effective_chat.id))
    controller = LessonSessionController(
        get_lesson_client(context),
        TelegramNavigator(view, name),
        speech=speech,
        strict=settings.session.strict,
    )
    controller.subscribe(view.on_change)
    context.user_data["lesson_controller"] = controller
    context.user_data["lesson_view"] = view
    context.user_data["lesson_unit_id"] = unit_id

    lesson = await controller.load(unit_id)
    if controller.closed:
        return LESSON
    if lesson is None:
        close_controller(context)
        await view.show(NOT_FOUND_MESSAGE, InlineKeyboardMarkup(KB_DASHBOARD))
        return MAIN_MENU

    await view.flush()
    return LESSON


async def handle_lesson_callback(update: Update, context: CallbackContext) -> int:
    """Turn lesson button presses into session transitions."""
    query = update.callback_query
    await query.answer()
    await log_received(update, "learn")

    controller: Optional[LessonSessionController] = context.user_data.get("lesson_controller")
    view: Optional[LessonView] = context.user_data.get("lesson_view")
    if controller is None or view is None or not controller.is_loaded:
        await query.edit_message_text(NO_LESSON_MESSAGE, reply_markup=InlineKeyboardMarkup(KB_DASHBOARD))
        return MAIN_MENU

    view.message = query.message
    data = query.data

    if data == CB_KNOWN:
        controller.mark_current_word_learned()
    elif data.startswith(CB_ANSWER):
        word = controller.session.current_word
        option = None
        if word is not None:
            options = word.practice_options()
            try:
                option = options[int(data[len(CB_ANSWER):])]
            except (ValueError, IndexError):
                logger.warning(f"Unknown practice option: {data}")
        controller.record_practice_answer(option)
    elif data == CB_PRONOUNCE:
        controller.pronounce_current_word()
    elif data == CB_COMPLETE:
        unit_id = context.user_data.get("lesson_unit_id")
        await controller.complete_lesson(unit_id)
        if not controller.is_loaded:
            close_controller(context)
            return MAIN_MENU
    elif data == CB_BACK:
        await controller.go_back()
        close_controller(context)
        return MAIN_MENU
    else:
        logger.warning(f"Unknown lesson callback: {data}")

    await view.flush()
    return LESSON
