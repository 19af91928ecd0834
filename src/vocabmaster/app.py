"""Main application entry point."""
import asyncio
import logging
import signal
from typing import Optional
from warnings import filterwarnings
from telegram.warnings import PTBUserWarning

# Suppress the warning about CallbackQueryHandler and per_message
filterwarnings(action="ignore", message=r".*CallbackQueryHandler", category=PTBUserWarning)

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ConversationHandler,
)

from vocabmaster.config import settings
from vocabmaster.monitoring import start_monitoring
from vocabmaster.services.lesson_client import LessonClient
from vocabmaster.bot import (
    handle_start,
    handle_callback,
    handle_lesson_command,
    handle_lesson_callback,
    MAIN_MENU,
    LESSON,
)


def build_conversation_handler() -> ConversationHandler:
    """Create the conversation handler routing commands and button presses."""
    return ConversationHandler(
        entry_points=[
            CommandHandler("start", handle_start),
            CommandHandler("lesson", handle_lesson_command),
        ],
        states={
            MAIN_MENU: [
                CallbackQueryHandler(handle_callback),
            ],
            LESSON: [
                CallbackQueryHandler(handle_lesson_callback, pattern=r"^lesson_"),
                CallbackQueryHandler(handle_callback),
            ],
        },
        fallbacks=[
            CommandHandler("start", handle_start),
            CommandHandler("lesson", handle_lesson_command),
        ],
        per_message=False,
    )


class VocabMasterBot:
    """Main application class."""

    def __init__(self):
        """Initialize the application."""
        self.application: Optional[Application] = None
        self.lesson_client: Optional[LessonClient] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    async def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        try:
            self.lesson_client = LessonClient()
            self.logger.info(f"Lesson client created for {settings.api.base_url}")

            # Create application
            self.application = Application.builder().token(settings.bot.require_token()).build()
            self.application.bot_data["lesson_client"] = self.lesson_client
            self.application.add_handler(build_conversation_handler())
            self.logger.info("Handlers added")

            if settings.monitoring.enabled:
                start_monitoring(settings.monitoring.port)
                self.logger.info(f"Metrics exported on port {settings.monitoring.port}")

            # Start application
            await self.application.initialize()
            await self.application.start()
            await self.application.updater.start_polling()
            self.logger.info("Application started")

            self.running = True

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            await self._shutdown()
            raise

    async def stop(self) -> None:
        """Stop the application."""
        if not self.running:
            return

        try:
            await self._shutdown()
        except Exception as e:
            self.logger.error("Error while stopping application: %s", str(e))
            self.application = None
            self.lesson_client = None
            raise
        finally:
            self.running = False

    async def _shutdown(self) -> None:
        if self.application:
            if self.application.updater and self.application.updater.running:
                await self.application.updater.stop()
            if self.application.running:
                await self.application.stop()
            await self.application.shutdown()
            self.application = None
            self.logger.info("Application stopped")

        if self.lesson_client:
            await self.lesson_client.aclose()
            self.lesson_client = None
            self.logger.info("Lesson client closed")

    def run(self) -> None:
        """Run the application until interrupted."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, loop.stop)

        try:
            loop.run_until_complete(self.start())
            loop.run_forever()
        except KeyboardInterrupt:
            self.logger.info("Received keyboard interrupt")
        finally:
            loop.run_until_complete(self.stop())
            loop.close()

