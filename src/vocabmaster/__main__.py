"""Main entry point for the lesson bot."""
import logging

from vocabmaster.app import VocabMasterBot
from vocabmaster.config import ensure_directories
from vocabmaster.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the bot."""
    ensure_directories()
    setup_logging("Starting VocabMaster lesson bot ...")

    logger.info("Starting bot...")
    bot = VocabMasterBot()
    bot.run()
    logger.info("Bot stopped")


if __name__ == "__main__":
    main()
