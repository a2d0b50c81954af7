import logging
import sys

from cmdbot.cli import setup_logging
from cmdbot.core import DiscordBot
from config.settings import settings

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point for the Discord bot."""
    setup_logging(settings.log_level)
    try:
        logger.info("Initializing Discord bot...")
        bot = DiscordBot()
        bot.run()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
