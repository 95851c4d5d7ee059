"""
Deploy bot entrypoint
"""

import asyncio
import logging

from dotenv import load_dotenv
from pydantic import ValidationError

from deploybot.bot import DeployBotClient
from deploybot.config import ENV_FILE, get_settings
from deploybot.core.logging import setup_logging

logger = logging.getLogger("deploybot")


async def main() -> None:
    """Start the bot"""
    load_dotenv(dotenv_path=ENV_FILE, encoding="utf-8")

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error("[bold red]Invalid configuration[/bold red]")
        logger.error(f"Set DISCORD_BOT_TOKEN in {ENV_FILE} or the environment: {e}")
        return

    setup_logging(settings.log_level)

    async with DeployBotClient(settings) as bot:
        try:
            await bot.start(settings.discord_bot_token)
        except (KeyboardInterrupt, asyncio.CancelledError):
            if not bot.is_closed():
                await bot.close()


def cli() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("[yellow]Bot stopped[/yellow]")
    except Exception as e:
        logger.error(f"[bold red]Bot crashed:[/bold red] {e}", exc_info=e)


if __name__ == "__main__":
    cli()
