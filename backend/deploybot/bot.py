"""
Deploy queue Discord bot
discord.py 2.x, prefix commands
"""

import logging

import discord
from discord.ext import commands

from deploybot.config import BOT_NAME, BOT_VERSION, DeployBotSettings
from deploybot.core.health_server import HealthCheckServer
from shared.repositories.deploy_queue import DeployQueue

logger = logging.getLogger("deploybot")


class DeployBotClient(commands.Bot):
    """Discord client that owns the deploy queue for its whole lifetime"""

    def __init__(self, settings: DeployBotSettings):
        intents = discord.Intents.default()
        intents.message_content = True  # prefix commands
        intents.members = True  # display-name lookups for `deploy remove`

        super().__init__(
            command_prefix=commands.when_mentioned_or(settings.command_prefix),
            intents=intents,
            help_command=None,
        )

        self.settings = settings
        self.deploy_queue = DeployQueue()
        self.initial_extensions = ["deploybot.cogs.deploy"]
        self.health_server: HealthCheckServer | None = None
        if settings.health_enabled:
            self.health_server = HealthCheckServer(
                self, self.deploy_queue, host=settings.health_host, port=settings.health_port
            )

    async def setup_hook(self):
        """Load cogs and start the health server"""
        loaded = []
        failed = []

        for extension in self.initial_extensions:
            try:
                await self.load_extension(extension)
                loaded.append(extension.split(".")[-1])
            except Exception as e:
                failed.append(f"{extension.split('.')[-1]} ({e})")

        if loaded:
            logger.info(f"[green]Loaded cogs:[/green] {', '.join(loaded)}")
        if failed:
            logger.error(f"[red]Failed to load:[/red] {', '.join(failed)}")

        if self.health_server is not None:
            await self.health_server.start()

        logger.info("[yellow]Connecting to Discord...[/yellow]")

    async def on_ready(self):
        logger.info(
            f"[bold green]{BOT_NAME} {BOT_VERSION} ready:[/bold green] {self.user} "
            f"[dim](ID: {self.user.id if self.user else '?'})[/dim]"
        )
        logger.info(
            f"[cyan]Connected:[/cyan] {len(self.guilds)} guilds | discord.py {discord.__version__}"
        )

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        """Handle prefix command errors"""
        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.MissingRequiredArgument):
            await ctx.send(f"Missing argument: `{error.param.name}`")
            return

        logger.error(f"Command error: {error}", exc_info=error)
        await ctx.send("Something went wrong running that command")

    async def close(self):
        if self.health_server is not None:
            await self.health_server.stop()
        dropped = self.deploy_queue.clear()
        if dropped:
            logger.warning(f"Shutting down with {dropped} queued deploys")
        await super().close()
