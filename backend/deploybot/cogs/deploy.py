"""Deploy queue commands: $deploy

    $deploy add [what]      Join the queue, optionally saying what you deploy
    $deploy done            Finish your turn (alias: complete)
    $deploy current         Who is deploying right now (aliases: who, whos-deploying)
    $deploy next            Who is up next (alias: whos-next)
    $deploy remove <name>   Remove a user from the queue, `me` for yourself (alias: kick)
    $deploy list            List the queue
    $deploy dump            Dump the raw queue (alias: debug)
"""

import json
import logging
import random
from datetime import timedelta

import discord
from discord.ext import commands

from shared.models.deploy_queue import Holder, QueueEntry
from shared.repositories.deploy_queue import DeployQueue
from shared.turn_notifier import StillWorking, TurnNotifier

logger = logging.getLogger(__name__)

REACTIONS = [":smart:", ":rocket:", ":hyperclap:", ":confetti_ball:"]

HELP_TEXT = (
    "`deploy add _metadata_`: Add yourself to the deploy queue. I'll give you a heads up when "
    "it's your turn. Anything after `add` will be included in messages about what you're "
    "deploying. Something like `deploy add my_api`.\n"
    "`deploy done`: Say this when you're done and I'll tell the next person. "
    "Or you could say `deploy complete`.\n"
    "`deploy remove _user_`: Removes a user completely from the queue. Use `remove me` to "
    "remove yourself. Also works with `deploy kick _user_`.\n"
    "`deploy current`: Who's deploying right now. Also works with `deploy who`.\n"
    "`deploy next`: Sneak peek at the next person in line. Also works with `deploy whos-next`.\n"
    "`deploy list`: Lists the queue.\n"
    "`deploy debug`: Kinda like `deploy list`.\n"
)


class DeployQueueCog(commands.Cog):
    """Turn-taking for the shared deploy environment"""

    def __init__(self, bot: commands.Bot, queue: DeployQueue, idle_timeout: timedelta):
        self.bot = bot
        self.queue = queue
        self.idle_timeout = idle_timeout
        self.notifier = TurnNotifier(queue, self._ping_inactive)

    async def cog_unload(self) -> None:
        await self.notifier.aclose()

    # --- helpers ---

    def _display_name(self, holder: Holder, guild: discord.Guild | None = None) -> str:
        if guild is not None:
            member = guild.get_member(holder)  # type: ignore[arg-type]
            if member is not None:
                return member.display_name
        user = self.bot.get_user(holder)  # type: ignore[arg-type]
        if user is not None:
            return user.display_name
        return str(holder)

    def _cycle_timeout(self, holder: Holder) -> None:
        self.notifier.arm(holder, self.idle_timeout)

    async def _direct_message(self, holder: Holder, content: str) -> None:
        user = self.bot.get_user(holder)  # type: ignore[arg-type]
        try:
            if user is None:
                user = await self.bot.fetch_user(holder)  # type: ignore[arg-type]
            await user.send(content)
        except discord.HTTPException as e:
            logger.warning(f"Could not DM user {holder}: {e}")

    async def _notify_turn(self, entry: QueueEntry) -> None:
        # Arm before awaiting the DM; commands issued meanwhile must win.
        self._cycle_timeout(entry.holder)
        await self._direct_message(entry.holder, "Hey, it's your turn to deploy!")

    async def _ping_inactive(self, event: StillWorking) -> None:
        await self._direct_message(event.holder, "Are you still deploying?")

    # --- commands ---

    @commands.group(name="deploy", invoke_without_command=True)
    async def deploy(self, ctx: commands.Context) -> None:
        """Deploy queue commands"""
        await ctx.send(HELP_TEXT)

    @deploy.command(name="help")
    async def deploy_help(self, ctx: commands.Context) -> None:
        await ctx.send(HELP_TEXT)

    @deploy.command(name="ping")
    async def deploy_ping(self, ctx: commands.Context) -> None:
        await ctx.send("deploy pong")
        await ctx.reply("deploy reply pong")

    @deploy.command(name="add")
    async def deploy_add(self, ctx: commands.Context, *, metadata: str = "") -> None:
        """Add the caller to the queue"""
        holder = ctx.author.id

        with self.queue.lock:
            self.queue.push(holder, metadata)
            length = self.queue.length()
            is_current = self.queue.is_current(holder)
            grouped = self.queue.first_group()

        if length == 1:
            self._cycle_timeout(holder)
            await ctx.reply("Go for it!")
        elif length == 2 and not is_current:
            await ctx.reply("Alrighty, you're up after the current deployer.")
        elif is_current and length == len(grouped):
            self._cycle_timeout(holder)
            await ctx.reply(f"Ok! You are now deploying {len(grouped)} things in a row.")
        else:
            await ctx.reply(
                f"There's {length - 1} things to deploy in the queue ahead of you. "
                "I'll let you know when you're up."
            )
        logger.info(f"{ctx.author} joined the deploy queue ({length} queued)")

    @deploy.command(name="done", aliases=["complete"])
    async def deploy_done(self, ctx: commands.Context) -> None:
        """Finish the caller's current turn"""
        holder = ctx.author.id

        with self.queue.lock:
            in_queue = self.queue.contains(holder)
            is_current = self.queue.is_current(holder)
            if is_current:
                self.queue.advance()
            grouped = self.queue.first_group()
            still_current = self.queue.is_current(holder)
            new_current = self.queue.current()

        if not in_queue:
            await ctx.reply(
                "Ummm, this is a little embarrassing, but you aren't in the queue :grimacing:"
            )
            return

        if not is_current:
            await ctx.reply("Nice try, but it's not your turn yet")
            return

        if still_current:
            self._cycle_timeout(holder)
            await ctx.reply(f"Nice! Only {len(grouped)} more to go! {random.choice(REACTIONS)}")
        else:
            self.notifier.cancel()
            await ctx.reply("Nice job! :tada:")
        logger.info(f"{ctx.author} finished a deploy turn")

        if new_current is not None and not still_current:
            await self._notify_turn(new_current)

    @deploy.command(name="current", aliases=["who", "whos-deploying"])
    async def deploy_current(self, ctx: commands.Context) -> None:
        """Who's deploying now?"""
        with self.queue.lock:
            current = self.queue.current()
            grouped = self.queue.first_group()

        if current is None:
            await ctx.send("Nobody!")
            return

        if current.holder == ctx.author.id:
            await ctx.reply("It's you. _You're_ deploying. Right now.")
            return

        message = f"{self._display_name(current.holder, ctx.guild)} is deploying"
        if len(grouped) == 1:
            message += f" {current.metadata}" if current.metadata else "."
        else:
            message += f" {len(grouped)} items."
        await ctx.send(message)

    @deploy.command(name="next", aliases=["whos-next"])
    async def deploy_next(self, ctx: commands.Context) -> None:
        """Who's up next?"""
        upcoming = self.queue.next()

        if upcoming is None:
            await ctx.send("Nobody!")
        elif upcoming.holder == ctx.author.id:
            await ctx.reply("You're up next!")
        else:
            await ctx.send(f"{self._display_name(upcoming.holder, ctx.guild)} is next.")

    @deploy.command(name="remove", aliases=["kick"])
    async def deploy_remove(self, ctx: commands.Context, *, name: str) -> None:
        """Remove every entry of a user, looked up by display name"""
        name = name.strip()
        if name == "me":
            await self._remove_me(ctx)
            return

        guild = ctx.guild

        def match_by_name(entry: QueueEntry) -> bool:
            return self._display_name(entry.holder, guild) == name

        with self.queue.lock:
            was_current = self.queue.is_current(match_by_name)
            removed = self.queue.remove(match_by_name)
            new_current = self.queue.current()

        if removed == 0:
            await ctx.send(f"{name} isn't in the queue :)")
            return

        if was_current:
            self.notifier.cancel()
        await ctx.send(
            f"{name} has been removed from the queue. I hope that's what you meant to do..."
        )
        logger.info(f"{ctx.author} removed {name} from the deploy queue ({removed} entries)")

        if was_current and new_current is not None:
            await self._notify_turn(new_current)

    async def _remove_me(self, ctx: commands.Context) -> None:
        holder = ctx.author.id

        with self.queue.lock:
            was_current = self.queue.is_current(holder)
            removed = self.queue.remove(holder)
            new_current = self.queue.current()

        if removed == 0:
            await ctx.reply("No sweat! You weren't even in the queue :)")
            return

        if was_current:
            self.notifier.cancel()
        await ctx.reply("Alright, I took you out of the queue. Come back soon!")
        logger.info(f"{ctx.author} left the deploy queue")

        if was_current and new_current is not None:
            await self._notify_turn(new_current)

    @deploy.command(name="list")
    async def deploy_list(self, ctx: commands.Context) -> None:
        """Print everyone in the queue"""
        entries = self.queue.get()
        if not entries:
            await ctx.send("Nobody!")
            return

        names = ", ".join(self._display_name(entry.holder, ctx.guild) for entry in entries)
        await ctx.send(f"Here's who's in the queue: {names}.")

    @deploy.command(name="dump", aliases=["debug"])
    async def deploy_dump(self, ctx: commands.Context) -> None:
        """Dump the raw queue for debugging"""
        payload = [
            {
                "holder": entry.holder,
                "metadata": entry.metadata,
                "enqueued_at": entry.enqueued_at.isoformat(),
            }
            for entry in self.queue.get()
        ]
        await ctx.send(f"```json\n{json.dumps(payload, indent=2, default=str)}\n```")


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(
        DeployQueueCog(
            bot,
            bot.deploy_queue,  # type: ignore[attr-defined]
            bot.settings.idle_timeout,  # type: ignore[attr-defined]
        )
    )
    logger.info("Deploy queue cog loaded")
