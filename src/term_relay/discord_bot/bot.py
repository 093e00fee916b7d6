"""
Discord Bot for Term Relay

Discord bot with commands that run host commands and relay their output.
"""

import asyncio
import shlex
from typing import Optional, Set

import discord
from discord.ext import commands

from .auth import REFUSAL_NOTICE, UserAuthorizer
from .transport import DiscordTransport
from ..core.context import RelayContext
from ..core.relay import run_command
from ..process_control.process_controller import Command, ProcessOutcome
from ..utils.config import Config
from ..utils.logging_setup import get_logger

logger = get_logger('discord_bot')


class TermRelayBot(commands.Bot):
    """Discord bot that relays command output into the invoking channel"""

    def __init__(self, config: Config, context: Optional[RelayContext] = None):
        intents = discord.Intents.default()
        intents.message_content = True

        super().__init__(
            command_prefix=config.discord.command_prefix,
            intents=intents,
            help_command=None
        )

        self.config = config
        self.authorizer = UserAuthorizer(config.users)
        self.relay_context = context or RelayContext(
            transport=DiscordTransport(),
            config=config.relay
        )

        # Relays still running, kept referenced until they finish
        self.active_relays: Set[asyncio.Task] = set()

        self.add_commands()

    def add_commands(self):
        """Add all Discord commands"""

        @self.command(name='hello')
        async def hello_command(ctx: commands.Context):
            """Greet the user and show the bot configuration"""
            await self._hello(ctx)

        @self.command(name='run')
        async def run_command_(ctx: commands.Context, *, command_line: str):
            """Run a command and relay its output"""
            await self._run(ctx, command_line)

    async def on_ready(self):
        """Called when bot is ready"""
        logger.info(f'{self.user} has connected to Discord!')
        logger.info(f'Bot is in {len(self.guilds)} guilds')

    async def _reply(self, ctx: commands.Context, text: str, prefix: str = "", postfix: str = ""):
        """Reply in the invoking channel, split to the message limit"""
        context = self.relay_context
        await context.sender.send_long(
            ctx.channel, text,
            prefix=prefix,
            postfix=postfix,
            options=context.options,
            limit=context.config.max_message_length
        )

    async def _check_user(self, ctx: commands.Context) -> bool:
        """Check the author against the allow-list, refusing politely"""
        if self.authorizer.is_allowed(ctx.author.name, str(ctx.author.id)):
            return True
        await self._reply(ctx, REFUSAL_NOTICE)
        return False

    async def _hello(self, ctx: commands.Context):
        if not await self._check_user(ctx):
            return

        await self._reply(ctx, f"hello! {ctx.author.display_name}")
        settings = '\n'.join(f"{key}: {value}" for key, value in self.config.describe().items())
        formatter = self.relay_context.formatter
        await self._reply(ctx, "bot configuration:")
        await self._reply(ctx, formatter.escape_code_fences(settings),
                          prefix=formatter.prefix, postfix=formatter.postfix)
        await self._reply(ctx, self._error_summary())

    def _error_summary(self) -> str:
        """Summary of the errors recorded since startup"""
        stats = self.relay_context.error_handler.get_error_stats()
        counts = [f"{category}: {count}"
                  for category, count in stats['errors_by_category'].items() if count]
        if not counts:
            return "errors since startup: none"
        return f"errors since startup: {stats['total_errors']} ({', '.join(counts)})"

    async def _run(self, ctx: commands.Context, command_line: str) -> Optional[ProcessOutcome]:
        if not await self._check_user(ctx):
            return None

        try:
            argv = shlex.split(command_line)
        except ValueError as e:
            await self._reply(ctx, f"❌ Invalid command: {e}")
            return None

        if not argv:
            await self._reply(ctx, "❌ Nothing to run")
            return None

        command = Command(argv=argv, cwd=self.config.relay.working_directory)
        logger.info(f"{ctx.author} runs: {command}")

        task = run_command(self.relay_context, ctx.channel, command)
        self.active_relays.add(task)
        task.add_done_callback(self.active_relays.discard)

        outcome = await task
        logger.info(f"Relay for {ctx.author} finished: returncode={outcome.returncode}")
        return outcome

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        """Handle command errors"""
        if isinstance(error, commands.CommandNotFound):
            await ctx.send("❌ Unknown command.")
        elif isinstance(error, commands.MissingRequiredArgument):
            await ctx.send(f"❌ Missing required argument: `{error.param.name}`")
        elif isinstance(error, commands.BadArgument):
            await ctx.send(f"❌ Invalid argument: {error}")
        else:
            self.relay_context.error_handler.handle_error(error, context={'command': str(ctx.command)})
            await ctx.send("❌ An error occurred while processing the command.")

    async def close(self):
        if self.active_relays:
            logger.warning(f"Closing with {len(self.active_relays)} relay(s) still running")
        await super().close()
