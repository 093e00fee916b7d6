#!/usr/bin/env python3
"""
Term Relay - Main Entry Point

Runs host commands from Discord and relays their live output back.
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from term_relay import __version__
from term_relay.discord_bot.bot import TermRelayBot
from term_relay.utils.config import Config
from term_relay.utils.logging_setup import parse_size, setup_logging

DEFAULT_CONFIG_PATH = "config/relay_config.json"


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file, exiting on failure"""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_file = Path(config_path)
    if not config_file.exists():
        print(f"❌ Configuration file not found: {config_path}")
        print("📖 Copy config/relay_config.example.json and fill in your bot token.")
        sys.exit(1)

    try:
        config = Config.load_from_file(config_file)
        config.validate()
        return config
    except Exception as e:
        print(f"❌ Failed to load configuration: {e}")
        print("📖 Please check your configuration file format.")
        sys.exit(1)


class TermRelayApp:
    """Main Term Relay Application"""

    def __init__(self, config: Config):
        self.config = config
        self.discord_bot: Optional[TermRelayBot] = None
        self.logger = logging.getLogger('term_relay.app')
        self.running = False

    async def start(self) -> None:
        """Start the bot; returns when the bot disconnects"""
        self.logger.info("🚀 Starting Term Relay...")

        self.discord_bot = TermRelayBot(self.config)
        self.running = True

        if self.discord_bot.authorizer.allows_everyone:
            self.logger.warning("No allowed users configured: every user may run commands")

        print("🎉 Term Relay is now running!")
        print(f"📱 Use {self.config.discord.command_prefix}run <command> in Discord")
        print("🛑 Press Ctrl+C to stop")

        await self.discord_bot.start(self.config.discord.token)

    async def stop(self) -> None:
        """Stop Term Relay application"""
        if not self.running:
            return

        self.logger.info("🛑 Stopping Term Relay...")
        self.running = False

        if self.discord_bot:
            await self.discord_bot.close()

        self.logger.info("✅ Term Relay stopped successfully")


async def main() -> None:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Term Relay - run commands from Discord and relay their output"
    )
    parser.add_argument(
        "--config", "-c",
        help=f"Configuration file path (default: {DEFAULT_CONFIG_PATH})",
        default=None
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"Term Relay {__version__}"
    )

    args = parser.parse_args()

    config = load_config(args.config)

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        max_bytes=parse_size(config.logging.max_size),
        backup_count=config.logging.backup_count
    )
    logger = logging.getLogger('term_relay.app')

    app = TermRelayApp(config)

    try:
        await app.start()
    except KeyboardInterrupt:
        logger.info("🛑 Received interrupt signal")
    except Exception as e:
        logger.error(f"❌ Application error: {e}")
        sys.exit(1)
    finally:
        await app.stop()
        print("👋 Term Relay stopped")


def run() -> None:
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")


if __name__ == "__main__":
    run()
