"""
Configuration management for Term Relay

Handles loading and validation of configuration from JSON files and environment variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

PLACEHOLDER_TOKEN = "YOUR_DISCORD_BOT_TOKEN"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DiscordConfig:
    """Discord bot configuration"""
    token: str
    command_prefix: str = "/"


@dataclass
class RelayConfig:
    """Output relay configuration"""
    max_message_length: int = 1900
    update_interval: float = 1.0
    max_retries: int = 5
    read_chunk_size: int = 10240
    drain_timeout: float = 1.0
    working_directory: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file: str = "logs/term_relay.log"
    max_size: str = "10MB"
    backup_count: int = 5


@dataclass
class Config:
    """Main configuration class"""
    discord: DiscordConfig
    relay: RelayConfig = field(default_factory=RelayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    users: List[str] = field(default_factory=list)

    @classmethod
    def load_from_file(cls, config_path: Path) -> 'Config':
        """Load configuration from JSON file with environment variable override"""
        config_path = Path(config_path)

        # Load environment variables from .env file if it exists
        env_file = config_path.parent / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Build configuration from a parsed dictionary, applying environment overrides"""
        discord_data = data.get('discord', {})
        relay_data = data.get('relay', {})
        logging_data = data.get('logging', {})

        discord_token = os.getenv('DISCORD_BOT_TOKEN', discord_data.get('token', ''))
        if not discord_token or discord_token == PLACEHOLDER_TOKEN:
            raise ValueError(
                "Discord bot token not configured. Set DISCORD_BOT_TOKEN environment variable "
                "or update the configuration file"
            )

        discord_config = DiscordConfig(
            token=discord_token,
            command_prefix=os.getenv('DISCORD_COMMAND_PREFIX', discord_data.get('command_prefix', '/'))
        )

        defaults = RelayConfig()
        relay_config = RelayConfig(
            max_message_length=int(os.getenv(
                'RELAY_MAX_MESSAGE_LENGTH', relay_data.get('max_message_length', defaults.max_message_length))),
            update_interval=float(os.getenv(
                'RELAY_UPDATE_INTERVAL', relay_data.get('update_interval', defaults.update_interval))),
            max_retries=int(os.getenv(
                'RELAY_MAX_RETRIES', relay_data.get('max_retries', defaults.max_retries))),
            read_chunk_size=int(os.getenv(
                'RELAY_READ_CHUNK_SIZE', relay_data.get('read_chunk_size', defaults.read_chunk_size))),
            drain_timeout=float(os.getenv(
                'RELAY_DRAIN_TIMEOUT', relay_data.get('drain_timeout', defaults.drain_timeout))),
            working_directory=os.getenv('RELAY_WORKDIR', relay_data.get('working_directory'))
        )

        logging_defaults = LoggingConfig()
        logging_config = LoggingConfig(
            level=os.getenv('LOG_LEVEL', logging_data.get('level', logging_defaults.level)),
            file=os.getenv('LOG_FILE', logging_data.get('file', logging_defaults.file)),
            max_size=os.getenv('LOG_MAX_SIZE', logging_data.get('max_size', logging_defaults.max_size)),
            backup_count=int(os.getenv(
                'LOG_BACKUP_COUNT', logging_data.get('backup_count', logging_defaults.backup_count)))
        )

        env_users = os.getenv('RELAY_ALLOWED_USERS')
        if env_users is not None:
            users = [user.strip() for user in env_users.split(',') if user.strip()]
        else:
            users = list(data.get('users', []))

        return cls(
            discord=discord_config,
            relay=relay_config,
            logging=logging_config,
            users=users
        )

    def validate(self) -> bool:
        """Validate configuration values"""
        errors = []

        if not self.discord.token or self.discord.token == PLACEHOLDER_TOKEN:
            errors.append("Discord bot token is required")

        if not self.discord.command_prefix:
            errors.append("Discord command prefix is required")

        # Room for the code block wrapping plus at least one character
        if self.relay.max_message_length <= 8:
            errors.append("Relay max message length must be greater than 8")

        if self.relay.update_interval <= 0:
            errors.append("Relay update interval must be positive")

        if self.relay.max_retries <= 0:
            errors.append("Relay max retries must be positive")

        if self.relay.read_chunk_size <= 0:
            errors.append("Relay read chunk size must be positive")

        if self.logging.level.upper() not in LOG_LEVELS:
            errors.append(f"Logging level must be one of {', '.join(LOG_LEVELS)}")

        if self.relay.drain_timeout < 0:
            errors.append("Relay drain timeout cannot be negative")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def describe(self) -> dict:
        """Non-secret view of the configuration"""
        return {
            'command_prefix': self.discord.command_prefix,
            'users': list(self.users),
            'max_message_length': self.relay.max_message_length,
            'update_interval': self.relay.update_interval,
            'max_retries': self.relay.max_retries,
            'read_chunk_size': self.relay.read_chunk_size,
            'drain_timeout': self.relay.drain_timeout,
            'working_directory': self.relay.working_directory,
            'log_level': self.logging.level
        }
