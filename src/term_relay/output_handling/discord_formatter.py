"""
Discord Message Formatter for Term Relay

Renders relayed output as Discord code blocks within the message limit.
"""

import re

from .chunker import keep_tail

# Discord limits
MAX_MESSAGE_LENGTH = 2000

CODE_BLOCK_PREFIX = "```\n"
CODE_BLOCK_POSTFIX = "\n```"

EMPTY_LIVE_VIEW = "..."
EMPTY_FINAL_OUTPUT = "(no output)"
TERMINATED_HEADER = "Terminated:\n\n"

# Zero-width joiner keeps backticks from closing the code block
_BACKTICK_RUN = re.compile(r'`(?=`)')
_ZERO_WIDTH_JOINER = '\u200d'


class DiscordFormatter:
    """Formats terminal output for Discord messages"""

    prefix = CODE_BLOCK_PREFIX
    postfix = CODE_BLOCK_POSTFIX

    def __init__(self, max_message_length: int = 1900):  # Leave buffer for formatting
        self.max_length = max_message_length

    @property
    def wrap_overhead(self) -> int:
        """Characters added by the code block wrapping"""
        return len(self.prefix) + len(self.postfix)

    @property
    def content_limit(self) -> int:
        """Characters left for content inside one code block"""
        return self.max_length - self.wrap_overhead

    @staticmethod
    def escape_code_fences(text: str) -> str:
        """Separate consecutive backticks so the text cannot end the block"""
        if not text:
            return text
        return _BACKTICK_RUN.sub('`' + _ZERO_WIDTH_JOINER, text)

    def format_code_block(self, text: str) -> str:
        """Wrap text in a Discord code block"""
        return f"{self.prefix}{text}{self.postfix}"

    def format_live_view(self, text: str) -> str:
        """Render the in-progress view: escaped, tail-truncated, wrapped"""
        if not text.strip():
            text = EMPTY_LIVE_VIEW
        text = keep_tail(self.escape_code_fences(text), self.content_limit)
        return self.format_code_block(text)

    def prepare_final_output(self, text: str) -> str:
        """Escape the complete output before it is chunked"""
        if not text.strip():
            return EMPTY_FINAL_OUTPUT
        return self.escape_code_fences(text)

    def format_terminated(self, error: BaseException) -> str:
        """Describe how the command terminated"""
        message = self.escape_code_fences(str(error) or type(error).__name__)
        limit = self.content_limit - len(TERMINATED_HEADER)
        return TERMINATED_HEADER + self.format_code_block(keep_tail(message, limit))
