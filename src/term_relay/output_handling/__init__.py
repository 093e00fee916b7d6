"""
Output handling components for Term Relay

Contains output capture buffering, control-character collapsing,
message chunking, and Discord formatting.
"""

from .output_buffer import OutputBuffer
from .collapser import OutputCollapser, CollapsedOutput, collapse_output
from .chunker import split_by_lines, keep_tail
from .discord_formatter import DiscordFormatter

__all__ = [
    "OutputBuffer",
    "OutputCollapser",
    "CollapsedOutput",
    "collapse_output",
    "split_by_lines",
    "keep_tail",
    "DiscordFormatter"
]
