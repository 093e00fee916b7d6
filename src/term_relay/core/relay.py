"""
Live Relay for Term Relay

Relays a running command's output to a channel: one message is edited in
place while the command runs, then replaced by the complete output.
"""

import asyncio
from enum import Enum
from typing import Any, Optional

from .context import RelayContext
from ..output_handling.output_buffer import OutputBuffer
from ..process_control.process_controller import CapturedProcess, Command, ProcessOutcome
from ..utils.error_handler import ErrorCategory
from ..utils.logging_setup import get_logger

logger = get_logger('relay')


class RelayState(Enum):
    """Lifecycle of a relay"""
    STARTING = "starting"
    LIVE_UPDATING = "live_updating"
    FINALIZING = "finalizing"
    DONE = "done"


class LiveRelay:
    """Runs one command and relays its output to one recipient"""

    def __init__(self, context: RelayContext, recipient: Any, command: Command):
        self.context = context
        self.recipient = recipient
        self.command = command
        self.state = RelayState.STARTING
        self.live_message: Optional[Any] = None
        self.ticks = 0
        self._live_text: Optional[str] = None

    async def run(self) -> ProcessOutcome:
        """Run the command to completion and deliver its output"""
        captured = await self.context.process_controller.start(self.command)
        self._set_state(RelayState.LIVE_UPDATING)

        interval = self.context.config.update_interval
        while not captured.outcome.done():
            await asyncio.wait({captured.outcome}, timeout=interval)
            # Completion wins over a tick that became due at the same time
            if captured.outcome.done():
                break
            self.ticks += 1
            await self._update_live_message(captured.buffer)

        outcome = captured.outcome.result()
        self._set_state(RelayState.FINALIZING)
        await self._finalize(captured, outcome)
        self._set_state(RelayState.DONE)
        return outcome

    def _set_state(self, state: RelayState):
        logger.debug(f"Relay for '{self.command}': {self.state.value} -> {state.value}")
        self.state = state

    async def _update_live_message(self, buffer: OutputBuffer):
        """Create or edit the live message from the current buffer"""
        context = self.context
        text = context.collapser.collapse(buffer.snapshot()).text
        rendered = context.formatter.format_live_view(text)

        if self.live_message is None:
            try:
                self.live_message = await context.transport.send(
                    self.recipient, rendered, context.options
                )
                self._live_text = rendered
            except Exception as e:
                # Retried by the next tick
                context.error_handler.handle_error(
                    e, context={'stage': 'live_send'}, category=ErrorCategory.TRANSPORT
                )
            return

        if rendered == self._live_text:
            return

        try:
            await context.transport.edit(self.live_message, rendered, context.options)
            self._live_text = rendered
        except Exception as e:
            # Superseded by the next tick or by the final output
            context.error_handler.handle_error(
                e, context={'stage': 'live_edit', 'severity': 'low'},
                category=ErrorCategory.TRANSPORT
            )

    async def _finalize(self, captured: CapturedProcess, outcome: ProcessOutcome):
        """Replace the live message with the complete output"""
        context = self.context
        await captured.drain(context.config.drain_timeout)

        if self.live_message is not None:
            try:
                await context.transport.delete(self.live_message)
            except Exception as e:
                context.error_handler.handle_error(
                    e, context={'stage': 'live_delete'}, category=ErrorCategory.TRANSPORT
                )
            self.live_message = None

        formatter = context.formatter
        text = context.collapser.collapse(captured.buffer.snapshot()).text
        await context.sender.send_long(
            self.recipient,
            formatter.prepare_final_output(text),
            prefix=formatter.prefix,
            postfix=formatter.postfix,
            options=context.options,
            limit=context.config.max_message_length
        )

        if outcome.error is not None:
            await context.sender.send(
                self.recipient, formatter.format_terminated(outcome.error), options=context.options
            )

        logger.info(
            f"Relay for '{self.command}' finished after {self.ticks} update(s): "
            f"{'success' if outcome.success else outcome.error}"
        )


def run_command(context: RelayContext, recipient: Any, command: Command) -> 'asyncio.Task[ProcessOutcome]':
    """Start relaying ``command``; the returned task resolves once with its outcome"""
    relay = LiveRelay(context, recipient, command)
    return asyncio.create_task(relay.run(), name=f"relay:{command}")
