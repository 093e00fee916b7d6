"""
Process Controller for Term Relay

Runs an external command, captures its combined stdout/stderr into an
OutputBuffer as it arrives, and reports how the process terminated.
"""

import asyncio
import os
import shlex
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from ..output_handling.output_buffer import OutputBuffer
from ..utils.error_handler import ErrorCategory, ErrorHandler, ProcessExitError
from ..utils.logging_setup import get_logger

logger = get_logger('process_controller')

DEFAULT_READ_CHUNK_SIZE = 1024 * 10


@dataclass(frozen=True)
class Command:
    """An external command ready to be executed"""
    argv: Sequence[str]
    cwd: Optional[str] = None
    env: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if not self.argv:
            raise ValueError("Command cannot be empty")

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ProcessOutcome:
    """How a command terminated"""
    returncode: Optional[int]
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.error is None


class CapturedProcess:
    """A running (or finished) command and its captured output"""

    def __init__(self, command: Command, buffer: OutputBuffer,
                 outcome: 'asyncio.Future[ProcessOutcome]',
                 process: Optional[asyncio.subprocess.Process] = None):
        self.command = command
        self.buffer = buffer
        self.outcome = outcome
        self.process = process
        self.reader_task: Optional[asyncio.Task] = None
        self.waiter_task: Optional[asyncio.Task] = None

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process else None

    def is_running(self) -> bool:
        """Check if the process has not terminated yet"""
        return self.process is not None and not self.outcome.done()

    async def drain(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds for the output stream to reach EOF"""
        if self.reader_task is None or self.reader_task.done():
            return True
        done, _ = await asyncio.wait({self.reader_task}, timeout=timeout)
        if not done:
            logger.warning(f"Output of '{self.command}' still open {timeout}s after exit")
        return bool(done)


class ProcessController:
    """Starts commands and captures their output"""

    def __init__(self, read_chunk_size: int = DEFAULT_READ_CHUNK_SIZE,
                 error_handler: Optional[ErrorHandler] = None):
        self.read_chunk_size = read_chunk_size
        self.error_handler = error_handler or ErrorHandler()

    async def start(self, command: Command) -> CapturedProcess:
        """Start ``command`` with stdout and stderr merged into one buffer.

        A command that cannot be spawned yields a CapturedProcess whose
        outcome is already resolved with the spawn error.
        """
        loop = asyncio.get_running_loop()
        buffer = OutputBuffer()
        outcome = loop.create_future()

        env = dict(os.environ, **command.env) if command.env else None

        logger.info(f"Starting command: {command}")
        try:
            process = await asyncio.create_subprocess_exec(
                *command.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=command.cwd,
                env=env
            )
        except OSError as e:
            self.error_handler.handle_error(
                e, context={'command': str(command)}, category=ErrorCategory.PROCESS
            )
            outcome.set_result(ProcessOutcome(returncode=None, error=e))
            return CapturedProcess(command, buffer, outcome)

        logger.info(f"Command started with PID {process.pid}")

        captured = CapturedProcess(command, buffer, outcome, process)
        captured.reader_task = asyncio.create_task(
            self._read_output(process.stdout, buffer, command)
        )
        captured.waiter_task = asyncio.create_task(
            self._wait_for_exit(process, outcome, command)
        )
        return captured

    async def _read_output(self, stream: asyncio.StreamReader, buffer: OutputBuffer,
                           command: Command):
        """Append everything read from ``stream`` until EOF"""
        try:
            while True:
                data = await stream.read(self.read_chunk_size)
                if not data:
                    break
                buffer.append(data)
        except Exception as e:
            self.error_handler.handle_error(
                e, context={'command': str(command), 'captured': len(buffer)},
                category=ErrorCategory.STREAM
            )
            return

        logger.debug(f"Output of '{command}' closed after {len(buffer)} bytes")

    async def _wait_for_exit(self, process: asyncio.subprocess.Process,
                             outcome: 'asyncio.Future[ProcessOutcome]', command: Command):
        """Resolve ``outcome`` once the process exits"""
        try:
            returncode = await process.wait()
        except Exception as e:
            self.error_handler.handle_error(
                e, context={'command': str(command)}, category=ErrorCategory.PROCESS
            )
            if not outcome.done():
                outcome.set_result(ProcessOutcome(returncode=None, error=e))
            return

        error = ProcessExitError(returncode) if returncode != 0 else None
        logger.info(f"Command '{command}' exited with code {returncode}")
        if not outcome.done():
            outcome.set_result(ProcessOutcome(returncode=returncode, error=error))
