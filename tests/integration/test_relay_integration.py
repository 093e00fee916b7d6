"""
Integration tests for LiveRelay: real subprocesses, recording transport
"""

import asyncio
import sys

import pytest

from term_relay.core.context import RelayContext
from term_relay.core.relay import LiveRelay, RelayState, run_command
from term_relay.process_control.process_controller import Command
from term_relay.utils.config import RelayConfig
from term_relay.utils.error_handler import ErrorCategory, ErrorHandler

PREFIX = "```\n"
POSTFIX = "\n```"


def python_command(code: str) -> Command:
    return Command([sys.executable, "-c", code])


def make_context(transport, **overrides) -> RelayContext:
    settings = dict(max_message_length=4000, update_interval=0.05, drain_timeout=5.0)
    settings.update(overrides)
    return RelayContext(transport=transport, config=RelayConfig(**settings))


def unwrap(text: str) -> str:
    assert text.startswith(PREFIX) and text.endswith(POSTFIX)
    return text[len(PREFIX):-len(POSTFIX)]


async def relay(context, code: str, recipient="chan") -> LiveRelay:
    live_relay = LiveRelay(context, recipient, python_command(code))
    await asyncio.wait_for(live_relay.run(), timeout=60)
    return live_relay


class TestLiveRelay:
    """End-to-end relay behaviour"""

    @pytest.mark.asyncio
    async def test_long_output_replaces_live_message(self, transport):
        """Live view is deleted and the full output arrives in two chunks"""
        code = (
            "import sys, time\n"
            "sys.stdout.write('x' * 5000)\n"
            "sys.stdout.flush()\n"
            "time.sleep(0.5)\n"
        )
        live_relay = await relay(make_context(transport), code)

        assert live_relay.state == RelayState.DONE
        assert live_relay.ticks > 0
        assert len(transport.deleted) == 1

        remaining = transport.remaining()
        assert len(remaining) == 2
        assert all(len(message.text) <= 4000 for message in remaining)
        assert "".join(unwrap(message.text) for message in remaining) == "x" * 5000

    @pytest.mark.asyncio
    async def test_live_view_within_limit(self, transport):
        code = (
            "import sys, time\n"
            "sys.stdout.write('x' * 5000)\n"
            "sys.stdout.flush()\n"
            "time.sleep(0.5)\n"
        )
        await relay(make_context(transport, max_message_length=200), code)

        live_texts = [transport.sent[0].text] + [text for _, text in transport.edits]
        assert all(len(text) <= 200 for text in live_texts)

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, transport):
        live_relay = await relay(make_context(transport), "print('boom'); raise SystemExit(3)")

        assert live_relay.state == RelayState.DONE
        texts = [message.text for message in transport.remaining()]
        assert texts[-2] == "```\nboom\n```"
        assert texts[-1].startswith("Terminated:")
        assert "exit status 3" in texts[-1]

    @pytest.mark.asyncio
    async def test_spawn_failure(self, transport):
        context = make_context(transport)
        outcome = await LiveRelay(context, "chan", Command(["no-such-binary-for-relay"])).run()

        assert outcome.returncode is None
        texts = [message.text for message in transport.remaining()]
        assert texts[0] == "```\n(no output)\n```"
        assert texts[1].startswith("Terminated:")
        assert len(texts) == 2

    @pytest.mark.asyncio
    async def test_stderr_relayed(self, transport):
        code = "import sys; print('to stderr', file=sys.stderr)"
        await relay(make_context(transport), code)

        assert transport.remaining()[-1].text == "```\nto stderr\n```"

    @pytest.mark.asyncio
    async def test_progress_output_collapsed(self, transport):
        code = "import sys; sys.stdout.write('10%\\r50%\\r100%\\n')"
        await relay(make_context(transport), code)

        assert transport.remaining()[-1].text == "```\n100%\n```"

    @pytest.mark.asyncio
    async def test_code_fences_escaped(self, transport):
        await relay(make_context(transport), "print('```')")

        final = transport.remaining()[-1].text
        assert unwrap(final).count("`") == 3
        assert "``" not in unwrap(final)

    @pytest.mark.asyncio
    async def test_unchanged_output_not_edited(self, transport):
        code = "import time; print('static', flush=True); time.sleep(0.6)"
        live_relay = await relay(make_context(transport), code)

        assert live_relay.ticks > 3
        # At most one change: placeholder to "static"
        assert len(transport.edits) <= 1

    @pytest.mark.asyncio
    async def test_failed_live_send_retried_next_tick(self, make_transport):
        transport = make_transport(fail_sends=1)
        context = make_context(transport)
        await relay(context, "import time; print('hi', flush=True); time.sleep(0.5)")

        stages = [info.context.get('stage') for info in context.error_handler.get_recent_errors()]
        assert 'live_send' in stages
        assert len(transport.deleted) == 1
        assert transport.remaining()[-1].text == "```\nhi\n```"

    @pytest.mark.asyncio
    async def test_failed_edits_and_delete_are_not_fatal(self, make_transport):
        transport = make_transport(fail_edits=True, fail_deletes=True)
        context = make_context(transport)
        code = (
            "import time\n"
            "print('a', flush=True)\n"
            "time.sleep(0.3)\n"
            "print('b', flush=True)\n"
            "time.sleep(0.3)\n"
        )
        live_relay = await relay(context, code)

        assert live_relay.state == RelayState.DONE
        assert transport.sent[-1].text == "```\na\nb\n```"
        stages = {info.context.get('stage') for info in context.error_handler.get_recent_errors(100)}
        assert 'live_delete' in stages

    @pytest.mark.asyncio
    async def test_no_live_updates_after_finalizing(self, transport):
        code = "import time; print('tick', flush=True); time.sleep(0.3); print('tock')"
        await relay(make_context(transport), code)

        operations = [op for op, _ in transport.history]
        assert operations.count('delete') == 1
        delete_index = operations.index('delete')
        assert 'edit' not in operations[delete_index:]
        assert operations[delete_index + 1:] == ['send']

    @pytest.mark.asyncio
    async def test_options_passed_to_transport(self, transport):
        context = make_context(transport)
        await relay(context, "print('x')")

        assert all(options is context.options for options in transport.options)

    @pytest.mark.asyncio
    async def test_output_before_stream_error_is_delivered(self, transport, broken_stream_controller):
        handler = ErrorHandler()
        context = RelayContext(
            transport=transport,
            config=RelayConfig(update_interval=0.05, drain_timeout=5.0),
            error_handler=handler,
            process_controller=broken_stream_controller(error_handler=handler)
        )
        code = (
            "import time\n"
            "print('captured', flush=True)\n"
            "time.sleep(0.3)\n"
            "print('lost', flush=True)\n"
        )

        live_relay = await relay(context, code)

        assert live_relay.state == RelayState.DONE
        assert transport.remaining()[-1].text == "```\ncaptured\n```"
        assert ErrorCategory.STREAM in [info.category for info in handler.get_recent_errors()]


class TestRunCommand:
    """Test cases for the task-returning entry point"""

    @pytest.mark.asyncio
    async def test_returns_task_with_outcome(self, transport):
        task = run_command(make_context(transport), "chan", python_command("print('done')"))

        assert isinstance(task, asyncio.Task)
        outcome = await asyncio.wait_for(task, timeout=60)
        assert outcome.success
        assert transport.remaining()[-1].text == "```\ndone\n```"

    @pytest.mark.asyncio
    async def test_concurrent_relays_are_independent(self, transport):
        context = make_context(transport)
        tasks = [
            run_command(context, f"chan-{i}", python_command(f"print('relay {i}')"))
            for i in range(3)
        ]

        outcomes = await asyncio.wait_for(asyncio.gather(*tasks), timeout=60)

        assert all(outcome.success for outcome in outcomes)
        for i in range(3):
            finals = [m.text for m in transport.remaining() if m.recipient == f"chan-{i}"]
            assert finals == [f"```\nrelay {i}\n```"]


if __name__ == "__main__":
    pytest.main([__file__])
