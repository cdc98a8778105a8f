"""Subprocess wrapper for interactive external tool invocations."""

import asyncio
import codecs
import contextlib
import logging
import platform
from collections.abc import Awaitable, Callable, Mapping, Sequence
from enum import StrEnum

from unity_provision.exceptions import SpawnFailedError, SubprocessFailedError

_logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096


class PromptState(StrEnum):
    """State of a prompt responder."""

    AWAITING_PROMPT = "awaiting-prompt"
    RESPONDING = "responding"


class PromptResponder:
    """Watches a tool's output for a confirmation prompt and answers it.

    Output is accumulated until the marker appears. The buffer is cleared
    as soon as a prompt is detected, so text that arrives split across
    reads never triggers the same prompt twice. While no prompt is pending,
    only the tail that could still begin a marker is retained.
    """

    def __init__(self, marker: str, response: str):
        if not marker:
            raise ValueError("Prompt marker must not be empty")
        self.marker = marker
        self.response = response
        self.state = PromptState.AWAITING_PROMPT
        self.prompts_answered = 0
        self._buffer = ""

    def feed(self, text: str) -> str | None:
        """Consume output text.

        Returns:
            The response to write if a prompt was detected, otherwise None.
        """
        self._buffer += text
        if self.marker in self._buffer:
            self._buffer = ""
            self.state = PromptState.RESPONDING
            return self.response

        keep = len(self.marker) - 1
        self._buffer = self._buffer[-keep:] if keep else ""
        return None

    def responded(self) -> None:
        """Record that the pending response was delivered."""
        self.prompts_answered += 1
        self.state = PromptState.AWAITING_PROMPT


class _LineBuffer:
    """Splits chunked output into complete, non-empty lines."""

    def __init__(self) -> None:
        self._pending = ""

    def feed(self, text: str) -> list[str]:
        parts = (self._pending + text).splitlines(keepends=True)
        self._pending = ""
        if parts and not parts[-1].endswith(("\n", "\r")):
            self._pending = parts.pop()
        return [line.rstrip() for line in parts if line.strip()]

    def flush(self) -> list[str]:
        line, self._pending = self._pending.rstrip(), ""
        return [line] if line else []


async def _drain(
    stream: asyncio.StreamReader,
    level: int,
    log: logging.Logger,
    on_text: Callable[[str], Awaitable[None]] | None = None,
) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    lines = _LineBuffer()

    while True:
        chunk = await stream.read(CHUNK_SIZE)
        text = decoder.decode(chunk, final=not chunk)
        if text:
            for line in lines.feed(text):
                log.log(level, line)
            if on_text is not None:
                await on_text(text)
        if not chunk:
            break

    for line in lines.flush():
        log.log(level, line)


async def run_interactive(
    executable: str,
    args: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    prompt_marker: str | None = None,
    prompt_response: str = "",
    logger: logging.Logger | None = None,
) -> None:
    """Run an external tool, answering confirmation prompts on stdout.

    stdout and stderr are drained concurrently and forwarded line by line to
    the logger at DEBUG and ERROR level respectively. No timeout is applied.

    Args:
        executable: Program to run.
        args: Program arguments.
        env: Complete environment for the child process.
        prompt_marker: Literal prompt text to watch for on stdout.
        prompt_response: Text written to stdin each time the prompt appears.
        logger: Destination for output and diagnostics.

    Raises:
        SpawnFailedError: If the process cannot be started.
        SubprocessFailedError: If the process exits with a non-zero status.
    """
    log = logger or _logger
    log.info("%s", " ".join([executable, *args]))

    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=dict(env) if env is not None else None,
        )
    except OSError as e:
        raise SpawnFailedError(executable, args, e) from e

    assert proc.stdin is not None
    assert proc.stdout is not None
    assert proc.stderr is not None
    stdin = proc.stdin

    responder = PromptResponder(prompt_marker, prompt_response) if prompt_marker else None

    async def answer_prompts(text: str) -> None:
        if responder is None:
            return
        response = responder.feed(text)
        if response is None:
            return
        log.debug("Prompt detected: %s", responder.marker)
        try:
            stdin.write(response.encode("utf-8"))
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            log.warning("Input closed before prompt could be answered")
        responder.responded()

    try:
        await asyncio.gather(
            _drain(proc.stdout, logging.DEBUG, log, answer_prompts),
            _drain(proc.stderr, logging.ERROR, log),
        )
        returncode = await proc.wait()
    finally:
        # Cancelled or failed while reading: do not leave the child running
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
        stdin.close()

    if returncode < 0:
        # Killed by a signal; no exit status is available.
        log.warning(
            "%s terminated by signal %d, treating as success", executable, -returncode
        )
        return

    if returncode != 0:
        raise SubprocessFailedError(executable, args, returncode)


def is_process_elevated() -> bool:
    """Check whether the current process runs with administrator rights.

    Always True outside Windows, where no elevation is required.
    """
    if platform.system() != "Windows":
        return True

    import ctypes

    return bool(ctypes.windll.shell32.IsUserAnAdmin())
