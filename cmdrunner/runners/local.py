# ═══════════════════════════════════════════════════════════════
# cmdrunner - Local Runner
# Spawn commands on this host
# ═══════════════════════════════════════════════════════════════

import asyncio
import codecs
import io
from typing import IO, Any, Dict, List, Optional
from uuid import uuid4

from ..core.config import get_settings
from ..core.exceptions import ExitError, InvocationCancelledError, SignalError
from ..core.logging import logging_context
from .base import Input, Output, Runner
from .cancellation import CancellationToken
from .models import RunnerType

# The child closed its end of stdin; stop feeding it.
_CLOSED_PIPE_ERRORS = (BrokenPipeError, ConnectionResetError)


class LocalRunner(Runner):
    """
    Local Runner - the only runner that creates OS processes.

    Commands are executed directly (no shell) on the machine running the
    caller. Stream forwarding:
    - stdout/stderr are copied chunk by chunk into the given writers; None
      sends them to the null device
    - stdin backed by a file descriptor (open files, pipes, sys.stdin) is
      handed to the child as is; other readers and bytes are copied into
      the child and then closed; None gives the child the null device

    Environment:
    - env() never called: the child inherits this process' environment
    - env(...) called: the entries replace the environment entirely

    Usage:
        out = io.BytesIO()
        await LocalRunner().run("echo", "Hello world!", stdout=out)
    """

    runner_type = RunnerType.LOCAL

    def __init__(self, chunk_size: Optional[int] = None):
        """
        Initialize local runner.

        Args:
            chunk_size: Bytes per read when forwarding streams (defaults to settings)
        """
        super().__init__()
        self.chunk_size = chunk_size or get_settings().stream_chunk_size

    # ═══════════════════════════════════════════════════════════
    # Command Execution
    # ═══════════════════════════════════════════════════════════

    async def run(
        self,
        command: str,
        *args: str,
        stdin: Input = None,
        stdout: Output = None,
        stderr: Output = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """Execute the command locally and wait for it to exit."""
        with logging_context(invocation_id=uuid4().hex[:12], runner=self.runner_type.value):
            if token is not None and token.cancelled:
                self.logger.debug(f"Not starting {command}: token already fired")
                raise InvocationCancelledError(token.reason or CancellationToken.REASON_CANCELLED)

            self.logger.debug(
                f"Executing: {command}",
                extra_fields={'args': list(args), 'cancellable': token is not None},
            )

            # One writer for both streams: share a pipe so output keeps its order
            combined = stdout is not None and stdout is stderr

            if stderr is None:
                stderr_target = asyncio.subprocess.DEVNULL
            elif combined:
                stderr_target = asyncio.subprocess.STDOUT
            else:
                stderr_target = asyncio.subprocess.PIPE

            stdin_fd = self._fileno(stdin)
            if stdin is None:
                stdin_target = asyncio.subprocess.DEVNULL
            elif stdin_fd is not None:
                stdin_target = stdin_fd
            else:
                stdin_target = asyncio.subprocess.PIPE

            process = await asyncio.create_subprocess_exec(
                command, *args,
                stdin=stdin_target,
                stdout=asyncio.subprocess.DEVNULL if stdout is None else asyncio.subprocess.PIPE,
                stderr=stderr_target,
                env=self._build_env(),
            )

            pumps = []
            if stdin is not None and stdin_fd is None:
                pumps.append(asyncio.ensure_future(self._feed(process.stdin, stdin)))
            if stdout is not None:
                pumps.append(asyncio.ensure_future(self._drain(process.stdout, stdout)))
            if stderr is not None and not combined:
                pumps.append(asyncio.ensure_future(self._drain(process.stderr, stderr)))

            try:
                if token is None:
                    stream_error = await self._wait(process, pumps)
                else:
                    stream_error = await self._wait_or_kill(process, pumps, token)
            except asyncio.CancelledError:
                # The awaiting task itself was cancelled; don't leave the child behind
                self._kill(process)
                raise
            finally:
                for pump in pumps:
                    pump.cancel()
                await asyncio.gather(*pumps, return_exceptions=True)

            returncode = process.returncode
            self.logger.debug(
                f"Finished: {command}",
                extra_fields={'returncode': returncode, 'pid': process.pid},
            )

            if returncode < 0:
                raise SignalError(-returncode)
            if returncode > 0:
                raise ExitError(returncode)
            if stream_error is not None:
                raise stream_error

    async def _wait(
        self,
        process: asyncio.subprocess.Process,
        pumps: List[asyncio.Future],
    ) -> Optional[Exception]:
        """
        Wait for the process to exit and all streams to be forwarded.

        Returns:
            The first error raised while forwarding a stream, if any
        """
        results = await asyncio.gather(process.wait(), *pumps, return_exceptions=True)
        for result in results[1:]:
            if isinstance(result, Exception):
                return result
        return None

    async def _wait_or_kill(
        self,
        process: asyncio.subprocess.Process,
        pumps: List[asyncio.Future],
        token: CancellationToken,
    ) -> Optional[Exception]:
        """Wait like _wait(), but SIGKILL the process if the token fires first."""
        completion = asyncio.ensure_future(self._wait(process, pumps))
        cancellation = asyncio.ensure_future(token.wait())

        try:
            await asyncio.wait({completion, cancellation}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            completion.cancel()
            raise
        finally:
            cancellation.cancel()

        if completion.done():
            return completion.result()

        self.logger.debug(
            f"Killing pid {process.pid}: {token.reason}",
            extra_fields={'pid': process.pid},
        )
        self._kill(process)
        completion.cancel()
        await process.wait()
        # Output still buffered after the kill is dropped
        return None

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass  # exited between the check and the kill

    # ═══════════════════════════════════════════════════════════
    # Stream Forwarding
    # ═══════════════════════════════════════════════════════════

    @staticmethod
    def _fileno(source: Input) -> Optional[int]:
        """OS file descriptor behind ``source``, or None for in-memory input."""
        if source is None or isinstance(source, (bytes, bytearray)):
            return None
        try:
            return source.fileno()
        except (AttributeError, OSError, ValueError):
            return None

    async def _feed(self, pipe: asyncio.StreamWriter, source: Input) -> None:
        """
        Copy in-memory ``source`` into the child's stdin, then close it.

        Inputs backed by a file descriptor never get here; the child reads
        those directly.
        """
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))

        try:
            while True:
                chunk = source.read(self.chunk_size)
                if not chunk:
                    break
                if isinstance(chunk, str):
                    chunk = chunk.encode('utf-8')
                pipe.write(chunk)
                await pipe.drain()
        except _CLOSED_PIPE_ERRORS:
            self.logger.debug("Child closed stdin before all input was written")
        finally:
            pipe.close()
            try:
                await pipe.wait_closed()
            except _CLOSED_PIPE_ERRORS:
                pass

    async def _drain(self, pipe: asyncio.StreamReader, sink: IO[Any]) -> None:
        """Copy one of the child's output pipes into ``sink``."""
        write = self._writer_for(sink)
        error: Optional[Exception] = None
        while True:
            chunk = await pipe.read(self.chunk_size)
            if not chunk:
                break
            if error is not None:
                continue  # keep reading so the child never blocks on a full pipe
            try:
                write(chunk)
            except Exception as e:
                self.logger.warning(f"Writing child output failed: {e}")
                error = e

        if error is not None:
            raise error
        write(b'', final=True)

    @staticmethod
    def _writer_for(sink: IO[Any]):
        """
        Build a write function for ``sink``.

        Binary sinks get raw bytes. Text sinks get UTF-8 decoded text; the
        decoder is incremental so multi-byte characters split across chunks
        survive.
        """
        if not isinstance(sink, io.TextIOBase):
            def write_bytes(chunk: bytes, final: bool = False) -> None:
                if chunk:
                    sink.write(chunk)
            return write_bytes

        decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')

        def write_text(chunk: bytes, final: bool = False) -> None:
            text = decoder.decode(chunk, final=final)
            if text:
                sink.write(text)
        return write_text

    # ═══════════════════════════════════════════════════════════
    # Environment
    # ═══════════════════════════════════════════════════════════

    def _build_env(self) -> Optional[Dict[str, str]]:
        """
        Turn the stored entries into a mapping for the spawn call.

        Returns None (inherit) if env() was never called. Later duplicates
        override earlier ones.
        """
        if self._env is None:
            return None

        env: Dict[str, str] = {}
        for entry in self._env:
            key, sep, value = entry.partition('=')
            if not sep or not key:
                self.logger.debug(f"Skipping malformed environment entry: {entry!r}")
                continue
            env[key] = value
        return env


# ═══════════════════════════════════════════════════════════════
# Convenience Function
# ═══════════════════════════════════════════════════════════════

async def run_local(
    command: str,
    *args: str,
    stdin: Input = None,
    stdout: Output = None,
    stderr: Output = None,
    timeout: Optional[float] = None,
) -> None:
    """
    Convenience function to run a local command.

    Args:
        command: Program to execute
        *args: Program arguments
        stdin: Input for the child
        stdout: Destination for stdout (None discards)
        stderr: Destination for stderr (None discards)
        timeout: Kill the child after this many seconds

    Raises:
        ExitError, SignalError, OSError: See Runner.run
    """
    token = CancellationToken.with_timeout(timeout) if timeout is not None else None
    await LocalRunner().run(
        command, *args,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
        token=token,
    )
