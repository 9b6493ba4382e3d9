"""Child-process execution with streamed stdin/stdout"""

import asyncio
import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional, Sequence

from core.exceptions import ExternalProcessError
from core.interfaces import ByteCallback

logger = logging.getLogger(__name__)

CHUNK_SIZE = 256 * 1024


@dataclass
class ProcessResult:
    """Completed process"""
    command: str
    exit_code: int
    stdout: bytes
    stderr: str
    bytes_in: int = 0
    bytes_out: int = 0


async def notify(callback: Optional[ByteCallback], count: int) -> None:
    """Invoke a byte callback, awaiting it if it is a coroutine"""
    if callback is None:
        return
    result = callback(count)
    # Handle both sync and async callbacks
    if hasattr(result, '__await__'):
        await result


def mask_args(args: Sequence[str]) -> list[str]:
    """Hide password arguments for logging"""
    return [
        "--password=****" if arg.startswith("--password=") else arg
        for arg in args
    ]


class ProcessRunner:
    """Runs one external program per call and reaps it"""

    def __init__(self, chunk_size: int = CHUNK_SIZE, env: Optional[dict] = None):
        self.chunk_size = chunk_size
        self.env = env

    async def run(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
        on_input: Optional[ByteCallback] = None,
        on_output: Optional[ByteCallback] = None,
    ) -> ProcessResult:
        """
        Run a program to completion

        Args:
            command: Program name or path
            args: Argument list
            stdin: Binary file object piped to the program's standard input
            stdout: Binary file object receiving standard output; buffered
                in the result when omitted
            on_input: Called with the running count of bytes sent to stdin
            on_output: Called with the running count of bytes read from stdout

        Returns:
            ProcessResult for a zero exit status

        Raises:
            ExternalProcessError: the program could not be started or exited non-zero
        """
        logger.debug("Running %s %s", command, " ".join(mask_args(args)))
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.env,
            )
        except OSError as e:
            raise ExternalProcessError(command, None, str(e)) from e

        buffer = bytearray()

        async def feed() -> int:
            sent = 0
            if stdin is None:
                return sent
            try:
                while True:
                    chunk = await asyncio.to_thread(stdin.read, self.chunk_size)
                    if not chunk:
                        break
                    proc.stdin.write(chunk)
                    await proc.stdin.drain()
                    sent += len(chunk)
                    await notify(on_input, sent)
            except (BrokenPipeError, ConnectionResetError):
                # Program exited early; its exit status tells why
                logger.debug("%s closed its input after %d bytes", command, sent)
            finally:
                if not proc.stdin.is_closing():
                    proc.stdin.close()
                try:
                    await proc.stdin.wait_closed()
                except (BrokenPipeError, ConnectionResetError):
                    pass
            return sent

        async def pump() -> int:
            received = 0
            while True:
                chunk = await proc.stdout.read(self.chunk_size)
                if not chunk:
                    break
                if stdout is not None:
                    await asyncio.to_thread(stdout.write, chunk)
                else:
                    buffer.extend(chunk)
                received += len(chunk)
                await notify(on_output, received)
            return received

        tasks = [
            asyncio.ensure_future(feed()),
            asyncio.ensure_future(pump()),
            asyncio.ensure_future(proc.stderr.read()),
        ]
        try:
            sent, received, err = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            if proc.returncode is None:
                proc.kill()
            await asyncio.gather(*tasks, return_exceptions=True)
            await proc.wait()
            raise

        exit_code = await proc.wait()
        stderr_text = err.decode("utf-8", errors="replace")

        if exit_code != 0:
            raise ExternalProcessError(command, exit_code, stderr_text)

        if stdout is not None:
            await asyncio.to_thread(stdout.flush)

        return ProcessResult(
            command=command,
            exit_code=exit_code,
            stdout=bytes(buffer),
            stderr=stderr_text,
            bytes_in=sent,
            bytes_out=received,
        )
