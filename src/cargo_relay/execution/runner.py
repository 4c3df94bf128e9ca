"""Subprocess execution with asynchronous output capture."""

from __future__ import annotations

import asyncio
import contextlib
import os
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from cargo_relay.execution.results import AttemptOutcome

if TYPE_CHECKING:
    from cargo_relay.workspace.package import Package


async def _read_stream(
    stream: asyncio.StreamReader,
    callback: Callable[[str], None] | None,
    buffer: list[str],
) -> None:
    """Read from stream line by line."""
    while True:
        line = await stream.readline()
        if not line:
            break
        decoded = line.decode("utf-8", errors="replace")
        buffer.append(decoded)
        if callback:
            callback(decoded.rstrip())


async def run_command(
    args: Sequence[str],
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_stdout: Callable[[str], None] | None = None,
    on_stderr: Callable[[str], None] | None = None,
) -> tuple[int, str, str, int]:
    """Run a program asynchronously.

    Args:
        args: Program and its arguments.
        cwd: Working directory.
        env: Environment variables (merged with current env).
        timeout: Timeout in seconds, None waits forever.
        on_stdout: Callback for stdout lines.
        on_stderr: Callback for stderr lines.

    Returns:
        Tuple of (exit_code, stdout, stderr, duration_ms). Exit code is -1
        when the program could not be started, timed out or its output could
        not be read; stderr then holds the reason. A child still running at
        that point is killed.
    """
    run_env = os.environ.copy()
    if env:
        run_env.update(env)

    start_time = time.monotonic()
    process: asyncio.subprocess.Process | None = None

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=run_env,
        )

        if process.stdout is None or process.stderr is None:
            raise RuntimeError("Process stdout/stderr is None")

        stdout_buffer: list[str] = []
        stderr_buffer: list[str] = []

        try:
            await asyncio.wait_for(
                asyncio.gather(
                    _read_stream(process.stdout, on_stdout, stdout_buffer),
                    _read_stream(process.stderr, on_stderr, stderr_buffer),
                    process.wait(),
                ),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, TimeoutError):
            process.kill()
            await process.wait()
            duration_ms = int((time.monotonic() - start_time) * 1000)
            return -1, "", f"Command timed out after {timeout}s", duration_ms

        duration_ms = int((time.monotonic() - start_time) * 1000)
        return process.returncode or 0, "".join(stdout_buffer), "".join(stderr_buffer), duration_ms

    except Exception as e:
        # Missing executable, unusable cwd or unreadable output
        duration_ms = int((time.monotonic() - start_time) * 1000)
        return -1, "", str(e) or type(e).__name__, duration_ms

    finally:
        if process is not None and process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()


def cargo_publish_args(
    extra_args: Sequence[str] = ("--allow-dirty",),
    registry: str | None = None,
) -> list[str]:
    """Build the ``cargo publish`` command line."""
    args = ["cargo", "publish", *extra_args]
    if registry:
        args.extend(["--registry", registry])
    return args


async def run_in_package(
    package: Package,
    args: Sequence[str],
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_stdout: Callable[[str], None] | None = None,
    on_stderr: Callable[[str], None] | None = None,
) -> AttemptOutcome:
    """Run a program in a package directory.

    A non-zero exit is a failure whose diagnostic is the captured stderr,
    or stdout when stderr is empty.

    Args:
        package: Package to run in.
        args: Program and its arguments.
        env: Additional environment variables.
        timeout: Timeout in seconds.
        on_stdout: Callback for stdout lines.
        on_stderr: Callback for stderr lines.

    Returns:
        Attempt outcome.
    """
    run_env = env.copy() if env else {}
    run_env["CARGO_RELAY_PACKAGE_NAME"] = package.name
    run_env["CARGO_RELAY_PACKAGE_PATH"] = str(package.path)
    run_env["CARGO_RELAY_PACKAGE_VERSION"] = package.version

    exit_code, stdout, stderr, duration_ms = await run_command(
        args,
        cwd=package.path,
        env=run_env,
        timeout=timeout,
        on_stdout=on_stdout,
        on_stderr=on_stderr,
    )

    if exit_code == 0:
        return AttemptOutcome.ok(duration_ms)

    diagnostic = stderr.strip() or stdout.strip() or f"exit code {exit_code}"
    return AttemptOutcome.failed(diagnostic, duration_ms)
