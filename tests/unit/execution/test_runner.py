"""Test subprocess runner."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cargo_relay.execution.runner import cargo_publish_args, run_command, run_in_package
from cargo_relay.workspace.package import Package


@pytest.mark.asyncio
async def test_run_command_success():
    with patch("asyncio.create_subprocess_exec") as mock_create:
        process = AsyncMock()
        process.returncode = 0
        process.wait.return_value = None

        process.stdout = AsyncMock()
        process.stdout.readline.side_effect = [b"stdout\n", b""]
        process.stderr = AsyncMock()
        process.stderr.readline.side_effect = [b"stderr\n", b""]

        mock_create.return_value = process

        exit_code, stdout, stderr, duration = await run_command(
            ["cargo", "publish"], cwd=Path("."), timeout=1.0
        )

        assert exit_code == 0
        assert "stdout" in stdout
        assert "stderr" in stderr
        assert duration >= 0
        assert mock_create.call_args.args == ("cargo", "publish")


@pytest.mark.asyncio
async def test_run_command_timeout():
    with patch("asyncio.create_subprocess_exec") as mock_create:
        process = AsyncMock()
        # kill is synchronous method
        process.kill = MagicMock()
        process.wait.return_value = None

        process.stdout = AsyncMock()
        process.stdout.readline.side_effect = [b""]
        process.stderr = AsyncMock()
        process.stderr.readline.side_effect = [b""]

        mock_create.return_value = process

        with patch("asyncio.wait_for", side_effect=asyncio.TimeoutError):
            exit_code, stdout, stderr, duration = await run_command(
                ["sleep", "10"], cwd=Path("."), timeout=0.1
            )

            assert exit_code == -1
            assert "timed out" in stderr
            process.kill.assert_called_once()
            process.wait.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_command_unreadable_output_kills_process():
    with patch("asyncio.create_subprocess_exec") as mock_create:
        process = AsyncMock()
        process.returncode = None
        process.kill = MagicMock()
        process.wait.return_value = None

        process.stdout = AsyncMock()
        process.stdout.readline.side_effect = [b""]
        process.stderr = AsyncMock()
        process.stderr.readline.side_effect = ValueError(
            "Separator is not found, and chunk exceed the limit"
        )

        mock_create.return_value = process

        exit_code, stdout, stderr, duration = await run_command(["cargo", "publish"], cwd=Path("."))

        assert exit_code == -1
        assert "Separator is not found" in stderr
        process.kill.assert_called_once()
        process.wait.assert_awaited()


@pytest.mark.asyncio
async def test_run_command_callbacks():
    stdout_cb = MagicMock()
    stderr_cb = MagicMock()

    with patch("asyncio.create_subprocess_exec") as mock_create:
        process = AsyncMock()
        process.returncode = 0
        process.stdout = AsyncMock()
        process.stdout.readline.side_effect = [b"out\n", b""]
        process.stderr = AsyncMock()
        process.stderr.readline.side_effect = [b"err\n", b""]
        mock_create.return_value = process

        await run_command(["cmd"], cwd=Path("."), on_stdout=stdout_cb, on_stderr=stderr_cb)

        stdout_cb.assert_called_with("out")
        stderr_cb.assert_called_with("err")


@pytest.mark.asyncio
async def test_run_command_missing_program():
    with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("no cargo")):
        exit_code, stdout, stderr, duration = await run_command(["cargo"], cwd=Path("."))

        assert exit_code == -1
        assert "no cargo" in stderr


@pytest.mark.asyncio
async def test_run_in_package_success():
    pkg = Package(name="demo-core", version="1.0.0", path=Path("/ws/crates/core"))

    with patch("cargo_relay.execution.runner.run_command") as mock_run:
        mock_run.return_value = (0, "ok", "", 10)

        outcome = await run_in_package(pkg, ["cargo", "publish"])

        assert outcome.success
        assert outcome.diagnostic is None
        assert outcome.duration_ms == 10

        call_kwargs = mock_run.call_args.kwargs
        assert call_kwargs["cwd"] == Path("/ws/crates/core")
        env = call_kwargs["env"]
        assert env["CARGO_RELAY_PACKAGE_NAME"] == "demo-core"
        assert env["CARGO_RELAY_PACKAGE_PATH"] == str(Path("/ws/crates/core"))
        assert env["CARGO_RELAY_PACKAGE_VERSION"] == "1.0.0"


@pytest.mark.asyncio
async def test_run_in_package_failure_uses_stderr():
    pkg = Package(name="demo-core", version="1.0.0", path=Path("."))

    with patch("cargo_relay.execution.runner.run_command") as mock_run:
        mock_run.return_value = (101, "Packaging...", "error: crate already uploaded\n", 5)

        outcome = await run_in_package(pkg, ["cargo", "publish"])

        assert not outcome.success
        assert outcome.diagnostic == "error: crate already uploaded"


@pytest.mark.asyncio
async def test_run_in_package_failure_falls_back_to_stdout():
    pkg = Package(name="demo-core", version="1.0.0", path=Path("."))

    with patch("cargo_relay.execution.runner.run_command") as mock_run:
        mock_run.return_value = (1, "something broke\n", "", 5)
        outcome = await run_in_package(pkg, ["x"])
        assert outcome.diagnostic == "something broke"

        mock_run.return_value = (2, "", "", 5)
        outcome = await run_in_package(pkg, ["x"])
        assert outcome.diagnostic == "exit code 2"


def test_cargo_publish_args():
    assert cargo_publish_args() == ["cargo", "publish", "--allow-dirty"]
    assert cargo_publish_args([], registry="internal") == [
        "cargo",
        "publish",
        "--registry",
        "internal",
    ]
