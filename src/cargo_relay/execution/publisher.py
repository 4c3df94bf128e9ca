"""Sequential publishing with retry and exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cargo_relay.errors import PublishError
from cargo_relay.execution.results import AttemptOutcome, PublishReport, PublishResult
from cargo_relay.execution.runner import cargo_publish_args, run_in_package
from cargo_relay.workspace.package import Package

logger = logging.getLogger(__name__)

PublishFn = Callable[[Package], Awaitable[AttemptOutcome]]
SleepFn = Callable[[float], Awaitable[None]]


class CargoPublisher:
    """Publish capability backed by ``cargo publish``.

    Attributes:
        command: Full command line run in each package directory.
        env: Extra environment variables.
        timeout: Per-attempt timeout in seconds, None for no limit.
    """

    def __init__(
        self,
        args: Sequence[str] = ("--allow-dirty",),
        *,
        registry: str | None = None,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        output_handler: Callable[[str, str, bool], None] | None = None,
    ) -> None:
        self.command = cargo_publish_args(args, registry)
        self.env = dict(env or {})
        self.timeout = timeout
        self.output_handler = output_handler

    async def __call__(self, package: Package) -> AttemptOutcome:
        on_out = None
        on_err = None
        if self.output_handler:
            handler = self.output_handler

            def _on_out(line: str) -> None:
                handler(package.name, line, False)

            def _on_err(line: str) -> None:
                handler(package.name, line, True)

            on_out = _on_out
            on_err = _on_err

        return await run_in_package(
            package,
            self.command,
            env=self.env,
            timeout=self.timeout,
            on_stdout=on_out,
            on_stderr=on_err,
        )


class PublishExecutor:
    """Publish packages one at a time, retrying failed attempts.

    Packages are processed strictly in the given order. A package whose
    retries are exhausted is recorded as failed and the next package is
    attempted regardless.

    Attributes:
        max_retries: Retries allowed per package after the first attempt.
        backoff_base: Seconds; the wait before retry ``n`` is ``backoff_base * 2**n``.
    """

    def __init__(
        self,
        publisher: PublishFn | None = None,
        *,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize executor.

        Args:
            publisher: Publish capability, `CargoPublisher` by default.
            max_retries: Retries per package, must not be negative.
            backoff_base: Backoff unit in seconds.
            sleep: Awaitable used for backoff waits.
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.publisher: PublishFn = publisher or CargoPublisher()
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep

    def _retrying(self, package: Package) -> AsyncRetrying:
        def log_retry(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.warning(
                "Publishing %s failed (attempt %d/%d), retrying in %.1fs: %s",
                package.name,
                retry_state.attempt_number,
                self.max_retries + 1,
                delay,
                exc.diagnostic if isinstance(exc, PublishError) else exc,
            )

        # attempt_number starts at 1, so multiplier * 2**(n - 1) == backoff_base * 2**n
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=2 * self.backoff_base, exp_base=2),
            retry=retry_if_exception_type(PublishError),
            before_sleep=log_retry,
            sleep=self._sleep,
            reraise=True,
        )

    async def _attempt(self, package: Package) -> None:
        try:
            outcome = await self.publisher(package)
        except Exception as e:
            logger.debug("Publisher raised for %s", package.name, exc_info=True)
            raise PublishError(package.name, f"{type(e).__name__}: {e}") from e
        if not outcome.success:
            raise PublishError(package.name, outcome.diagnostic or "publish failed")

    async def publish_one(self, package: Package) -> PublishResult:
        """Publish a single package with retries.

        Args:
            package: Package to publish.

        Returns:
            The package's result. Failures are returned, never raised.
        """
        attempt_number = 0
        try:
            async for attempt in self._retrying(package):
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    await self._attempt(package)
        except PublishError as e:
            logger.error("Giving up on %s after %d attempts", package.name, attempt_number)
            return PublishResult.failure_result(
                package.name,
                retries=attempt_number - 1,
                error=e.diagnostic,
                version=package.version,
            )

        logger.info("Published %s %s", package.name, package.version)
        return PublishResult.success_result(
            package.name,
            retries=attempt_number - 1,
            version=package.version,
        )

    async def execute(
        self,
        packages: Sequence[Package],
        *,
        on_start: Callable[[Package], None] | None = None,
        on_result: Callable[[PublishResult], None] | None = None,
    ) -> PublishReport:
        """Publish packages in order.

        Args:
            packages: Packages in publish order.
            on_start: Called before a package's first attempt.
            on_result: Called with each result as soon as it is known.

        Returns:
            Report with one result per package, in input order.
        """
        report = PublishReport()
        for package in packages:
            if on_start:
                on_start(package)
            result = await self.publish_one(package)
            report.results.append(result)
            if on_result:
                on_result(result)
        return report


async def publish_sequential(
    packages: Sequence[Package],
    *,
    max_retries: int = 3,
    backoff_base: float = 1.0,
    publisher: PublishFn | None = None,
) -> PublishReport:
    """Convenience function for sequential publishing.

    Args:
        packages: Packages in publish order.
        max_retries: Retries per package.
        backoff_base: Backoff unit in seconds.
        publisher: Publish capability, `CargoPublisher` by default.

    Returns:
        Report with all results.
    """
    executor = PublishExecutor(publisher, max_retries=max_retries, backoff_base=backoff_base)
    return await executor.execute(packages)
