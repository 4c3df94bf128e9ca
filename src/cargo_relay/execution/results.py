"""Publish result types."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AttemptOutcome:
    """Outcome of one call to the publish capability.

    Attributes:
        success: Whether the publish went through.
        diagnostic: Error text when it did not.
        duration_ms: Time spent on the attempt.
    """

    success: bool
    diagnostic: str | None = None
    duration_ms: int = 0

    @classmethod
    def ok(cls, duration_ms: int = 0) -> AttemptOutcome:
        return cls(success=True, duration_ms=duration_ms)

    @classmethod
    def failed(cls, diagnostic: str, duration_ms: int = 0) -> AttemptOutcome:
        return cls(success=False, diagnostic=diagnostic, duration_ms=duration_ms)


@dataclass(frozen=True)
class PublishResult:
    """Final outcome of publishing one package.

    Attributes:
        package_name: Name of the package.
        success: Whether any attempt succeeded.
        retries: Retries actually performed (0 when the first attempt worked).
        error: Diagnostic of the last failed attempt, None on success.
        version: Published version, for display.
    """

    package_name: str
    success: bool
    retries: int = 0
    error: str | None = None
    version: str = ""

    @property
    def attempts(self) -> int:
        """Total attempts made."""
        return self.retries + 1

    @property
    def failed(self) -> bool:
        return not self.success

    @classmethod
    def success_result(cls, package_name: str, retries: int = 0, version: str = "") -> PublishResult:
        return cls(package_name=package_name, success=True, retries=retries, version=version)

    @classmethod
    def failure_result(
        cls,
        package_name: str,
        retries: int,
        error: str | None,
        version: str = "",
    ) -> PublishResult:
        return cls(
            package_name=package_name,
            success=False,
            retries=retries,
            error=error,
            version=version,
        )


@dataclass
class PublishReport:
    """Ordered publish results for a whole run."""

    results: list[PublishResult] = field(default_factory=list)

    def __iter__(self) -> Iterator[PublishResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def all_success(self) -> bool:
        """True when every package was published."""
        return all(r.success for r in self.results)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def failed(self) -> list[PublishResult]:
        """Results of packages that could not be published."""
        return [r for r in self.results if r.failed]

    @property
    def package_names(self) -> list[str]:
        return [r.package_name for r in self.results]
