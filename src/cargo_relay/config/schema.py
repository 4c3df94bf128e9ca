"""Configuration schema for cargo-relay.yaml."""

from __future__ import annotations

import fnmatch

from pydantic import BaseModel, Field


class PublishConfig(BaseModel):
    """Settings for the publish step."""

    max_retries: int = Field(default=3, ge=0, le=20, description="Retries per package")
    backoff_base: float = Field(
        default=1.0,
        gt=0,
        description="Seconds multiplied by 2**retry before each retry",
    )
    args: list[str] = Field(
        default_factory=lambda: ["--allow-dirty"],
        description="Extra arguments for cargo publish",
    )
    registry: str | None = Field(default=None, description="Registry name passed as --registry")
    timeout: float | None = Field(default=None, gt=0, description="Per-attempt timeout in seconds")
    env: dict[str, str] = Field(default_factory=dict, description="Extra environment variables")


class RelayConfig(BaseModel):
    """Root configuration model."""

    publish: PublishConfig = Field(default_factory=PublishConfig)
    exclude: list[str] = Field(
        default_factory=list,
        description="Package name patterns that are never published",
    )

    def is_excluded(self, name: str) -> bool:
        """Check whether a package name matches an exclude pattern."""
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.exclude)
