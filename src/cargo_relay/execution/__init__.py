"""Publish execution."""

from cargo_relay.execution.publisher import (
    CargoPublisher,
    PublishExecutor,
    PublishFn,
    publish_sequential,
)
from cargo_relay.execution.results import AttemptOutcome, PublishReport, PublishResult
from cargo_relay.execution.runner import cargo_publish_args, run_command, run_in_package

__all__ = [
    "AttemptOutcome",
    "CargoPublisher",
    "PublishExecutor",
    "PublishFn",
    "PublishReport",
    "PublishResult",
    "cargo_publish_args",
    "publish_sequential",
    "run_command",
    "run_in_package",
]
