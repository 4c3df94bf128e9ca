"""cargo-relay commands."""

from cargo_relay.commands.base import Command, CommandContext, SyncCommand
from cargo_relay.commands.list import (
    ListCommand,
    ListFormat,
    ListOptions,
    ListResult,
    PackageInfo,
    handle_list_command,
    list_packages,
)
from cargo_relay.commands.publish import (
    PublishCommand,
    PublishCommandResult,
    PublishOptions,
    handle_publish_command,
    publish,
)

__all__ = [
    # Base
    "Command",
    "SyncCommand",
    "CommandContext",
    # List
    "ListCommand",
    "ListOptions",
    "ListResult",
    "ListFormat",
    "PackageInfo",
    "list_packages",
    "handle_list_command",
    # Publish
    "PublishCommand",
    "PublishOptions",
    "PublishCommandResult",
    "publish",
    "handle_publish_command",
]
