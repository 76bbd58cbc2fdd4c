"""Domain port for the outbound command and coordination channels."""

from __future__ import annotations

from typing import Protocol, Sequence

from iiot_coordinator.domain.entities.commands import Command, LineCoordinationAction


class ICommandChannel(Protocol):
    """Hands commands to the transport; delivery is the transport's concern."""

    async def publish_commands(self, commands: Sequence[Command]) -> int:
        """Publish device commands and return how many were handed off."""
        ...

    async def publish_line_action(self, action: LineCoordinationAction) -> None:
        """Publish a line-scoped action for the line coordination consumer."""
        ...
