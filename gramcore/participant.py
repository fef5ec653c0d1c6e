"""Channel participant changes and how to classify them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .types import (
    Channel,
    ChannelParticipant,
    ChannelParticipantAdmin,
    ChannelParticipantBanned,
    ChannelParticipantLeft,
    User,
)


@dataclass
class ParticipantUpdate:
    """A change of one user's membership in a channel."""

    client: Any = None
    original_update: Any = None
    channel: Optional[Channel] = None
    user: Optional[User] = None
    actor: Optional[User] = None
    old: Any = None
    new: Any = None
    invite: Any = None
    date: int = 0

    def channel_id(self) -> int:
        return self.channel.id if self.channel is not None else 0

    def user_id(self) -> int:
        return self.user.id if self.user is not None else 0

    def actor_id(self) -> int:
        return self.actor.id if self.actor is not None else 0

    def _self_action(self) -> Optional[bool]:
        actor, user = self.actor_id(), self.user_id()
        if actor and user:
            return actor == user
        return None

    def is_added(self) -> bool:
        """Tell whether someone else added the user."""
        if self._self_action() is True:
            return False
        if self.old is not None and self.new is not None:
            return isinstance(self.old, (ChannelParticipantBanned, ChannelParticipantLeft)) and isinstance(
                self.new, ChannelParticipant
            )
        if self.old is None and self.new is not None:
            return isinstance(self.new, (ChannelParticipant, ChannelParticipantAdmin))
        return False

    def is_left(self) -> bool:
        return self.new is None

    def is_joined(self) -> bool:
        """Tell whether the user joined by themselves."""
        if self._self_action() is False:
            return False
        if self.old is not None and self.new is not None:
            return isinstance(self.old, (ChannelParticipantLeft, ChannelParticipantBanned)) and isinstance(
                self.new, ChannelParticipant
            )
        if self.old is None and self.new is not None:
            return isinstance(self.new, ChannelParticipant)
        return False

    def is_banned(self) -> bool:
        return isinstance(self.old, ChannelParticipant) and isinstance(self.new, ChannelParticipantBanned)

    def is_kicked(self) -> bool:
        return isinstance(self.old, ChannelParticipant) and isinstance(self.new, ChannelParticipantLeft)

    def is_promoted(self) -> bool:
        return isinstance(self.old, (ChannelParticipant, ChannelParticipantBanned)) and isinstance(
            self.new, ChannelParticipantAdmin
        )

    def is_demoted(self) -> bool:
        return isinstance(self.old, ChannelParticipantAdmin) and isinstance(
            self.new, (ChannelParticipant, ChannelParticipantBanned)
        )