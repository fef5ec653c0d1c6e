"""Incoming message wrappers: chat classification, media access and command parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .types import (
    Channel,
    Document,
    DocumentAttributeAnimated,
    DocumentAttributeAudio,
    DocumentAttributeFilename,
    DocumentAttributeSticker,
    DocumentAttributeVideo,
    MessageEntityBotCommand,
    MessageMediaContact,
    MessageMediaDice,
    MessageMediaDocument,
    MessageMediaGeo,
    MessageMediaPhoto,
    MessageMediaVenue,
    MessageMediaWebPage,
    MessageObj,
    MessageReplyHeader,
    PeerChannel,
    PeerChat,
    PeerUser,
    Photo,
    User,
)

ENTITY_USER = "user"
ENTITY_CHAT = "chat"
ENTITY_CHANNEL = "channel"
ENTITY_UNKNOWN = "unknown"

_MEDIA_TYPES = (
    (MessageMediaPhoto, "photo"),
    (MessageMediaDocument, "document"),
    (MessageMediaVenue, "venue"),
    (MessageMediaContact, "contact"),
    (MessageMediaGeo, "geo"),
    (MessageMediaWebPage, "web_page"),
    (MessageMediaDice, "dice"),
)


def _peer_id(peer: Any) -> int:
    if isinstance(peer, PeerUser):
        return peer.user_id
    if isinstance(peer, PeerChat):
        return peer.chat_id
    if isinstance(peer, PeerChannel):
        return peer.channel_id
    return 0


@dataclass
class CustomFile:
    """Short description of a file attached to a message."""

    ext: str = ""
    file_id: str = ""
    name: str = ""
    size: int = 0


@dataclass
class DeleteMessage:
    """Messages deleted from a chat or channel."""

    client: Any = None
    channel_id: int = 0
    messages: list = field(default_factory=list)


@dataclass
class NewMessage:
    """A message together with the chat, channel and sender it came with."""

    message: MessageObj = field(default_factory=MessageObj)
    client: Any = None
    id: int = 0
    action: Any = None
    channel: Optional[Channel] = None
    chat: Any = None
    file: Optional[CustomFile] = None
    original_update: Any = None
    peer: Any = None
    sender: Optional[User] = None
    sender_chat: Optional[Channel] = None

    def __post_init__(self) -> None:
        if not self.id and self.message is not None:
            self.id = self.message.id

    def text(self) -> str:
        return self.message.message

    def reply_to_msg_id(self) -> int:
        reply = self.message.reply_to
        return reply.reply_to_msg_id if reply is not None else 0

    def topic_id(self) -> tuple[int, bool]:
        """Return the forum topic id and whether the message is in a topic."""
        reply = self.message.reply_to
        if isinstance(reply, MessageReplyHeader) and reply.forum_topic:
            if reply.reply_to_top_id:
                return reply.reply_to_top_id, True
            return reply.reply_to_msg_id, True
        return 0, False

    def chat_id(self) -> int:
        return _peer_id(self.message.peer_id)

    def sender_id(self) -> int:
        if self.is_private():
            return self.chat_id()
        return _peer_id(self.message.from_id)

    def chat_type(self) -> str:
        """Return one of the ENTITY_* kinds for the chat the message is in."""
        if self.message is None or self.message.peer_id is None:
            return ENTITY_UNKNOWN
        peer = self.message.peer_id
        if isinstance(peer, PeerUser):
            return ENTITY_USER
        if isinstance(peer, PeerChat):
            return ENTITY_CHAT
        if isinstance(peer, PeerChannel):
            if self.channel is not None and not self.channel.broadcast:
                return ENTITY_CHAT
            return ENTITY_CHANNEL
        return ENTITY_UNKNOWN

    def is_private(self) -> bool:
        return self.chat_type() == ENTITY_USER

    def is_group(self) -> bool:
        return self.chat_type() == ENTITY_CHAT

    def is_channel(self) -> bool:
        return self.chat_type() == ENTITY_CHANNEL

    def is_reply(self) -> bool:
        return self.message.reply_to is not None

    def is_forward(self) -> bool:
        return self.message.fwd_from is not None

    def media(self) -> Any:
        return self.message.media

    def is_media(self) -> bool:
        return self.media() is not None

    def media_type(self) -> str:
        """Return a short name for the kind of media, '' when there is none."""
        media = self.media()
        if media is None:
            return ""
        for kind, name in _MEDIA_TYPES:
            if isinstance(media, kind):
                return name
        return "unknown"

    def document(self) -> Optional[Document]:
        media = self.media()
        if isinstance(media, MessageMediaDocument) and isinstance(media.document, Document):
            return media.document
        return None

    def _document_with(self, attribute_type: type) -> Optional[Document]:
        doc = self.document()
        if doc is not None and any(isinstance(a, attribute_type) for a in doc.attributes):
            return doc
        return None

    def sticker(self) -> Optional[Document]:
        doc = self.document()
        if doc is None:
            return None
        for attr in doc.attributes:
            if isinstance(attr, DocumentAttributeSticker):
                return doc
            if isinstance(attr, DocumentAttributeFilename) and attr.file_name.endswith((".tgs", ".webp")):
                return doc
        return None

    def photo(self) -> Optional[Photo]:
        media = self.media()
        if isinstance(media, MessageMediaPhoto) and isinstance(media.photo, Photo):
            return media.photo
        return None

    def video(self) -> Optional[Document]:
        return self._document_with(DocumentAttributeVideo)

    def audio(self) -> Optional[Document]:
        return self._document_with(DocumentAttributeAudio)

    def animation(self) -> Optional[Document]:
        return self._document_with(DocumentAttributeAnimated)

    def args(self) -> str:
        """Return the text after the first space-separated word, stripped."""
        words = self.text().split(" ")
        if len(words) < 2:
            return ""
        return " ".join(words[1:]).strip()

    def is_command(self) -> bool:
        return any(isinstance(e, MessageEntityBotCommand) for e in self.message.entities)

    def get_command(self) -> str:
        """Return the bot command text, or '' when the message has none."""
        text = self.text()
        for entity in self.message.entities:
            if isinstance(entity, MessageEntityBotCommand) and text:
                raw = text.encode("utf-8")
                return raw[entity.offset : entity.offset + entity.length].decode("utf-8", errors="replace")
        return ""


@dataclass
class Album:
    """Messages that share one media group."""

    client: Any = None
    grouped_id: int = 0
    messages: list = field(default_factory=list)

    def is_reply(self) -> bool:
        return self.messages[0].is_reply()

    def is_forward(self) -> bool:
        return self.messages[0].is_forward()

    def ids(self) -> list[int]:
        return [m.id for m in self.messages]