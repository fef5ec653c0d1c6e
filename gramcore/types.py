"""Plain data types for peers, media, messages and channel participants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass
class PeerUser:
    user_id: int = 0


@dataclass
class PeerChat:
    chat_id: int = 0


@dataclass
class PeerChannel:
    channel_id: int = 0


Peer = Union[PeerUser, PeerChat, PeerChannel]


@dataclass
class DocumentAttributeFilename:
    file_name: str = ""


@dataclass
class DocumentAttributeAudio:
    voice: bool = False
    title: str = ""
    performer: str = ""
    duration: int = 0


@dataclass
class DocumentAttributeVideo:
    round_message: bool = False
    duration: float = 0.0
    w: int = 0
    h: int = 0


@dataclass
class DocumentAttributeSticker:
    alt: str = ""


@dataclass
class DocumentAttributeAnimated:
    pass


@dataclass
class Document:
    id: int = 0
    access_hash: int = 0
    file_reference: bytes = b""
    dc_id: int = 0
    size: int = 0
    mime_type: str = ""
    attributes: list = field(default_factory=list)


@dataclass
class PhotoSize:
    type: str = ""
    size: int = 0
    w: int = 0
    h: int = 0


@dataclass
class PhotoStrippedSize:
    type: str = ""
    data: bytes = b""


@dataclass
class PhotoCachedSize:
    type: str = ""
    data: bytes = b""


@dataclass
class PhotoSizeEmpty:
    type: str = ""


@dataclass
class PhotoSizeProgressive:
    type: str = ""
    sizes: list = field(default_factory=list)


@dataclass
class Photo:
    id: int = 0
    access_hash: int = 0
    file_reference: bytes = b""
    dc_id: int = 0
    sizes: list = field(default_factory=list)


@dataclass
class WebPage:
    url: str = ""
    photo: Optional[Photo] = None
    document: Optional[Document] = None


@dataclass
class InputDocumentFileLocation:
    id: int = 0
    access_hash: int = 0
    file_reference: bytes = b""
    thumb_size: str = ""


@dataclass
class InputPhotoFileLocation:
    id: int = 0
    access_hash: int = 0
    file_reference: bytes = b""
    thumb_size: str = ""


@dataclass
class MessageMediaPhoto:
    photo: Optional[Photo] = None
    spoiler: bool = False


@dataclass
class MessageMediaDocument:
    document: Optional[Document] = None
    spoiler: bool = False


@dataclass
class MessageMediaContact:
    phone_number: str = ""
    first_name: str = ""
    last_name: str = ""
    user_id: int = 0


@dataclass
class MessageMediaGeo:
    lat: float = 0.0
    long: float = 0.0


@dataclass
class MessageMediaVenue:
    lat: float = 0.0
    long: float = 0.0
    title: str = ""
    address: str = ""


@dataclass
class MessageMediaPoll:
    question: str = ""
    answers: list = field(default_factory=list)


@dataclass
class MessageMediaDice:
    emoticon: str = ""
    value: int = 0


@dataclass
class MessageMediaWebPage:
    webpage: Optional[WebPage] = None


@dataclass
class MessageEntityBotCommand:
    offset: int = 0
    length: int = 0


@dataclass
class MessageReplyHeader:
    reply_to_msg_id: int = 0
    reply_to_top_id: int = 0
    forum_topic: bool = False
    reply_to_peer_id: Optional[Any] = None


@dataclass
class MessageObj:
    id: int = 0
    message: str = ""
    peer_id: Optional[Any] = None
    from_id: Optional[Any] = None
    reply_to: Optional[MessageReplyHeader] = None
    entities: list = field(default_factory=list)
    media: Optional[Any] = None
    fwd_from: Optional[Any] = None
    grouped_id: int = 0
    mentioned: bool = False
    out: bool = False
    date: int = 0
    reply_markup: Optional[Any] = None


@dataclass
class User:
    id: int = 0
    access_hash: int = 0
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    bot: bool = False


@dataclass
class Channel:
    id: int = 0
    access_hash: int = 0
    title: str = ""
    username: str = ""
    broadcast: bool = False


@dataclass
class ChannelParticipant:
    """An ordinary channel member."""

    user_id: int = 0
    date: int = 0


@dataclass
class ChannelParticipantAdmin:
    user_id: int = 0
    promoted_by: int = 0
    rank: str = ""
    date: int = 0


@dataclass
class ChannelParticipantBanned:
    peer: Optional[Any] = None
    kicked_by: int = 0
    left: bool = False
    date: int = 0


@dataclass
class ChannelParticipantLeft:
    peer: Optional[Any] = None


def photo_size_info(size: Any) -> tuple[int, str]:
    """Return the byte size and the size type of a photo size entry."""
    if isinstance(size, PhotoSize):
        return size.size, size.type
    if isinstance(size, PhotoStrippedSize):
        if len(size.data) < 3 or size.data[0] != 1:
            return len(size.data), size.type
        return len(size.data) + 622, size.type
    if isinstance(size, PhotoCachedSize):
        return len(size.data), size.type
    if isinstance(size, PhotoSizeEmpty):
        return 0, size.type
    if isinstance(size, PhotoSizeProgressive):
        return max(size.sizes, default=0), size.type
    return 0, "w"