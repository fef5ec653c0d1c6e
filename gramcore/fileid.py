"""Bot-style file identifiers and file name, extension, size and location lookup."""

from __future__ import annotations

import base64
import binascii
import random
import re
import struct
from datetime import datetime
from typing import Any

from .helpers import parse_int32
from .mimes import mime_types
from .types import (
    Document,
    DocumentAttributeAnimated,
    DocumentAttributeAudio,
    DocumentAttributeFilename,
    DocumentAttributeSticker,
    DocumentAttributeVideo,
    InputDocumentFileLocation,
    InputPhotoFileLocation,
    MessageMediaContact,
    MessageMediaDocument,
    MessageMediaPhoto,
    MessageMediaWebPage,
    Photo,
    photo_size_info,
)

DEFAULT_DC = 4

TYPE_PHOTO = 2
TYPE_VOICE = 3
TYPE_VIDEO = 4
TYPE_DOCUMENT = 5
TYPE_STICKER = 8
TYPE_AUDIO = 9
TYPE_ANIMATION = 10
TYPE_VIDEO_NOTE = 13

_DOCUMENT_TYPES = {
    TYPE_VOICE,
    TYPE_VIDEO,
    TYPE_DOCUMENT,
    TYPE_STICKER,
    TYPE_AUDIO,
    TYPE_ANIMATION,
    TYPE_VIDEO_NOTE,
}

_U64 = (1 << 64) - 1
_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_INT_TEXT = re.compile(r"[+-]?\d+")


def _timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d_%H-%M-%S")


def _suffix() -> int:
    return random.randrange(1000)


def _path_ext(name: str) -> str:
    """Return the extension of a path: the text from the last dot of its final element."""
    for index in range(len(name) - 1, -1, -1):
        char = name[index]
        if char in "/\\":
            break
        if char == ".":
            return name[index:]
    return ""


def _parse_int(text: str) -> int:
    if not _INT_TEXT.fullmatch(text):
        return 0
    return max(_I64_MIN, min(_I64_MAX, int(text)))


def _document_type(document: Document) -> int:
    for attr in document.attributes:
        if isinstance(attr, DocumentAttributeAudio):
            return TYPE_VOICE if attr.voice else TYPE_AUDIO
        if isinstance(attr, DocumentAttributeVideo):
            return TYPE_VIDEO_NOTE if attr.round_message else TYPE_VIDEO
        if isinstance(attr, DocumentAttributeSticker):
            return TYPE_STICKER
        if isinstance(attr, DocumentAttributeAnimated):
            return TYPE_ANIMATION
    return TYPE_DOCUMENT


def pack_bot_file_id(file: Any) -> str:
    """Pack a document or photo into a file id; '' when it cannot be packed."""
    if isinstance(file, MessageMediaDocument):
        file = file.document
    elif isinstance(file, MessageMediaPhoto):
        file = file.photo

    if isinstance(file, Document):
        file_type = _document_type(file)
    elif isinstance(file, Photo):
        file_type = TYPE_PHOTO
    else:
        return ""

    if not (file.id and file.access_hash and file.dc_id):
        return ""

    header = (file_type | (file.dc_id << 24)) & 0xFFFFFFFF
    raw = struct.pack("<IQQ", header, file.id & _U64, file.access_hash & _U64)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _decode_raw_url(file_id: str) -> bytes | None:
    if "=" in file_id:
        return None
    padded = file_id + "=" * (-len(file_id) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError):
        return None


def unpack_bot_file_id(file_id: str) -> tuple[int, int, int, int]:
    """Return (id, access_hash, file_type, dc_id); zeros for an unknown format."""
    data = _decode_raw_url(file_id)
    if data is None:
        return 0, 0, 0, 0

    if len(data) == 20:
        header, file_ref, access_hash = struct.unpack("<Iqq", data)
        return file_ref, access_hash, header & 0x00FFFFFF, (header >> 24) & 0xFF

    parts = data.decode("utf-8", errors="replace").split("_", 3)
    if len(parts) == 4:
        file_type = parse_int32(_parse_int(parts[0]))
        dc_id = parse_int32(_parse_int(parts[1]))
        return _parse_int(parts[2]), _parse_int(parts[3]), file_type, dc_id

    return 0, 0, 0, 0


def resolve_bot_file_id(file_id: str) -> MessageMediaPhoto | MessageMediaDocument:
    """Turn a file id back into a media object."""
    file_ref, access_hash, file_type, dc_id = unpack_bot_file_id(file_id)
    if not (file_ref and access_hash and file_type and dc_id):
        raise ValueError("failed to resolve file id: unrecognized format")

    if file_type == TYPE_PHOTO:
        return MessageMediaPhoto(photo=Photo(id=file_ref, access_hash=access_hash, dc_id=dc_id))

    if file_type in _DOCUMENT_TYPES:
        attributes: list = {
            TYPE_VOICE: [DocumentAttributeAudio(voice=True)],
            TYPE_VIDEO: [DocumentAttributeVideo(round_message=False)],
            TYPE_STICKER: [DocumentAttributeSticker()],
            TYPE_AUDIO: [DocumentAttributeAudio()],
            TYPE_ANIMATION: [DocumentAttributeAnimated()],
            TYPE_VIDEO_NOTE: [DocumentAttributeVideo(round_message=True)],
        }.get(file_type, [])
        return MessageMediaDocument(
            document=Document(
                id=file_ref, access_hash=access_hash, dc_id=dc_id, attributes=attributes
            )
        )

    raise ValueError("failed to resolve file id: unknown file type")


def _document_name(document: Document) -> str:
    name = ""
    for attr in document.attributes:
        if isinstance(attr, DocumentAttributeFilename):
            if attr.file_name:
                return attr.file_name
        elif isinstance(attr, DocumentAttributeAudio):
            if attr.title:
                name = attr.title + ".mp3"
        elif isinstance(attr, DocumentAttributeVideo):
            name = f"video_{_timestamp()}_{_suffix()}.mp4"
        elif isinstance(attr, DocumentAttributeAnimated):
            name = f"animation_{_timestamp()}_{_suffix()}.gif"
        elif isinstance(attr, DocumentAttributeSticker):
            return f"sticker_{_timestamp()}_{_suffix()}.webp"
    if name:
        return name
    if document.mime_type:
        return f"file_{_timestamp()}_{_suffix()}{mime_types.ext(document.mime_type)}"
    return f"file_{_timestamp()}_{_suffix()}"


def get_file_name(media: Any) -> str:
    """Return the file name of a media object, inventing one where none is stored."""
    if isinstance(media, MessageMediaDocument) and isinstance(media.document, Document):
        return _document_name(media.document)
    if isinstance(media, Document):
        return _document_name(media)
    if isinstance(media, (MessageMediaPhoto, Photo)):
        return f"photo_{_timestamp()}_{_suffix()}.jpg"
    if isinstance(media, MessageMediaContact):
        return f"contact_{media.first_name}_{_suffix()}.vcf"
    if isinstance(media, InputPhotoFileLocation):
        return f"photo_file_{_timestamp()}_{_suffix()}.jpg"
    return f"file_{_timestamp()}_{_suffix()}"


def _attribute_ext(attr: Any) -> str:
    if isinstance(attr, DocumentAttributeAudio):
        return ".mp3"
    if isinstance(attr, DocumentAttributeVideo):
        return ".mp4"
    if isinstance(attr, DocumentAttributeAnimated):
        return ".gif"
    if isinstance(attr, DocumentAttributeSticker):
        return ".webp"
    return ""


def get_file_ext(media: Any) -> str:
    """Return the file extension of a media object, or ''."""
    if isinstance(media, MessageMediaDocument):
        document = media.document
        if document is None:
            return ""
        known = mime_types.ext(document.mime_type)
        if known:
            return known
        return next(
            (ext for ext in map(_attribute_ext, document.attributes) if ext), ""
        )
    if isinstance(media, Document):
        for attr in media.attributes:
            if isinstance(attr, DocumentAttributeFilename):
                return _path_ext(attr.file_name)
            ext = _attribute_ext(attr)
            if ext:
                return ext
        return ".file"
    if isinstance(media, (MessageMediaPhoto, Photo)):
        return ".jpg"
    if isinstance(media, MessageMediaContact):
        return ".vcf"
    return ""


def get_file_size(media: Any) -> int:
    """Return the byte size of a media object, or 0."""
    if isinstance(media, MessageMediaDocument):
        return media.document.size if media.document is not None else 0
    if isinstance(media, MessageMediaPhoto):
        photo = media.photo
        if not isinstance(photo, Photo) or not photo.sizes:
            return 0
        return photo_size_info(photo.sizes[-1])[0]
    return 0


def get_file_location(file: Any) -> tuple[Any, int, int, str]:
    """Return (input location, datacenter, size, file name) for a downloadable object."""
    if isinstance(file, (InputDocumentFileLocation, InputPhotoFileLocation)):
        return file, DEFAULT_DC, 0, ""

    if callable(getattr(file, "is_media", None)) and callable(getattr(file, "media", None)):
        if not file.is_media():
            raise ValueError("message is not media")
        file = file.media()

    location: Any = None
    if isinstance(file, (Photo, Document)):
        location = file
    elif isinstance(file, MessageMediaDocument):
        location = file.document
    elif isinstance(file, MessageMediaPhoto):
        location = file.photo
    elif isinstance(file, MessageMediaWebPage):
        page = file.webpage
        if page is not None:
            location = page.photo if page.photo is not None else page.document
    else:
        raise ValueError("unsupported file type")

    if isinstance(location, Document):
        return (
            InputDocumentFileLocation(
                id=location.id,
                access_hash=location.access_hash,
                file_reference=location.file_reference,
                thumb_size="",
            ),
            location.dc_id,
            location.size,
            get_file_name(location),
        )
    if isinstance(location, Photo):
        if not location.sizes:
            raise ValueError("photo has no sizes")
        size, size_type = photo_size_info(location.sizes[-1])
        return (
            InputPhotoFileLocation(
                id=location.id,
                access_hash=location.access_hash,
                file_reference=location.file_reference,
                thumb_size=size_type,
            ),
            location.dc_id,
            size,
            get_file_name(location),
        )
    raise ValueError("unsupported file type")