"""MIME type lookup by extension, content sniffing or a remote request."""

from __future__ import annotations

import os
import urllib.request
from typing import Optional

from .helpers import is_url

_USER_AGENT = "Mozilla/5.0 (Windows NT 6.1; rv:60.0) Gecko/20100101 Firefox/60.0"
_SNIFF_LEN = 512

DEFAULT_MIME_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tga": "image/x-tga",
    ".tiff": "image/tiff",
    ".psd": "image/vnd.adobe.photoshop",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/avi",
    ".flv": "video/x-flv",
    ".m4v": "video/x-m4v",
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".3gp": "video/3gpp",
    ".mp3": "audio/mpeg",
    ".m4a": "audio/m4a",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".flac": "audio/x-flac",
    ".opus": "audio/opus",
    ".wav": "audio/wav",
    ".alac": "audio/x-alac",
    ".tgs": "application/x-tgsticker",
}

_HTML_TAGS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
)
_WHITESPACE = b"\t\n\x0c\r "

_EXACT_SIGNATURES = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", "text/plain; charset=utf-8"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"BM", "image/bmp"),
)

_LATER_SIGNATURES = (
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b".snd", "audio/basic"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"ID3", "audio/mpeg"),
)

_ARCHIVE_SIGNATURES = (
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"\x00asm", "application/wasm"),
)

_BINARY_BYTES = frozenset([*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)])


def _matches_html(data: bytes) -> bool:
    body = data.lstrip(_WHITESPACE)
    for tag in _HTML_TAGS:
        if len(body) < len(tag) + 1:
            continue
        if body[: len(tag)].upper() != tag:
            continue
        if body[len(tag)] in b" >":
            return True
    return False


def _riff_kind(data: bytes, head: bytes, kind: bytes) -> bool:
    return data[:4] == head and data[8 : 8 + len(kind)] == kind


def _is_mp4(data: bytes) -> bool:
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if len(data) < box_size or box_size % 4 != 0:
        return False
    if data[4:8] != b"ftyp":
        return False
    for start in range(8, box_size, 4):
        if start == 12:
            continue
        if data[start : start + 3] == b"mp4":
            return True
    return False


def detect_content_type(data: bytes) -> str:
    """Guess a MIME type from the leading bytes of a file."""
    data = data[:_SNIFF_LEN]
    if _matches_html(data):
        return "text/html; charset=utf-8"
    if data.lstrip(_WHITESPACE).startswith(b"<?xml"):
        return "text/xml; charset=utf-8"
    for signature, mime in _EXACT_SIGNATURES:
        if data.startswith(signature):
            return mime
    if _riff_kind(data, b"RIFF", b"WEBPVP"):
        return "image/webp"
    for signature, mime in _LATER_SIGNATURES[:1]:
        if data.startswith(signature):
            return mime
    if _riff_kind(data, b"RIFF", b"WAVE"):
        return "audio/wave"
    if _riff_kind(data, b"FORM", b"AIFF"):
        return "audio/aiff"
    for signature, mime in _LATER_SIGNATURES[1:]:
        if data.startswith(signature):
            return mime
    if _riff_kind(data, b"RIFF", b"AVI "):
        return "video/avi"
    if _is_mp4(data):
        return "video/mp4"
    for signature, mime in _ARCHIVE_SIGNATURES:
        if data.startswith(signature):
            return mime
    if any(byte in _BINARY_BYTES for byte in data):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def _extension(path: str) -> str:
    base = os.path.basename(path)
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


class MimeTypeManager:
    """Maps file extensions to MIME types and guesses types of files."""

    def __init__(self, mime_types: Optional[dict[str, str]] = None) -> None:
        self.mime_types: dict[str, str] = dict(mime_types or {})

    def add_mime(self, ext: str, mime: str) -> None:
        self.mime_types[ext] = mime

    def match(self, file_path: str) -> str:
        """Return the MIME type of a URL, a known extension or a file's content."""
        if is_url(file_path):
            return self._match_url(file_path)
        known = self.mime_types.get(_extension(file_path))
        if known is not None:
            return known
        try:
            with open(file_path, "rb") as handle:
                head = handle.read(_SNIFF_LEN)
        except OSError:
            return ""
        if not head:
            return ""
        # The whole fixed-size buffer is sniffed, unread tail bytes included.
        return detect_content_type(head.ljust(_SNIFF_LEN, b"\x00"))

    @staticmethod
    def _match_url(url: str) -> str:
        request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        try:
            with urllib.request.urlopen(request, timeout=4) as response:
                if response.status == 200:
                    return response.headers.get("Content-Type") or ""
        except (OSError, ValueError):
            return ""
        return ""

    def ext(self, mime: str) -> str:
        """Return the first extension registered for the MIME type, or ''."""
        return next((ext for ext, known in self.mime_types.items() if known == mime), "")

    def is_photo(self, mime: str) -> bool:
        return mime.startswith("image/") and "image/webp" not in mime

    def mime(self, file_path: str) -> tuple[str, bool]:
        """Return the MIME type of the file and whether it is a photo."""
        found = self.match(file_path)
        return found, self.is_photo(found)


mime_types = MimeTypeManager(DEFAULT_MIME_TYPES)


def inline_document_type(mime_type: str, voice_note: bool) -> str:
    """Classify a document for inline results by its MIME type."""
    if voice_note:
        return "voice"
    if mime_type in {
        "audio/mp3", "audio/mpeg", "audio/ogg", "audio/x-flac", "audio/x-alac",
        "audio/x-wav", "audio/x-m4a", "audio/aac", "audio/opus",
    }:
        return "audio"
    if mime_type == "image/gif":
        return "gif"
    if mime_type in {"image/jpeg", "image/png"}:
        return "photo"
    if mime_type in {"image/webp", "application/x-tgsticker"}:
        return "sticker"
    if mime_type in {"video/mp4", "video/x-matroksa", "video/webm"}:
        return "video"
    return "file"