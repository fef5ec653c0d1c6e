"""Building blocks for a Telegram client: types, helpers, MIME lookup, file ids, progress, transfers, participants and messages."""

__version__ = "0.1.0"

__all__ = [
    "types",
    "helpers",
    "mimes",
    "fileid",
    "progress",
    "transfer",
    "participant",
    "message",
]