# gramcore

Building blocks for a Telegram client, written in plain Python with no
third-party dependencies.

## Modules

- `gramcore.types` – dataclasses for peers (`PeerUser`, `PeerChat`,
  `PeerChannel`), documents and their attributes, photos and photo sizes,
  web pages, input file locations, message media, `MessageObj`, `User`,
  `Channel` and the channel participant kinds. `photo_size_info(size)` returns
  the byte size and size type of a photo size entry.
- `gramcore.helpers` – `get_flood_wait`, `get_error_code` and `match_error`
  read flood-wait seconds, datacenter and error codes out of error text;
  also `generate_random_long`, `is_url`, `is_phone`, `size_to_human`,
  `path_is_dir`, `sanitize_path`, `log_prefix` and `parse_int32`.
- `gramcore.mimes` – `MimeTypeManager` maps extensions to MIME types and back
  (`add_mime`, `ext`, `is_photo`), and `match`/`mime` find the type of a URL
  (by a GET request), a known extension or a file's leading bytes. A ready
  instance with common image, video, audio and sticker types is
  `gramcore.mimes.mime_types`. `inline_document_type(mime_type, voice_note)`
  classifies a document as voice, audio, gif, photo, sticker, video or file.
- `gramcore.fileid` – `pack_bot_file_id`, `unpack_bot_file_id` and
  `resolve_bot_file_id` for bot-style file ids, and `get_file_name`,
  `get_file_ext`, `get_file_size` and `get_file_location` for media objects.
- `gramcore.progress` – `ProgressManager` reports percentage (never going
  down between calls), ETA, average speed and a 20-cell text bar, and calls
  an edit callback with `(total_size, current_size)`.
- `gramcore.transfer` – `upload_file` and `download_file` move a file in
  parts over several threads through callables you supply, retrying failed
  parts up to three times and sleeping out flood waits. Also `WorkerPool`,
  `FileSource`, `Destination`, `UploadedFile`, `count_workers`,
  `chunk_size_calc`, `split_parts`, `undone_parts`, `validate_chunk_size`
  and `prettify_file_name`.
- `gramcore.participant` – `ParticipantUpdate` tells whether a channel
  membership change is an add, join, leave, ban, kick, promotion or demotion.
- `gramcore.message` – `NewMessage` gives chat type, chat and sender ids,
  reply and topic ids, media access (`photo`, `document`, `video`, `audio`,
  `animation`, `sticker`, `media_type`) and command parsing (`is_command`,
  `get_command`, `args`); `Album` groups messages of one media group.

## Installation

```
pip install .
```

## Examples

Bot file ids:

```python
from gramcore.types import Photo
from gramcore.fileid import pack_bot_file_id, unpack_bot_file_id, resolve_bot_file_id

file_id = pack_bot_file_id(Photo(id=1, access_hash=2, dc_id=4))
print(unpack_bot_file_id(file_id))   # (1, 2, 2, 4)
media = resolve_bot_file_id(file_id)  # MessageMediaPhoto
```

Progress:

```python
from gramcore.progress import ProgressManager

progress = ProgressManager(edit_interval=5)
progress.set_total_size(1000)
print(progress.get_progress(250))   # 25.0
print(progress.progress_bar(500))
```

Transfers over your own transport:

```python
from gramcore.transfer import upload_file, download_file

stored = {}

def save_part(file_id, part, total_parts, data, big):
    stored[part] = data

uploaded = upload_file(b"hello world", save_part, chunk_size=4, file_name="hello.txt")
print(uploaded.parts, uploaded.name, uploaded.md5_checksum)

blob = b"x" * 1000

def fetch_part(offset, limit):
    return blob[offset:offset + limit]

data = download_file(fetch_part, len(blob))  # bytes, since no dest was given
```

## What this package does not do

It holds no network connection, session or account: there is no client that
logs in, sends requests or receives updates. Uploads and downloads go through
the `save_part` and `fetch_part` callables you pass in. There is no update
dispatcher or handler registration, and no command-line program.

## Running the tests

```
pip install ".[test]"
pytest
```