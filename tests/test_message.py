import pytest

from gramcore.message import (
    ENTITY_CHANNEL,
    ENTITY_CHAT,
    ENTITY_UNKNOWN,
    ENTITY_USER,
    Album,
    NewMessage,
)
from gramcore.types import (
    Channel,
    Document,
    DocumentAttributeAnimated,
    DocumentAttributeAudio,
    DocumentAttributeFilename,
    DocumentAttributeSticker,
    DocumentAttributeVideo,
    MessageEntityBotCommand,
    MessageMediaDocument,
    MessageMediaPhoto,
    MessageMediaPoll,
    MessageObj,
    MessageReplyHeader,
    PeerChannel,
    PeerChat,
    PeerUser,
    Photo,
)


def _msg(**kwargs):
    return NewMessage(message=MessageObj(**kwargs))


def _doc_msg(*attrs):
    doc = Document(id=5, attributes=list(attrs))
    return _msg(media=MessageMediaDocument(document=doc)), doc


def test_id_taken_from_message():
    assert _msg(id=42).id == 42


def test_private_chat():
    m = _msg(peer_id=PeerUser(user_id=7), from_id=PeerUser(user_id=99))
    assert m.chat_type() == ENTITY_USER
    assert m.is_private()
    assert m.chat_id() == 7
    assert m.sender_id() == 7


def test_group_chat_sender():
    m = _msg(peer_id=PeerChat(chat_id=11), from_id=PeerUser(user_id=3))
    assert m.is_group()
    assert m.chat_id() == 11
    assert m.sender_id() == 3


def test_channel_kinds():
    broadcast = NewMessage(message=MessageObj(peer_id=PeerChannel(channel_id=8)))
    assert broadcast.chat_type() == ENTITY_CHANNEL
    assert broadcast.is_channel()
    mega = NewMessage(
        message=MessageObj(peer_id=PeerChannel(channel_id=8)),
        channel=Channel(id=8, broadcast=False),
    )
    assert mega.chat_type() == ENTITY_CHAT
    assert _msg().chat_type() == ENTITY_UNKNOWN


def test_reply_and_topic():
    plain = _msg()
    assert not plain.is_reply()
    assert plain.reply_to_msg_id() == 0
    assert plain.topic_id() == (0, False)
    reply = _msg(reply_to=MessageReplyHeader(reply_to_msg_id=12, reply_to_top_id=30, forum_topic=True))
    assert reply.is_reply()
    assert reply.reply_to_msg_id() == 12
    assert reply.topic_id() == (30, True)
    top = _msg(reply_to=MessageReplyHeader(reply_to_msg_id=12, forum_topic=True))
    assert top.topic_id() == (12, True)


def test_forward():
    assert _msg(fwd_from=object()).is_forward()
    assert not _msg().is_forward()


def test_media_types():
    assert _msg().media_type() == ""
    assert not _msg().is_media()
    photo = Photo(id=1)
    pm = _msg(media=MessageMediaPhoto(photo=photo))
    assert pm.media_type() == "photo"
    assert pm.photo() is photo
    assert pm.document() is None
    assert _msg(media=MessageMediaPoll()).media_type() == "unknown"


def test_document_accessors():
    m, doc = _doc_msg(DocumentAttributeVideo())
    assert m.media_type() == "document"
    assert m.document() is doc
    assert m.video() is doc
    assert m.audio() is None
    assert m.animation() is None
    assert m.sticker() is None
    a, adoc = _doc_msg(DocumentAttributeAudio(voice=True))
    assert a.audio() is adoc
    g, gdoc = _doc_msg(DocumentAttributeAnimated())
    assert g.animation() is gdoc


@pytest.mark.parametrize(
    "attr",
    [DocumentAttributeSticker(), DocumentAttributeFilename(file_name="a.tgs"), DocumentAttributeFilename(file_name="b.webp")],
)
def test_sticker(attr):
    m, doc = _doc_msg(attr)
    assert m.sticker() is doc


def test_args():
    text = "/start hello world"
    assert _msg(message=text).args() == "hello world"
    assert _msg(message="/start").args() == ""


def test_command():
    text = "/ping now"
    m = _msg(message=text, entities=[MessageEntityBotCommand(offset=0, length=5)])
    assert m.is_command()
    assert m.get_command() == "/ping"
    assert not _msg(message=text).is_command()
    assert _msg(message=text).get_command() == ""


def test_album():
    first = _msg(id=1, reply_to=MessageReplyHeader(reply_to_msg_id=4))
    second = _msg(id=2)
    album = Album(grouped_id=77, messages=[first, second])
    assert album.ids() == [1, 2]
    assert album.is_reply()
    assert not album.is_forward()


def test_empty_album_raises():
    with pytest.raises(IndexError):
        Album().is_reply()