import pytest

from chatbridge.chat_import.enums import MediaType, MessageType, Platform
from chatbridge.chat_import.errors import InvalidTimeFormat
from chatbridge.chat_import.whatsapp_importer import (
    Idle,
    InMessage,
    finish,
    normalize_whatsapp_content,
    parse_whatsapp_datetime,
    parse_whatsapp_messages,
    parse_whatsapp_txt,
    step,
)

from conftest import utc_ms


def test_continuation_lines_join_with_newline():
    messages = parse_whatsapp_messages("2021-06-21, 4:23 a.m. - Tom: Hello\nworld".split("\n"))
    assert len(messages) == 1
    assert messages[0].sender == "Tom"
    assert messages[0].content == "Hello\nworld"


def test_step_transitions():
    state, emitted = step(Idle(), "2021-06-21, 4:23 a.m. - Tom: Hello")
    assert isinstance(state, InMessage)
    assert emitted is None

    state, emitted = step(state, "second line")
    assert emitted is None
    assert state.pending.content == "Hello\nsecond line"

    first = state.pending
    state, emitted = step(state, "2021-06-21, 4:24 a.m. - Ann: Hi")
    assert emitted == first
    assert state.pending.sender == "Ann"

    state, emitted = step(state, "2021-06-21, 4:25 a.m. - Ann left")
    assert state == Idle()
    assert emitted.sender == "Ann"

    assert finish(state) is None


def test_continuation_does_not_mutate_emitted_message():
    state, _ = step(Idle(), "2021-06-21, 4:23 a.m. - Tom: Hello")
    before = state.pending
    step(state, "more")
    assert before.content == "Hello"


def test_blank_and_orphan_lines_are_ignored():
    assert step(Idle(), "orphan") == (Idle(), None)
    state, _ = step(Idle(), "2021-06-21, 4:23 a.m. - Tom: Hello")
    assert step(state, "   ") == (state, None)


@pytest.mark.parametrize("time_str, expected_hour", [
    ("12:05 a.m.", 0),
    ("4:23 a.m.", 4),
    ("12:05 p.m.", 12),
    ("11:45 p.m.", 23),
])
def test_twelve_hour_clock(time_str, expected_hour):
    minute = int(time_str.split(":")[1][:2])
    assert parse_whatsapp_datetime("2021-06-21", time_str) == utc_ms(2021, 6, 21, expected_hour, minute)


def test_invalid_time_format():
    with pytest.raises(InvalidTimeFormat):
        parse_whatsapp_datetime("2021-06-21", "25 o'clock")
    with pytest.raises(InvalidTimeFormat):
        parse_whatsapp_datetime("2021-02-30", "4:23 a.m.")


@pytest.mark.parametrize("text, expected", [
    ("IMG-0001.jpg (file attached)", ("[Photo]", MessageType.MEDIA, MediaType.PHOTO)),
    ("VID-0001.MP4 (file attached)", ("[Video]", MessageType.MEDIA, MediaType.VIDEO)),
    ("PTT-0001.opus (file attached)", ("[Audio]", MessageType.MEDIA, MediaType.AUDIO)),
    ("ticket.pdf (file attached)", ("[Document]", MessageType.MEDIA, MediaType.DOCUMENT)),
    ("archive.zip (file attached)", ("[File]", MessageType.MEDIA, MediaType.FILE)),
    ("<Media omitted>", ("[Media]", MessageType.MEDIA, MediaType.UNKNOWN)),
    ("image omitted", ("[Photo]", MessageType.MEDIA, MediaType.PHOTO)),
    ("video omitted", ("[Video]", MessageType.MEDIA, MediaType.VIDEO)),
    ("audio omitted", ("[Audio]", MessageType.MEDIA, MediaType.AUDIO)),
    ("sticker omitted", ("[Sticker]", MessageType.STICKER, MediaType.STICKER)),
    ("GIF omitted", ("[GIF]", MessageType.MEDIA, MediaType.GIF)),
    ("Contact card omitted", ("[Contact]", MessageType.MEDIA, MediaType.CONTACT)),
    ("Location: https://maps.example/?q=1,2", ("[Location]", MessageType.MEDIA, MediaType.LOCATION)),
    ("see you at 5", ("see you at 5", MessageType.TEXT, None)),
])
def test_content_normalization(text, expected):
    assert normalize_whatsapp_content(text) == expected


def test_parse_whatsapp_export(whatsapp_export):
    conv = parse_whatsapp_txt(whatsapp_export, "WhatsApp Chat with Tom.txt")

    assert conv.source == Platform.WHATSAPP
    assert conv.title == "Tom & Ann"
    assert conv.total_messages == 3

    # 12:10 a.m. sorts before 4:23 a.m.
    assert [m.sender for m in conv.messages] == ["Ann", "Tom", "Ann"]
    assert conv.messages[0].content == "[Media]"
    assert conv.messages[1].content == "Hello\nworld"
    assert conv.messages[2].content == "[Photo]"

    timestamps = [m.timestamp for m in conv.messages]
    assert timestamps == sorted(timestamps)
    assert timestamps[1] == utc_ms(2021, 6, 21, 4, 23)


def test_group_title_counts_participants():
    content = "\n".join([
        "2021-06-21, 4:23 a.m. - A: one",
        "2021-06-21, 4:24 a.m. - B: two",
        "2021-06-21, 4:25 a.m. - C: three",
    ])
    assert parse_whatsapp_txt(content, "g.txt").title == "WhatsApp Chat (3 participants)"
