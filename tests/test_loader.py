import pytest

from chatbridge.config import Config
from chatbridge.chat_import import extract_all_participants, load_chat_file, parse_conversation, parse_conversations
from chatbridge.chat_import.enums import Platform
from chatbridge.chat_import.errors import EmptyResultSet, FileTooLarge, UnrecognizedFormat
from chatbridge.chat_import.loader import decode_content


def test_dispatches_each_format(facebook_export, instagram_export, line_export, whatsapp_export):
    assert parse_conversation("fb.json", facebook_export).source == Platform.FACEBOOK
    assert parse_conversation("ig.json", instagram_export).source == Platform.INSTAGRAM
    assert parse_conversation("line.txt", line_export).source == Platform.LINE
    assert parse_conversation("wa.txt", whatsapp_export).source == Platform.WHATSAPP


def test_accepts_raw_bytes(line_export):
    conv = parse_conversation("line.txt", line_export.encode("utf-8"))
    assert conv.total_messages == 4


def test_decode_content_replaces_bad_bytes():
    assert decode_content(b"ok \xff") == "ok \ufffd"
    assert decode_content("already text") == "already text"


def test_unknown_txt_is_unrecognized():
    with pytest.raises(UnrecognizedFormat):
        parse_conversation("notes.txt", "milk\neggs")


def test_unknown_file_is_unrecognized():
    with pytest.raises(UnrecognizedFormat):
        parse_conversation("notes.md", "# heading")


def test_file_without_usable_messages_is_an_error():
    content = "Chat history with Tom\nSaved\n\n10:00\tTom\tno date header anywhere"
    with pytest.raises(EmptyResultSet):
        parse_conversation("line.txt", content)


def test_batch_isolates_failures(facebook_export, line_export):
    result = parse_conversations([
        ("fb.json", facebook_export),
        ("broken.json", "{nope"),
        ("notes.txt", "milk"),
        ("line.txt", line_export),
    ])

    assert [c.source for c in result.conversations] == [Platform.FACEBOOK, Platform.LINE]
    assert [e.file_name for e in result.errors] == ["broken.json", "notes.txt"]
    assert result.errors[0].error.startswith("Failed to parse broken.json:")

    payload = result.to_dict()
    assert payload["errors"][1] == {"fileName": "notes.txt", "error": result.errors[1].error}


def test_all_failed_batch_is_not_an_exception():
    result = parse_conversations([("a.txt", "x"), ("b.json", "[]")])
    assert result.conversations == []
    assert len(result.errors) == 2


def test_oversized_file_is_rejected_per_file(monkeypatch, facebook_export, line_export):
    monkeypatch.setattr(Config, "MAX_FILE_SIZE_MB", 0)
    result = parse_conversations([("fb.json", facebook_export), ("line.txt", line_export)])
    assert result.conversations == []
    assert all("File too large" in e.error for e in result.errors)


def test_every_message_is_well_formed(facebook_export, instagram_export, line_export, whatsapp_export):
    result = parse_conversations([
        ("fb.json", facebook_export),
        ("ig.json", instagram_export),
        ("line.txt", line_export),
        ("wa.txt", whatsapp_export),
    ])
    assert len(result.conversations) == 4
    for conv in result.conversations:
        timestamps = [m.timestamp for m in conv.messages]
        assert timestamps == sorted(timestamps)
        assert conv.total_messages == len(conv.messages)
        for m in conv.messages:
            assert m.sender
            assert m.content
            assert isinstance(m.timestamp, int) and m.timestamp > 0


def test_extract_all_participants(facebook_export, instagram_export):
    result = parse_conversations([("fb.json", facebook_export), ("ig.json", instagram_export)])
    rows = extract_all_participants(result.conversations)

    assert [(r["name"], r["platform"], r["conversationId"]) for r in rows] == [
        ("Alice", "facebook", "fb-json"),
        ("Bob", "facebook", "fb-json"),
        ("alice_ig", "instagram", "ig-json"),
        ("Bob", "instagram", "ig-json"),
    ]
    counts = {(r["name"], r["conversationId"]): r["messageCount"] for r in rows}
    assert counts[("Alice", "fb-json")] == 2
    assert counts[("Bob", "ig-json")] == 1


def test_load_chat_file_reads_from_disk(tmp_path, whatsapp_export):
    path = tmp_path / "chat.txt"
    path.write_text(whatsapp_export, encoding="utf-8")
    conv = load_chat_file(str(path))
    assert conv.conversation_id == "chat-txt"
    assert conv.raw_file_name == "chat.txt"


def test_oversized_file_has_its_own_error_kind(monkeypatch, line_export):
    monkeypatch.setattr(Config, "MAX_FILE_SIZE_MB", 0)
    with pytest.raises(FileTooLarge):
        parse_conversation("line.txt", line_export)
