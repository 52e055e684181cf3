"""
Pytest configuration and shared fixtures.

Sample exports are built in memory so each test can see the exact bytes it feeds
into the importers.
"""
import json
from datetime import datetime, timezone

import pytest

from chatbridge.config import Config
from chatbridge.chat_import.core import build_conversation, unique_participants
from chatbridge.chat_import.enums import Platform
from chatbridge.chat_import.schema import Message


def mis_encode(text):
    """Encode text the way Facebook exports do (UTF-8 bytes read back as Latin-1)."""
    return text.encode("utf-8").decode("latin-1")


def utc_ms(*args):
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.fixture(autouse=True)
def utc_wall_clock(monkeypatch):
    """Interpret TXT wall-clock times as UTC so expected timestamps do not depend on the machine."""
    monkeypatch.setattr(Config, "TXT_TIMESTAMP_MODE", "utc")


@pytest.fixture
def facebook_export():
    """Alice & Bob on Messenger, 3 usable messages (newest first, as Facebook writes them)."""
    data = {
        "participants": [{"name": "Alice"}, {"name": "Bob"}],
        "title": "Alice",
        "messages": [
            {"sender_name": "Alice", "timestamp_ms": 1700000300000, "photos": [{"uri": "p.jpg"}]},
            {"sender_name": "Bob", "timestamp_ms": 1700000100000, "content": mis_encode("café?")},
            {"sender_name": "Alice", "timestamp_ms": 1700000000000, "content": "hi Bob"},
        ],
    }
    return json.dumps(data)


@pytest.fixture
def instagram_export():
    """alice_ig & Bob on Instagram, 2 usable messages plus one unsent."""
    data = {
        "participants": ["alice_ig", "Bob"],
        "messages": [
            {"senderName": "alice_ig", "timestamp": 1700000050000, "text": "same person, other app"},
            {"senderName": "Bob", "timestamp": 1700000200000, "media": [{"uri": "m.jpg"}]},
            {"senderName": "Bob", "timestamp": 1700000250000, "text": "oops", "isUnsent": True},
        ],
    }
    return json.dumps(data)


@pytest.fixture
def line_export():
    return "\n".join([
        "\ufeffChat history with Tom",
        "Saved on: 17/02/2024, 10:00",
        "",
        "09:00\tTom\tbefore any date",
        "Fri, 16/02/2024",
        "23:37\tTom\tHello!",
        "23:38\tMe\t[Sticker]",
        "",
        "Sat, 17/02/2024",
        "00:01\tTom\t[Voice message]",
        "00:02\tMe\t(moon heart eyes)",
    ])


@pytest.fixture
def whatsapp_export():
    return "\n".join([
        "2021-06-21, 4:20 a.m. - Messages and calls are end-to-end encrypted. Tap to learn more.",
        "2021-06-21, 4:23 a.m. - Tom: Hello",
        "world",
        "2021-06-21, 12:05 p.m. - Ann: IMG-0001.jpg (file attached)",
        "2021-06-21, 12:10 a.m. - Ann: <Media omitted>",
        "2021-06-21, 11:59 p.m. - Tom created group \"Trip\"",
        "this line belongs to nobody",
    ])


@pytest.fixture
def make_conversation():
    """Build a normalized Conversation from (sender, content, timestamp_ms) tuples."""

    def _make(conversation_id, rows, source=Platform.FACEBOOK, participants=None, title=None):
        messages = [Message(sender=s, content=c, timestamp=ts) for s, c, ts in rows]
        names = participants if participants is not None else [s for s, _c, _ts in rows]
        return build_conversation(
            source=source,
            conversation_id=conversation_id,
            title=title or conversation_id,
            participants=unique_participants(names, source),
            messages=messages,
        )

    return _make
