"""Format detection: extension first, then content sniffing. Detection never raises."""
import pytest

from chatbridge.chat_import.detector import detect_format, detect_json_schema
from chatbridge.chat_import.enums import ChatFormat, JsonSchema
from chatbridge.chat_import.errors import MissingMessages, UnknownJSONSchema


def test_json_extension_wins_regardless_of_content():
    assert detect_format("export.JSON", "not even json") == ChatFormat.JSON


def test_txt_with_line_header(line_export):
    assert detect_format("chat.txt", line_export) == ChatFormat.LINE


def test_txt_with_whatsapp_lines(whatsapp_export):
    assert detect_format("WhatsApp Chat with Tom.txt", whatsapp_export) == ChatFormat.WHATSAPP


def test_unrecognized_txt():
    assert detect_format("notes.txt", "shopping list\nmilk\neggs") == ChatFormat.UNKNOWN_TXT


def test_line_marker_only_counts_on_first_line_for_txt():
    content = "random header\nChat history with Tom\n"
    assert detect_format("chat.txt", content) == ChatFormat.UNKNOWN_TXT


@pytest.mark.parametrize("content, expected", [
    ('  {"messages": []}', ChatFormat.JSON),
    ("[1, 2]", ChatFormat.JSON),
    ("Chat history with Tom\n", ChatFormat.LINE),
    ("2021-06-21, 4:23 a.m. - Tom: Hello", ChatFormat.WHATSAPP),
    ("hello there", ChatFormat.UNKNOWN),
    ("", ChatFormat.UNKNOWN),
])
def test_content_sniffing_without_known_extension(content, expected):
    assert detect_format("upload.bin", content) == expected


def test_json_schema_by_first_message():
    assert detect_json_schema({"messages": [{"senderName": "a"}]}) == JsonSchema.INSTAGRAM
    assert detect_json_schema({"messages": [{"sender_name": "a"}]}) == JsonSchema.FACEBOOK


def test_json_schema_missing_messages():
    with pytest.raises(MissingMessages):
        detect_json_schema({"messages": []})
    with pytest.raises(MissingMessages):
        detect_json_schema([1, 2, 3])


def test_json_schema_unknown_shape():
    with pytest.raises(UnknownJSONSchema):
        detect_json_schema({"messages": [{"author": "a", "body": "b"}]})
