"""聊天导入层：JSON 导出解析（Facebook Messenger / Instagram）。

子格式由 detector.detect_json_schema 给出明确标签，这里每个函数只处理一种结构：
- parse_facebook_json: {participants: [{name}], messages: [{sender_name, content?|photos?|...,
  timestamp_ms}], title?}
- parse_instagram_json: {participants: [str], messages: [{senderName, text?|media?, timestamp,
  isUnsent?}], threadName?}
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

from .core import build_conversation, unique_participants
from .detector import detect_json_schema
from .enums import JsonSchema, MediaType, MessageType, Platform
from .errors import MalformedJSON
from .schema import Conversation, Message, MessageMetadata
from ..utils import coerce_timestamp_ms, fix_facebook_encoding, generate_conversation_id, strip_bom


def load_json_root(content: str) -> Any:
    try:
        return json.loads(strip_bom(content))
    except (TypeError, ValueError) as e:
        raise MalformedJSON(f"Invalid JSON: {e}") from e


def _norm_name(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s if s else None


def _messages_list(root: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [m for m in root.get("messages") or [] if isinstance(m, dict)]


# -------------------------
# Facebook Messenger
# -------------------------


# 按优先级：字段 -> (占位内容, mediaType)
_FACEBOOK_MEDIA_FIELDS: Tuple[Tuple[str, str, MediaType], ...] = (
    ("photos", "[Photo]", MediaType.PHOTO),
    ("videos", "[Video]", MediaType.VIDEO),
    ("audio_files", "[Audio]", MediaType.AUDIO),
    ("files", "[File]", MediaType.FILE),
    ("share", "[Shared link]", MediaType.LINK),
)

# 其它媒体类字段统一为 [Media]
_FACEBOOK_OTHER_MEDIA_FIELDS = ("sticker", "gifs")


def _facebook_content(msg: Dict[str, Any]) -> Optional[Tuple[str, MessageType, Optional[MediaType]]]:
    text = msg.get("content")
    if text:
        return fix_facebook_encoding(str(text)), MessageType.TEXT, None

    for key, tag, media_type in _FACEBOOK_MEDIA_FIELDS:
        if msg.get(key):
            return tag, MessageType.MEDIA, media_type

    if any(msg.get(key) for key in _FACEBOOK_OTHER_MEDIA_FIELDS):
        return "[Media]", MessageType.MEDIA, MediaType.UNKNOWN

    # 既没有文本也没有任何媒体：丢弃
    return None


def _facebook_reactions(raw: Any) -> Tuple[Any, ...]:
    if not isinstance(raw, list):
        return ()
    out = []
    for r in raw:
        if isinstance(r, dict):
            out.append({k: fix_facebook_encoding(v) if isinstance(v, str) else v for k, v in r.items()})
        else:
            out.append(r)
    return tuple(out)


def parse_facebook_json(root: Dict[str, Any], file_name: str) -> Conversation:
    raw_names = []
    for p in root.get("participants") or []:
        name = p.get("name") if isinstance(p, dict) else p
        raw_names.append(_norm_name(name))
    participants = unique_participants(
        [fix_facebook_encoding(n) for n in raw_names],
        Platform.FACEBOOK,
        raw_identifiers=raw_names,
    )

    messages: List[Message] = []
    for m in _messages_list(root):
        resolved = _facebook_content(m)
        if resolved is None:
            continue
        content, mtype, media_type = resolved

        ts = coerce_timestamp_ms(m.get("timestamp_ms"))
        sender = fix_facebook_encoding(_norm_name(m.get("sender_name")))
        if ts is None or not sender or not content:
            continue

        messages.append(
            Message(
                sender=sender,
                content=content,
                timestamp=ts,
                type=mtype,
                metadata=MessageMetadata(
                    is_unsent=False,
                    reactions=_facebook_reactions(m.get("reactions")),
                    media_type=media_type,
                ),
            )
        )

    title = fix_facebook_encoding(_norm_name(root.get("title"))) or ", ".join(p.name for p in participants)

    return build_conversation(
        source=Platform.FACEBOOK,
        conversation_id=generate_conversation_id(file_name),
        title=title,
        participants=participants,
        messages=messages,
        raw_file_name=file_name,
    )


# -------------------------
# Instagram
# -------------------------


def parse_instagram_json(root: Dict[str, Any], file_name: str) -> Conversation:
    names = []
    for p in root.get("participants") or []:
        names.append(_norm_name(p.get("name") if isinstance(p, dict) else p))
    participants = unique_participants(names, Platform.INSTAGRAM)

    messages: List[Message] = []
    for m in _messages_list(root):
        if m.get("isUnsent"):
            continue

        text = m.get("text")
        media = m.get("media")
        if text:
            content, mtype, media_type = str(text), MessageType.TEXT, None
        elif isinstance(media, list) and media:
            content, mtype, media_type = "[Media]", MessageType.MEDIA, MediaType.UNKNOWN
        else:
            continue

        ts = coerce_timestamp_ms(m.get("timestamp"))
        sender = _norm_name(m.get("senderName"))
        if ts is None or not sender:
            continue

        reactions = m.get("reactions")
        messages.append(
            Message(
                sender=sender,
                content=content,
                timestamp=ts,
                type=mtype,
                metadata=MessageMetadata(
                    is_unsent=bool(m.get("isUnsent", False)),
                    reactions=tuple(reactions) if isinstance(reactions, list) else (),
                    media_type=media_type,
                ),
            )
        )

    thread_name = _norm_name(root.get("threadName"))

    return build_conversation(
        source=Platform.INSTAGRAM,
        conversation_id=thread_name or generate_conversation_id(file_name),
        title=thread_name or ", ".join(p.name for p in participants),
        participants=participants,
        messages=messages,
        raw_file_name=file_name,
    )


_PARSERS = {
    JsonSchema.FACEBOOK: parse_facebook_json,
    JsonSchema.INSTAGRAM: parse_instagram_json,
}


def load_conversation_from_json(content: str, file_name: str) -> Conversation:
    """解析 JSON 文本：先判定子格式，再交给对应的解析函数。"""

    root = load_json_root(content)
    schema = detect_json_schema(root)
    return _PARSERS[schema](root, file_name)
