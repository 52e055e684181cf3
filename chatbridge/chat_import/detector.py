"""格式探测。

先看扩展名，再看内容。探测本身不抛异常：无法识别时返回 unknown / unknown-txt，
由批量入口转成解析错误。
"""

from __future__ import annotations

import os
from typing import Any

from .enums import ChatFormat, JsonSchema
from .errors import MissingMessages, UnknownJSONSchema
from ..utils import LINE_TITLE_MARKER, WHATSAPP_SYSTEM_PATTERN, split_lines, strip_bom

# WhatsApp 嗅探只看开头这么多个非空行
_WHATSAPP_SNIFF_LINES = 5


def _looks_like_whatsapp(content: str) -> bool:
    checked = 0
    for line in split_lines(strip_bom(content)):
        line = line.strip()
        if not line:
            continue
        # 消息行也满足系统行的前缀模式
        if WHATSAPP_SYSTEM_PATTERN.match(line):
            return True
        checked += 1
        if checked >= _WHATSAPP_SNIFF_LINES:
            break
    return False


def detect_format(file_name: str, content: str) -> ChatFormat:
    ext = os.path.splitext(file_name or "")[1].lower()
    content = content or ""

    if ext == ".json":
        return ChatFormat.JSON

    if ext == ".txt":
        first_line = strip_bom(split_lines(content)[0]) if content else ""
        if LINE_TITLE_MARKER in first_line:
            return ChatFormat.LINE
        if _looks_like_whatsapp(content):
            return ChatFormat.WHATSAPP
        return ChatFormat.UNKNOWN_TXT

    # 没有可识别的扩展名：看内容
    trimmed = strip_bom(content).strip()
    if trimmed.startswith("{") or trimmed.startswith("["):
        return ChatFormat.JSON
    if LINE_TITLE_MARKER in trimmed:
        return ChatFormat.LINE
    if _looks_like_whatsapp(trimmed):
        return ChatFormat.WHATSAPP

    return ChatFormat.UNKNOWN


def detect_json_schema(root: Any) -> JsonSchema:
    """按首条消息的字段判定 JSON 子格式。

    - senderName -> Instagram
    - sender_name -> Facebook
    """

    msgs = root.get("messages") if isinstance(root, dict) else None
    if not isinstance(msgs, list) or not msgs:
        raise MissingMessages("No messages found in JSON file")

    first = msgs[0]
    if isinstance(first, dict):
        if "senderName" in first:
            return JsonSchema.INSTAGRAM
        if "sender_name" in first:
            return JsonSchema.FACEBOOK

    raise UnknownJSONSchema("Unknown JSON format - not Facebook or Instagram")
