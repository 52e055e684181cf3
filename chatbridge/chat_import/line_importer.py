"""Line TXT 导入。

TXT 行格式：
- 第 1 行：Chat history with <name>（可能带 BOM）
- 第 2、3 行：保存时间等元信息，直接跳过
- 日期行：Fri, 16/02/2024
- 消息行：23:37<TAB>Tom<TAB>Hello!

解析是一个两状态的状态机：AwaitingDate（还没见到日期行）/ HaveDate（有当前日期）。
step() 是纯函数：(state, line) -> (new_state, 可选的 Message)，便于逐行测试。
在任何日期行之前出现的消息行会被丢弃。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Tuple, Union

from .core import build_conversation, unique_participants
from .enums import MediaType, MessageType, Platform
from .schema import Conversation, Message, MessageMetadata
from ..utils import (
    LINE_DATE_PATTERN,
    LINE_DEFAULT_TITLE,
    LINE_MESSAGE_PATTERN,
    LINE_TITLE_MARKER,
    generate_conversation_id,
    split_lines,
    strip_bom,
    wall_clock_to_ms,
)

# 标题行 + 两行元信息
HEADER_LINES = 3


@dataclass(frozen=True)
class AwaitingDate:
    pass


@dataclass(frozen=True)
class HaveDate:
    current: date


LineState = Union[AwaitingDate, HaveDate]


# Line 的固定占位 -> (内容, 类型, mediaType)
_MARKERS: Dict[str, Tuple[str, MessageType, MediaType]] = {
    "[Sticker]": ("[Sticker]", MessageType.STICKER, MediaType.STICKER),
    "[Photo]": ("[Photo]", MessageType.MEDIA, MediaType.PHOTO),
    "[Video]": ("[Video]", MessageType.MEDIA, MediaType.VIDEO),
    "[Voice message]": ("[Audio]", MessageType.MEDIA, MediaType.AUDIO),
    "[Audio]": ("[Audio]", MessageType.MEDIA, MediaType.AUDIO),
    "[File]": ("[File]", MessageType.MEDIA, MediaType.FILE),
}


def normalize_line_content(text: str) -> Tuple[str, MessageType, Optional[MediaType]]:
    """把 Line 的媒体占位转成统一标签；其余文本（包括 "(moon heart eyes)" 这类表情描述）原样保留。"""

    marker = _MARKERS.get(text)
    if marker is not None:
        return marker
    return text, MessageType.TEXT, None


def parse_title(first_line: str) -> str:
    title_line = strip_bom(first_line or "").strip()
    if title_line.startswith(LINE_TITLE_MARKER):
        title_line = title_line[len(LINE_TITLE_MARKER):]
    return title_line.strip() or LINE_DEFAULT_TITLE


def _parse_date_header(line: str) -> Optional[date]:
    m = LINE_DATE_PATTERN.match(line)
    if not m:
        return None
    day, month, year = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def step(state: LineState, line: str) -> Tuple[LineState, Optional[Message]]:
    line = line.strip()
    if not line:
        return state, None

    header = _parse_date_header(line)
    if header is not None:
        return HaveDate(header), None

    if not isinstance(state, HaveDate):
        return state, None

    m = LINE_MESSAGE_PATTERN.match(line)
    if not m:
        return state, None

    hours, minutes, sender, text = m.groups()
    try:
        ts = wall_clock_to_ms(state.current.year, state.current.month, state.current.day, int(hours), int(minutes))
    except ValueError:
        # 25:61 之类的时间
        return state, None

    content, mtype, media_type = normalize_line_content(text)
    msg = Message(
        sender=sender,
        content=content,
        timestamp=ts,
        type=mtype,
        metadata=MessageMetadata(is_unsent=False, reactions=(), media_type=media_type),
    )
    return state, msg


def parse_line_messages(lines: List[str]) -> List[Message]:
    """跑状态机（不含标题/元信息行）。"""

    state: LineState = AwaitingDate()
    messages: List[Message] = []
    for line in lines:
        state, msg = step(state, line)
        if msg is not None:
            messages.append(msg)
    return messages


def parse_line_txt(content: str, file_name: str) -> Conversation:
    lines = split_lines(content)
    title = parse_title(lines[0] if lines else "")

    messages = parse_line_messages(lines[HEADER_LINES:])

    return build_conversation(
        source=Platform.LINE,
        conversation_id=generate_conversation_id(file_name),
        title=title,
        participants=unique_participants([m.sender for m in messages], Platform.LINE),
        messages=messages,
        raw_file_name=file_name,
    )
