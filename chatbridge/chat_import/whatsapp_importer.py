"""WhatsApp TXT 导入。

行格式：
- 消息行：2021-06-21, 4:23 a.m. - Tom: Hello
- 系统行：2021-06-21, 4:23 a.m. - Messages and calls are end-to-end encrypted...
- 续行：不带时间前缀的非空行，属于上一条消息（多行消息）

状态机两种状态：Idle（没有正在构造的消息）/ InMessage（有一条待输出的消息）。
step() 返回 (new_state, 被结束并输出的 Message)；输入结束后调用 finish() 输出最后一条。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from .core import build_conversation, unique_participants
from .enums import MediaType, MessageType, Platform
from .errors import InvalidTimeFormat
from .schema import Conversation, Message, MessageMetadata
from ..utils import (
    WHATSAPP_MESSAGE_PATTERN,
    WHATSAPP_SYSTEM_PATTERN,
    WHATSAPP_TIME_PATTERN,
    generate_conversation_id,
    split_lines,
    strip_bom,
    wall_clock_to_ms,
)


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class InMessage:
    pending: Message


WhatsAppState = Union[Idle, InMessage]


# "(file attached)" 的扩展名嗅探
_ATTACHED_FILE_PATTERN = re.compile(r'(.+?)\s+\(file attached\)')
_PHOTO_EXT = re.compile(r'\.(jpg|jpeg|png|gif|webp)$', re.IGNORECASE)
_VIDEO_EXT = re.compile(r'\.(mp4|mov|avi|mkv)$', re.IGNORECASE)
_AUDIO_EXT = re.compile(r'\.(mp3|wav|ogg|m4a|opus)$', re.IGNORECASE)
_DOCUMENT_EXT = re.compile(r'\.(pdf|doc|docx|txt)$', re.IGNORECASE)


def parse_whatsapp_datetime(date_str: str, time_str: str) -> int:
    """"2021-06-21" + "4:23 a.m." -> epoch ms（12 小时制转 24 小时制）。"""

    m = WHATSAPP_TIME_PATTERN.match((time_str or "").strip())
    if not m:
        raise InvalidTimeFormat(f"Invalid time format: {time_str}")

    hours = int(m.group(1))
    minutes = int(m.group(2))
    period = m.group(3)

    if period == "p.m." and hours != 12:
        hours += 12
    elif period == "a.m." and hours == 12:
        hours = 0

    try:
        year, month, day = (int(x) for x in date_str.split("-"))
        return wall_clock_to_ms(year, month, day, hours, minutes)
    except ValueError as e:
        raise InvalidTimeFormat(f"Invalid date/time: {date_str}, {time_str}") from e


def normalize_whatsapp_content(text: str) -> Tuple[str, MessageType, Optional[MediaType]]:
    if "(file attached)" in text:
        fm = _ATTACHED_FILE_PATTERN.search(text)
        attached = fm.group(1) if fm else "File"

        if _PHOTO_EXT.search(attached):
            return "[Photo]", MessageType.MEDIA, MediaType.PHOTO
        if _VIDEO_EXT.search(attached):
            return "[Video]", MessageType.MEDIA, MediaType.VIDEO
        if _AUDIO_EXT.search(attached):
            return "[Audio]", MessageType.MEDIA, MediaType.AUDIO
        if _DOCUMENT_EXT.search(attached):
            return "[Document]", MessageType.MEDIA, MediaType.DOCUMENT
        return "[File]", MessageType.MEDIA, MediaType.FILE

    if text in ("<Media omitted>", "<media omitted>"):
        return "[Media]", MessageType.MEDIA, MediaType.UNKNOWN

    if "image omitted" in text:
        return "[Photo]", MessageType.MEDIA, MediaType.PHOTO

    if "video omitted" in text:
        return "[Video]", MessageType.MEDIA, MediaType.VIDEO

    if "audio omitted" in text or "voice message" in text:
        return "[Audio]", MessageType.MEDIA, MediaType.AUDIO

    if "sticker omitted" in text:
        return "[Sticker]", MessageType.STICKER, MediaType.STICKER

    if "GIF omitted" in text:
        return "[GIF]", MessageType.MEDIA, MediaType.GIF

    if "Contact card omitted" in text:
        return "[Contact]", MessageType.MEDIA, MediaType.CONTACT

    if "Location:" in text or "location:" in text:
        return "[Location]", MessageType.MEDIA, MediaType.LOCATION

    return text, MessageType.TEXT, None


def _emit(state: WhatsAppState) -> Optional[Message]:
    return state.pending if isinstance(state, InMessage) else None


def step(state: WhatsAppState, line: str) -> Tuple[WhatsAppState, Optional[Message]]:
    m = WHATSAPP_MESSAGE_PATTERN.match(line)
    if m:
        date_str, time_str, sender, text = m.groups()
        content, mtype, media_type = normalize_whatsapp_content(text)
        msg = Message(
            sender=sender,
            content=content,
            timestamp=parse_whatsapp_datetime(date_str, time_str),
            type=mtype,
            metadata=MessageMetadata(is_unsent=False, reactions=(), media_type=media_type),
        )
        return InMessage(msg), _emit(state)

    if WHATSAPP_SYSTEM_PATTERN.match(line):
        # 系统提示：结束上一条消息，本行丢弃
        return Idle(), _emit(state)

    if isinstance(state, InMessage) and line.strip():
        pending = state.pending
        return InMessage(replace(pending, content=pending.content + "\n" + line)), None

    return state, None


def finish(state: WhatsAppState) -> Optional[Message]:
    return _emit(state)


def parse_whatsapp_messages(lines: List[str]) -> List[Message]:
    state: WhatsAppState = Idle()
    messages: List[Message] = []
    for line in lines:
        state, emitted = step(state, line)
        if emitted is not None:
            messages.append(emitted)
    last = finish(state)
    if last is not None:
        messages.append(last)
    return messages


def _build_title(names: List[str]) -> str:
    if len(names) == 2:
        return f"{names[0]} & {names[1]}"
    if len(names) == 1:
        return names[0]
    return f"WhatsApp Chat ({len(names)} participants)"


def parse_whatsapp_txt(content: str, file_name: str) -> Conversation:
    lines = split_lines(strip_bom(content))
    messages = parse_whatsapp_messages(lines)

    participants = unique_participants([m.sender for m in messages], Platform.WHATSAPP)

    return build_conversation(
        source=Platform.WHATSAPP,
        conversation_id=generate_conversation_id(file_name),
        title=_build_title([p.name for p in participants]),
        participants=participants,
        messages=messages,
        raw_file_name=file_name,
    )
