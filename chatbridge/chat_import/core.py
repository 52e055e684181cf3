"""聊天导入层：通用核心逻辑（纯函数/小工具）。

这里聚合：
- 身份键规则（(name, conversationId) 组合键）
- 消息兜底过滤 / 排序 / 时间范围
- 参与者去重

说明：
- 单条消息缺 timestamp/sender/content 时静默丢弃，不算文件级错误。
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from .enums import Platform
from .schema import Conversation, DateRange, Message, Participant


# -------------------------
# 身份键
# -------------------------


IdentityKey = Tuple[str, str]


def identity_key(name: str, conversation_id: str) -> IdentityKey:
    """参与者在某个会话内的组合键。同名不同会话视为不同的人。"""

    return (str(name), str(conversation_id))


# -------------------------
# 消息 / 参与者整理
# -------------------------


def is_usable_message(msg: Message) -> bool:
    if not msg.sender:
        return False
    if not msg.content:
        return False
    if not isinstance(msg.timestamp, int) or msg.timestamp <= 0:
        return False
    return True


def finalize_messages(messages: Iterable[Message]) -> List[Message]:
    """过滤不可用消息，并按时间戳升序排序（稳定排序）。"""

    kept = [m for m in messages if is_usable_message(m)]
    kept.sort(key=lambda m: m.timestamp)
    return kept


def compute_date_range(messages: List[Message]) -> DateRange:
    """messages 需已排序：取首尾消息的 date。"""

    if not messages:
        return DateRange()
    return DateRange(start=messages[0].date, end=messages[-1].date)


def unique_participants(names: Iterable[Optional[str]], platform: Platform, raw_identifiers: Optional[Iterable[Optional[str]]] = None) -> List[Participant]:
    """按名字去重（保留首次出现的顺序）。"""

    raws = list(raw_identifiers) if raw_identifiers is not None else None
    out: List[Participant] = []
    seen = set()
    for idx, name in enumerate(names):
        if not name or name in seen:
            continue
        seen.add(name)
        raw = raws[idx] if raws is not None and idx < len(raws) else name
        out.append(Participant(name=name, platform=platform, raw_identifier=raw))
    return out


def build_conversation(
    *,
    source: Platform,
    conversation_id: str,
    title: str,
    participants: List[Participant],
    messages: Iterable[Message],
    raw_file_name: Optional[str] = None,
) -> Conversation:
    """各适配器的统一收尾：过滤、排序、回填时间范围与计数。"""

    final = finalize_messages(messages)
    return Conversation(
        source=source,
        conversation_id=conversation_id,
        title=title,
        participants=participants,
        messages=final,
        date_range=compute_date_range(final),
        total_messages=len(final),
        raw_file_name=raw_file_name,
    )
