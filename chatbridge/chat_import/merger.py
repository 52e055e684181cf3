"""会话合并：按用户声明的身份映射，把同一段关系在不同平台上的会话合成一个。

流程：
1. build_identity_map：每条完整映射 i 生成一个规范身份 merged-i，
   person1 / person2 都以 (name, conversationId) 为键登记到这个身份
2. group_conversations：会话里第一个命中映射的参与者决定分组；都没命中则自成一组
3. merge_conversation_group：组内会话合并为一个（消息全量重排、sender 改写为规范名）

注意：
- 映射不做传递闭包。A↔B 与 B↔C 是两个不同的规范身份，A 与 C 不会因此进同一组；
  需要时由调用方直接声明 A↔C。
- 合并时不修改导入层产出的 Message：需要改写 sender 的消息会生成新对象，
  并把原 sender 保存在 original_sender。
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .core import IdentityKey, compute_date_range, identity_key
from .enums import MERGED_SOURCE, Platform
from .schema import (
    CanonicalIdentity,
    Conversation,
    IdentityMapping,
    Message,
    Participant,
    SourceConversation,
)


logger = logging.getLogger(__name__)

IdentityMap = Dict[IdentityKey, CanonicalIdentity]
MappingInput = Union[IdentityMapping, Dict[str, Any]]

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def _platform_value(v: Any) -> str:
    return str(getattr(v, "value", v))


def _append_unique(items: tuple, values: Iterable[Any]) -> tuple:
    out = list(items)
    for v in values:
        if v not in out:
            out.append(v)
    return tuple(out)


# -------------------------
# 1. 身份表
# -------------------------


def build_identity_map(mappings: Sequence[MappingInput]) -> IdentityMap:
    identity_map: IdentityMap = {}

    for idx, raw in enumerate(mappings or []):
        mapping = IdentityMapping.from_dict(raw)
        if not mapping.is_complete:
            continue

        p1, p2 = mapping.person1, mapping.person2
        identity = CanonicalIdentity(
            canonical_id=f"merged-{idx}",
            canonical_name=p1.name,
            alternate_names=(p1.name, p2.name),
            platforms=(_platform_value(p1.platform), _platform_value(p2.platform)),
        )

        identity_map[identity_key(p1.name, p1.conversation_id)] = identity
        identity_map[identity_key(p2.name, p2.conversation_id)] = identity

    return identity_map


# -------------------------
# 2. 分组
# -------------------------


def group_key_for(conversation: Conversation, identity_map: IdentityMap) -> str:
    for p in conversation.participants:
        identity = identity_map.get(identity_key(p.name, conversation.conversation_id))
        if identity is not None:
            return identity.canonical_id
    return conversation.conversation_id


def group_conversations(conversations: Iterable[Conversation], identity_map: IdentityMap) -> Dict[str, List[Conversation]]:
    groups: Dict[str, List[Conversation]] = {}
    for conv in conversations:
        groups.setdefault(group_key_for(conv, identity_map), []).append(conv)
    return groups


# -------------------------
# 3. 合并
# -------------------------


def canonical_participants(conversations: Iterable[Conversation], identity_map: IdentityMap) -> List[Participant]:
    """把各会话参与者映射到规范身份，并按规范名去重（汇总曾用名/平台）。"""

    by_name: Dict[str, Participant] = {}

    for conv in conversations:
        for p in conv.participants:
            identity = identity_map.get(identity_key(p.name, conv.conversation_id))
            if identity is not None:
                name = identity.canonical_name
                platform: Union[Platform, str] = Platform.MULTIPLE
                alternate_names = identity.alternate_names
                platforms = identity.platforms
            else:
                name = p.name
                platform = p.platform
                alternate_names = (p.name,)
                platforms = (_platform_value(p.platform),)

            existing = by_name.get(name)
            if existing is None:
                by_name[name] = Participant(
                    name=name,
                    platform=platform,
                    raw_identifier=p.raw_identifier,
                    alternate_names=tuple(alternate_names),
                    platforms=tuple(platforms),
                )
                continue

            by_name[name] = replace(
                existing,
                platform=Platform.MULTIPLE if identity is not None else existing.platform,
                alternate_names=_append_unique(existing.alternate_names, alternate_names),
                platforms=_append_unique(existing.platforms, platforms),
            )

    return list(by_name.values())


def create_merged_title(participants: Iterable[Participant], sources: Iterable[str]) -> str:
    names = " & ".join(p.name for p in participants)
    platforms = " + ".join(_platform_value(s) for s in sources)
    return f"{names} ({platforms})"


def _rewrite_sender(msg: Message, conversation_id: str, identity_map: IdentityMap) -> Message:
    identity = identity_map.get(identity_key(msg.sender, conversation_id))
    if identity is None:
        return msg
    return replace(msg, sender=identity.canonical_name, original_sender=msg.sender)


def merge_conversation_group(conversations: Sequence[Conversation], identity_map: IdentityMap) -> Conversation:
    sorted_convs = sorted(conversations, key=lambda c: c.date_range.start or _EPOCH)

    # 先按所属会话改写 sender（生成新对象），再整体按时间重排
    all_messages: List[Message] = []
    for conv in sorted_convs:
        for msg in conv.messages:
            all_messages.append(_rewrite_sender(msg, conv.conversation_id, identity_map))
    all_messages.sort(key=lambda m: m.timestamp)

    participants = canonical_participants(sorted_convs, identity_map)

    unique_sources: List[str] = []
    for conv in sorted_convs:
        source = _platform_value(conv.source)
        if source not in unique_sources:
            unique_sources.append(source)

    merged = Conversation(
        source=unique_sources[0] if len(unique_sources) == 1 else MERGED_SOURCE,
        conversation_id="merged-" + "-".join(c.conversation_id for c in sorted_convs),
        title=create_merged_title(participants, unique_sources),
        participants=participants,
        messages=all_messages,
        date_range=compute_date_range(all_messages),
        total_messages=len(all_messages),
        is_merged=True,
        source_conversations=[
            SourceConversation(
                title=c.title,
                source=_platform_value(c.source),
                message_count=len(c.messages),
                date_range=c.date_range,
            )
            for c in sorted_convs
        ],
    )

    logger.info(f"Merged {len(sorted_convs)} conversations into {merged.conversation_id} ({merged.total_messages} messages)")
    return merged


def merge_conversations(conversations: List[Conversation], mappings: Optional[Sequence[MappingInput]]) -> List[Conversation]:
    """按身份映射合并会话。

    没有映射（或映射全都不完整）时原样返回输入。
    """

    if not mappings:
        return conversations

    identity_map = build_identity_map(mappings)
    if not identity_map:
        return conversations

    groups = group_conversations(conversations, identity_map)

    out: List[Conversation] = []
    for group in groups.values():
        if len(group) == 1:
            out.append(group[0])
        else:
            out.append(merge_conversation_group(group, identity_map))
    return out


def get_merged_conversation_stats(conversation: Conversation) -> Optional[Dict[str, Any]]:
    """合并会话的来源统计；非合并会话返回 None。"""

    if not conversation.is_merged:
        return None

    sources = conversation.source_conversations or []
    total = conversation.total_messages or 0

    messages_by_source: Dict[str, int] = {}
    for sc in sources:
        messages_by_source[sc.source] = messages_by_source.get(sc.source, 0) + sc.message_count

    return {
        "totalSources": len(sources),
        "sources": [
            {
                "title": sc.title,
                "source": sc.source,
                "messageCount": sc.message_count,
                "percentage": f"{(sc.message_count / total * 100) if total else 0:.1f}",
            }
            for sc in sources
        ],
        "dateRange": conversation.date_range.to_dict(),
        "messagesBySource": messages_by_source,
    }
