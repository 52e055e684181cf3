"""聊天归一化数据模型。

目标：
- 把不同平台（Facebook/Instagram JSON、Line/WhatsApp TXT）的聊天记录统一为同一套结构，
  便于合并/分析/展示
- 时间统一为 epoch 毫秒（timestamp），date 由 timestamp 派生
- 非文本消息统一为方括号占位（如 [Photo]），具体类型放在 metadata.media_type

说明：
- Message / Participant 为不可变值：合并阶段只会生成新对象，不会改写导入层产出的记录
- to_dict() 输出与前端/分析端约定的 camelCase 结构
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from .enums import MediaType, MessageType, Platform


def _enum_value(v: Any) -> Any:
    return getattr(v, "value", v)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def ms_to_datetime(ts_ms: int) -> datetime:
    """epoch ms -> 带时区（UTC）的 datetime。"""
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class MessageMetadata:
    is_unsent: bool = False
    reactions: Tuple[Any, ...] = ()
    media_type: Optional[MediaType] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isUnsent": bool(self.is_unsent),
            "reactions": list(self.reactions),
            "mediaType": _enum_value(self.media_type),
        }


@dataclass(frozen=True)
class Message:
    sender: str
    content: str
    timestamp: int  # epoch ms
    type: MessageType = MessageType.TEXT
    metadata: MessageMetadata = field(default_factory=MessageMetadata)

    # 合并时被改写为规范名的消息，保留改写前的 sender
    original_sender: Optional[str] = None

    @property
    def date(self) -> datetime:
        return ms_to_datetime(self.timestamp)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "sender": self.sender,
            "content": self.content,
            "timestamp": int(self.timestamp),
            "date": _iso(self.date),
            "type": _enum_value(self.type),
            "metadata": self.metadata.to_dict(),
        }
        if self.original_sender is not None:
            out["originalSender"] = self.original_sender
        return out


@dataclass(frozen=True)
class Participant:
    name: str
    platform: Union[Platform, str]
    raw_identifier: Optional[str] = None

    # 仅合并会话的规范参与者会填充：曾用名 / 来源平台（按出现顺序去重）
    alternate_names: Tuple[str, ...] = ()
    platforms: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "name": self.name,
            "platform": _enum_value(self.platform),
            "rawIdentifier": self.raw_identifier,
        }
        if self.alternate_names or self.platforms:
            out["alternateNames"] = list(self.alternate_names)
            out["platforms"] = [_enum_value(p) for p in self.platforms]
        return out


@dataclass(frozen=True)
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"start": _iso(self.start), "end": _iso(self.end)}


@dataclass(frozen=True)
class SourceConversation:
    """合并会话的来源记录（provenance）。"""

    title: str
    source: str
    message_count: int
    date_range: DateRange

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "source": _enum_value(self.source),
            "messageCount": int(self.message_count),
            "dateRange": self.date_range.to_dict(),
        }


@dataclass
class Conversation:
    source: str  # Platform 或 "merged"
    conversation_id: str
    title: str

    participants: List[Participant] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)

    date_range: DateRange = field(default_factory=DateRange)
    total_messages: int = 0

    is_merged: bool = False
    source_conversations: Optional[List[SourceConversation]] = None

    raw_file_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "source": _enum_value(self.source),
            "conversationId": self.conversation_id,
            "title": self.title,
            "participants": [p.to_dict() for p in self.participants],
            "messages": [m.to_dict() for m in self.messages],
            "dateRange": self.date_range.to_dict(),
            "totalMessages": int(self.total_messages),
            "isMerged": bool(self.is_merged),
        }
        if self.source_conversations is not None:
            out["sourceConversations"] = [s.to_dict() for s in self.source_conversations]
        if self.raw_file_name is not None:
            out["rawFileName"] = self.raw_file_name
        return out


# -------------------------
# 身份映射（来自 UI 的用户声明）
# -------------------------


@dataclass(frozen=True)
class PersonRef:
    name: str
    platform: str
    conversation_id: str
    conversation_title: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["PersonRef"]:
        if isinstance(data, PersonRef):
            return data
        if not isinstance(data, dict):
            return None
        name = data.get("name")
        conversation_id = data.get("conversationId", data.get("conversation_id"))
        if not name or conversation_id is None:
            return None
        return cls(
            name=str(name),
            platform=str(_enum_value(data.get("platform") or "unknown")),
            conversation_id=str(conversation_id),
            conversation_title=data.get("conversationTitle", data.get("conversation_title")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "platform": self.platform,
            "conversationId": self.conversation_id,
            "conversationTitle": self.conversation_title,
        }


@dataclass(frozen=True)
class IdentityMapping:
    """声明：会话 X 中的 person1 与会话 Y 中的 person2 是同一个人。"""

    person1: Optional[PersonRef] = None
    person2: Optional[PersonRef] = None

    @property
    def is_complete(self) -> bool:
        return self.person1 is not None and self.person2 is not None

    @classmethod
    def from_dict(cls, data: Any) -> "IdentityMapping":
        if isinstance(data, IdentityMapping):
            return data
        if not isinstance(data, dict):
            return cls()
        return cls(person1=PersonRef.from_dict(data.get("person1")), person2=PersonRef.from_dict(data.get("person2")))


@dataclass(frozen=True)
class CanonicalIdentity:
    canonical_id: str
    canonical_name: str
    alternate_names: Tuple[str, ...] = ()
    platforms: Tuple[str, ...] = ()


# -------------------------
# 批量解析结果
# -------------------------


@dataclass(frozen=True)
class ParseError:
    file_name: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"fileName": self.file_name, "error": self.error}


@dataclass
class ParseResult:
    conversations: List[Conversation] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conversations": [c.to_dict() for c in self.conversations],
            "errors": [e.to_dict() for e in self.errors],
        }
