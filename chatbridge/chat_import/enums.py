from __future__ import annotations

from enum import Enum


# Platform - 消息来源平台
class Platform(str, Enum):
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINE = "line"
    WHATSAPP = "whatsapp"
    MULTIPLE = "multiple"  # 合并后的规范参与者（来自多个平台）


# 合并会话的 source 字面值（成员来源不一致时使用）
MERGED_SOURCE = "merged"


## MessageType - 归一化后的消息类别
class MessageType(str, Enum):
    TEXT = "text"
    MEDIA = "media"
    STICKER = "sticker"


## MediaType - 非文本消息的具体类型（metadata.mediaType）
class MediaType(str, Enum):
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"
    FILE = "file"
    LINK = "link"  # Facebook share
    DOCUMENT = "document"
    STICKER = "sticker"
    GIF = "gif"
    CONTACT = "contact"
    LOCATION = "location"
    UNKNOWN = "unknown"


## ChatFormat - 格式探测结果
class ChatFormat(str, Enum):
    JSON = "json"
    LINE = "line"
    WHATSAPP = "whatsapp"
    UNKNOWN_TXT = "unknown-txt"  # .txt 但不是已支持的文本导出
    UNKNOWN = "unknown"


## JsonSchema - JSON 导出的子格式（由首条消息的字段决定）
class JsonSchema(str, Enum):
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
