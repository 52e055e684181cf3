"""聊天导入与归一化层。

提供统一入口：把不同平台（Facebook/Instagram JSON、Line/WhatsApp TXT）的聊天记录加载为统一结构，
并按身份映射合并跨平台的同一段关系。
"""

from .detector import detect_format
from .loader import extract_all_participants, load_chat_file, parse_conversation, parse_conversations
from .merger import get_merged_conversation_stats, merge_conversations

__all__ = [
    "detect_format",
    "extract_all_participants",
    "get_merged_conversation_stats",
    "load_chat_file",
    "merge_conversations",
    "parse_conversation",
    "parse_conversations",
]
