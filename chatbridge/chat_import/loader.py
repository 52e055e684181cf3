"""统一加载入口。

这里是 app.py / main.py 应当使用的唯一入口：
- 探测格式（扩展名 + 内容嗅探）并分派到对应导入器
- 逐文件隔离错误：每个文件要么产出一个 Conversation，要么产出一条 {fileName, error}
- 汇总参与者列表，供身份映射界面使用
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, List, Tuple, Union

from .detector import detect_format
from .enums import ChatFormat
from .errors import ChatImportError, EmptyResultSet, FileTooLarge, UnrecognizedFormat
from .json_importer import load_conversation_from_json
from .line_importer import parse_line_txt
from .schema import Conversation, ParseError, ParseResult
from .whatsapp_importer import parse_whatsapp_txt
from ..config import Config


logger = logging.getLogger(__name__)

RawContent = Union[str, bytes, bytearray]


def decode_content(raw: RawContent) -> str:
    """bytes -> str。BOM 保留给各导入器自行处理；无法解码的字节替换掉，不作为错误。"""

    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="replace")
    return raw or ""


def _check_size(file_name: str, raw: RawContent) -> None:
    size = len(raw) if isinstance(raw, (bytes, bytearray)) else len((raw or "").encode("utf-8"))
    size_mb = size / (1024 * 1024)
    if size_mb > Config.MAX_FILE_SIZE_MB:
        raise FileTooLarge(f"File too large ({size_mb:.2f}MB > {Config.MAX_FILE_SIZE_MB}MB)")


def parse_conversation(file_name: str, content: RawContent) -> Conversation:
    """解析单个文件。失败时抛出 ChatImportError 的子类。"""

    _check_size(file_name, content)
    text = decode_content(content)
    fmt = detect_format(file_name, text)

    logger.info(f"Detected format: {fmt.value} for file: {file_name}")

    if fmt == ChatFormat.JSON:
        conversation = load_conversation_from_json(text, file_name)
    elif fmt == ChatFormat.LINE:
        conversation = parse_line_txt(text, file_name)
    elif fmt == ChatFormat.WHATSAPP:
        conversation = parse_whatsapp_txt(text, file_name)
    elif fmt == ChatFormat.UNKNOWN_TXT:
        raise UnrecognizedFormat("Text file format not recognized. Currently supported: Line Messenger, WhatsApp")
    else:
        raise UnrecognizedFormat("File format not recognized. Supported: JSON (Facebook/Instagram), TXT (Line Messenger, WhatsApp)")

    if not conversation.messages:
        raise EmptyResultSet("No usable messages found")
    if not conversation.participants:
        raise EmptyResultSet("No participants found")

    return conversation


def parse_conversations(files: Iterable[Tuple[str, RawContent]]) -> ParseResult:
    """批量解析。单个文件失败不会中断其余文件。

    全部失败时返回空 conversations + 非空 errors，由调用方决定如何提示。
    """

    result = ParseResult()
    for file_name, content in files:
        try:
            conversation = parse_conversation(file_name, content)
        except ChatImportError as e:
            logger.warning(f"Failed to parse {file_name}: {e}")
            result.errors.append(ParseError(file_name=file_name, error=f"Failed to parse {file_name}: {e}"))
            continue
        except Exception as e:
            logger.error(f"Unexpected error parsing {file_name}: {e}")
            result.errors.append(ParseError(file_name=file_name, error=f"Failed to parse {file_name}: {e}"))
            continue
        result.conversations.append(conversation)

    logger.info(f"Parsed {len(result.conversations)} conversation(s), {len(result.errors)} error(s)")
    return result


def load_chat_file(file_path: str) -> Conversation:
    """从磁盘读取并解析单个文件（按字节读，交给 decode_content）。"""

    with open(file_path, "rb") as f:
        raw = f.read()
    return parse_conversation(os.path.basename(file_path), raw)


def extract_all_participants(conversations: Iterable[Conversation]) -> List[Dict[str, Any]]:
    """所有会话中的参与者（按 name + platform + conversationId 去重），用于身份映射界面。"""

    rows: Dict[Tuple[str, str, str], Dict[str, Any]] = {}
    for conv in conversations:
        for p in conv.participants:
            platform = getattr(p.platform, "value", p.platform)
            key = (p.name, str(platform), conv.conversation_id)
            if key in rows:
                continue
            rows[key] = {
                "name": p.name,
                "platform": platform,
                "rawIdentifier": p.raw_identifier,
                "conversationId": conv.conversation_id,
                "conversationTitle": conv.title,
                "messageCount": sum(1 for m in conv.messages if m.sender == p.name),
            }
    return list(rows.values())
