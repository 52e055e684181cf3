"""导入层错误类型。

适配器遇到整份文件无法处理时抛出；批量入口在文件边界捕获并转成 {fileName, error}。
单条消息缺字段不算错误：直接过滤。
"""

from __future__ import annotations


class ChatImportError(ValueError):
    """所有导入错误的基类。"""


class UnrecognizedFormat(ChatImportError):
    pass


class MalformedJSON(ChatImportError):
    pass


class MissingMessages(ChatImportError):
    pass


class UnknownJSONSchema(ChatImportError):
    pass


class InvalidTimeFormat(ChatImportError):
    pass


class EmptyResultSet(ChatImportError):
    """文件解析没有报错，但没有得到任何可用消息或参与者。"""


class FileTooLarge(ChatImportError):
    """单个文件超过 Config.MAX_FILE_SIZE_MB。"""
