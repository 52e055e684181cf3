"""
通用工具模块 - 各导入器共用的代码

包含:
- 常量定义
- 公共正则表达式
- 时间换算工具
- 文本修复工具
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from .config import Config


# ==================== 常量定义 ====================

BOM = '\ufeff'

# Line 导出首行标记
LINE_TITLE_MARKER = 'Chat history with'
LINE_DEFAULT_TITLE = 'Line Conversation'

# 小于该值的数字时间戳按"秒"处理
SECONDS_THRESHOLD = 10_000_000_000


# ==================== 预编译正则表达式 ====================

# Line 日期行: "Fri, 16/02/2024"
LINE_DATE_PATTERN = re.compile(r'^[A-Z][a-z]{2},?\s+(\d{2})/(\d{2})/(\d{4})$')

# Line 消息行: "23:37\tTom\tHello!"
LINE_MESSAGE_PATTERN = re.compile(r'^(\d{2}):(\d{2})\t([^\t]+)\t(.+)$')

# WhatsApp 消息行: "2021-06-21, 4:23 a.m. - Tom: Hello"
WHATSAPP_MESSAGE_PATTERN = re.compile(
    r'^(\d{4}-\d{2}-\d{2}),\s+(\d{1,2}:\d{2}\s+(?:a\.m\.|p\.m\.))\s+-\s+([^:]+?):\s+(.*)$'
)

# WhatsApp 系统行: 同样的时间前缀，但没有 "Sender:"
WHATSAPP_SYSTEM_PATTERN = re.compile(
    r'^(\d{4}-\d{2}-\d{2}),\s+(\d{1,2}:\d{2}\s+(?:a\.m\.|p\.m\.))\s+-\s+(.*)$'
)

# WhatsApp 时间部分: "4:23 a.m." / "11:45 p.m."
WHATSAPP_TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})\s+(a\.m\.|p\.m\.)$')

# 会话 id：文件名中的非字母数字字符
_NON_ALNUM_PATTERN = re.compile(r'[^a-zA-Z0-9]')


# ==================== 文本处理工具 ====================

def strip_bom(text: str) -> str:
    if text and text.startswith(BOM):
        return text[len(BOM):]
    return text


def split_lines(content: str) -> List[str]:
    """按 \\n 切行，并去掉 Windows 导出残留的 \\r。"""
    if not content:
        return []
    return [line.rstrip('\r') for line in content.split('\n')]


def fix_facebook_encoding(text: Optional[str]) -> Optional[str]:
    """修复 Facebook 导出的乱码文本。

    Facebook 把 UTF-8 字节逐个当作 Latin-1 字符写进 JSON（"cafÃ©"），
    这里按 Latin-1 编回字节再按 UTF-8 解码。本来就正常的文本会原样返回。
    """
    if not text or not isinstance(text, str):
        return text
    try:
        return text.encode('latin-1').decode('utf-8')
    except (UnicodeEncodeError, UnicodeDecodeError):
        return text


def generate_conversation_id(file_name: str) -> str:
    """从文件名派生会话 id（没有原生 thread id 的来源使用）。"""
    return _NON_ALNUM_PATTERN.sub('-', file_name or '').lower()


# ==================== 时间换算工具 ====================

def wall_clock_to_ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    """把 TXT 导出里的"墙上时间"换算为 epoch ms。

    - local: 按本机时区解释
    - utc: 所见即所得，按 UTC 计算，避免运行环境时区影响

    Raises:
        ValueError: 日期/时间不存在（如 31/02）
    """
    dt = datetime(year, month, day, hour, minute)
    mode = (getattr(Config, 'TXT_TIMESTAMP_MODE', None) or 'local').strip().lower()
    if mode == 'utc':
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def coerce_timestamp_ms(value) -> Optional[int]:
    """把 JSON 导出的时间戳统一为 epoch ms。

    支持 int/float/数字字符串；< 1e10 视为秒。无法解析或不为正数时返回 None。
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        v = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None

    if v <= 0:
        return None

    if v < SECONDS_THRESHOLD:
        return v * 1000

    return v
