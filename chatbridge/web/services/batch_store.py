from __future__ import annotations

import logging
import threading
import uuid
from typing import Any, Dict, Optional

from chatbridge.config import Config
from chatbridge.chat_import.schema import ParseResult


logger = logging.getLogger(__name__)

# 仅保存在进程内存中：同一次上传批次的解析结果，供后续身份映射/合并使用
# 按插入顺序保存，最多 Config.MAX_BATCHES 个，超出时淘汰最早的批次
_BATCHES: Dict[str, Dict[str, Any]] = {}
_LOCK = threading.Lock()


def save_batch(result: ParseResult) -> str:
    batch_id = uuid.uuid4().hex
    limit = max(1, Config.MAX_BATCHES)
    with _LOCK:
        while len(_BATCHES) >= limit:
            oldest = next(iter(_BATCHES))
            del _BATCHES[oldest]
            logger.info(f"Evicted batch {oldest} (limit {limit})")
        _BATCHES[batch_id] = {'result': result}
    return batch_id


def get_batch(batch_id: str) -> Optional[ParseResult]:
    with _LOCK:
        entry = _BATCHES.get(batch_id)
    return entry['result'] if entry else None


def drop_batch(batch_id: str) -> bool:
    with _LOCK:
        return _BATCHES.pop(batch_id, None) is not None


def clear_batches() -> None:
    with _LOCK:
        _BATCHES.clear()
