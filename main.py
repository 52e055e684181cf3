"""命令行入口：解析若干聊天导出文件，按身份映射合并后输出摘要或 JSON。

示例:
    python main.py fb.json ig.json --map "alice_ig@alice_ig-thread=Alice@fb-json"
"""

import argparse
import json
import logging
import os
import sys
from collections import Counter
from typing import List, Optional

from chatbridge.config import Config
from chatbridge.chat_import import (
    extract_all_participants,
    get_merged_conversation_stats,
    merge_conversations,
    parse_conversations,
)


logger = logging.getLogger(__name__)


def parse_person(ref: str, participants: List[dict]) -> Optional[dict]:
    """"name@conversationId" -> PersonRef 字典（平台/标题从已解析的参与者里补全）。"""
    if '@' not in ref:
        return None
    name, conversation_id = ref.rsplit('@', 1)
    name = name.strip()
    conversation_id = conversation_id.strip()
    for p in participants:
        if p['name'] == name and p['conversationId'] == conversation_id:
            return {
                'name': name,
                'platform': p['platform'],
                'conversationId': conversation_id,
                'conversationTitle': p['conversationTitle'],
            }
    logger.warning(f"Participant not found: {ref}")
    return None


def parse_mapping_args(raw_mappings: List[str], participants: List[dict]) -> List[dict]:
    mappings = []
    for raw in raw_mappings or []:
        left, sep, right = raw.partition('=')
        if not sep:
            logger.warning(f"Ignoring mapping without '=': {raw}")
            continue
        mappings.append({
            'person1': parse_person(left, participants),
            'person2': parse_person(right, participants),
        })
    return mappings


def print_summary(conversations, errors):
    for err in errors:
        print(f"✗ {err.file_name}: {err.error}")

    for conv in conversations:
        print("-" * 50)
        print(f"{conv.title} [{getattr(conv.source, 'value', conv.source)}] id={conv.conversation_id}")
        start = conv.date_range.start.isoformat() if conv.date_range.start else '-'
        end = conv.date_range.end.isoformat() if conv.date_range.end else '-'
        print(f"消息数: {conv.total_messages}  时间范围: {start} ~ {end}")

        sender_counter = Counter(m.sender for m in conv.messages)
        for name, count in sender_counter.most_common(10):
            print(f"  {name}: {count} messages")

        stats = get_merged_conversation_stats(conv)
        if stats:
            for sc in stats['sources']:
                print(f"  ↳ {sc['title']} ({sc['source']}): {sc['messageCount']} ({sc['percentage']}%)")


def main(argv=None):
    parser = argparse.ArgumentParser(description='解析并合并多平台聊天导出')
    parser.add_argument('files', nargs='+', help='聊天导出文件（.json / .txt）')
    parser.add_argument('--map', dest='mappings', action='append', default=[],
                        metavar='NAME@CONV=NAME@CONV', help='身份映射，可重复')
    parser.add_argument('--json', dest='as_json', action='store_true', help='输出 JSON')
    parser.add_argument('--list-participants', action='store_true', help='只列出参与者（用于填写 --map）')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    files = []
    for path in args.files:
        try:
            with open(path, 'rb') as f:
                files.append((os.path.basename(path), f.read()))
        except OSError as e:
            print(f"✗ {path}: {e}", file=sys.stderr)

    result = parse_conversations(files)
    participants = extract_all_participants(result.conversations)

    if args.list_participants:
        for p in participants:
            print(f"{p['name']}@{p['conversationId']}  ({p['platform']}, {p['messageCount']} messages)")
        return 0

    if not result.conversations:
        for err in result.errors:
            print(f"✗ {err.file_name}: {err.error}", file=sys.stderr)
        print("没有成功解析任何会话", file=sys.stderr)
        return 1

    mappings = parse_mapping_args(args.mappings, participants)
    conversations = merge_conversations(result.conversations, mappings)

    if args.as_json:
        print(json.dumps({
            'conversations': [c.to_dict() for c in conversations],
            'errors': [e.to_dict() for e in result.errors],
        }, ensure_ascii=False, indent=2))
    else:
        print_summary(conversations, result.errors)

    return 0


if __name__ == "__main__":
    sys.exit(main())
