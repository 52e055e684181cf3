import logging

from flask import Blueprint, jsonify, request

from chatbridge.chat_import import get_merged_conversation_stats, merge_conversations
from chatbridge.web.services.batch_store import get_batch


logger = logging.getLogger(__name__)
bp = Blueprint('merge', __name__)


@bp.route('/api/batches/<batch_id>/merge', methods=['POST'])
def merge_batch(batch_id):
    """按身份映射合并批次内的会话。

    Body:
      - mappings: [{person1: {name, platform, conversationId, conversationTitle}, person2: {...}}]
        为空或全部不完整时，原样返回解析结果
    """
    try:
        result = get_batch(batch_id)
        if result is None:
            return jsonify({'success': False, 'error': '批次不存在'}), 404

        data = request.get_json(silent=True)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return jsonify({'success': False, 'error': '请求体必须是 JSON 对象'}), 400

        mappings = data.get('mappings') or []
        if not isinstance(mappings, list):
            return jsonify({'success': False, 'error': 'mappings 必须是数组'}), 400

        logger.info(f"Applying {len(mappings)} identity mapping(s) to batch {batch_id}")
        merged = merge_conversations(result.conversations, mappings)

        return jsonify({
            'success': True,
            'conversations': [c.to_dict() for c in merged],
            'stats': [get_merged_conversation_stats(c) for c in merged],
            'count': len(merged),
        })
    except Exception as e:
        logger.error(f"Error merging conversations: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
