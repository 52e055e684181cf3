import logging

from flask import Blueprint, jsonify, request

from chatbridge.config import Config
from chatbridge.chat_import import extract_all_participants, parse_conversations
from chatbridge.web.services.batch_store import drop_batch, get_batch, save_batch


logger = logging.getLogger(__name__)
bp = Blueprint('conversations', __name__)


@bp.route('/api/conversations/parse', methods=['POST'])
def parse_uploaded_files():
    """解析一批上传的聊天导出文件（multipart 字段名 files）"""
    try:
        uploads = request.files.getlist('files')
        if not uploads:
            return jsonify({'success': False, 'error': '未上传文件'}), 400

        if len(uploads) > Config.MAX_FILES_PER_BATCH:
            return jsonify({
                'success': False,
                'error': f'文件过多 ({len(uploads)} > {Config.MAX_FILES_PER_BATCH})'
            }), 413

        files = [(f.filename or 'unnamed', f.read()) for f in uploads]
        logger.info(f"Parsing batch of {len(files)} file(s)")

        result = parse_conversations(files)
        batch_id = save_batch(result)

        payload = result.to_dict()
        return jsonify({
            'success': True,
            'batchId': batch_id,
            'conversations': payload['conversations'],
            'errors': payload['errors'],
            'participants': extract_all_participants(result.conversations),
            # 多于一个会话时才需要让用户声明身份映射
            'needsIdentityMapping': len(result.conversations) > 1,
        })
    except Exception as e:
        logger.error(f"Error parsing uploaded files: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@bp.route('/api/batches/<batch_id>/participants', methods=['GET'])
def get_batch_participants(batch_id):
    """获取批次内所有参与者（身份映射界面的候选列表）"""
    try:
        result = get_batch(batch_id)
        if result is None:
            return jsonify({'success': False, 'error': '批次不存在'}), 404

        participants = extract_all_participants(result.conversations)
        return jsonify({'success': True, 'participants': participants, 'count': len(participants)})
    except Exception as e:
        logger.error(f"Error getting participants: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500


@bp.route('/api/batches/<batch_id>', methods=['DELETE'])
def delete_batch(batch_id):
    """丢弃批次（释放内存）"""
    if not drop_batch(batch_id):
        return jsonify({'success': False, 'error': '批次不存在'}), 404
    return jsonify({'success': True})
