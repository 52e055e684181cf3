import logging

from flask import Blueprint, jsonify

from chatbridge import __version__
from chatbridge.config import Config
from chatbridge.chat_import.enums import ChatFormat


logger = logging.getLogger(__name__)
bp = Blueprint('system', __name__)


@bp.route('/api/system/info', methods=['GET'])
def system_info():
    """获取系统信息"""
    try:
        return jsonify({
            'success': True,
            'app_name': 'chatbridge',
            'version': __version__,
            'flask_host': Config.HOST,
            'flask_port': Config.PORT,
            'max_file_size_mb': Config.MAX_FILE_SIZE_MB,
            'max_files_per_batch': Config.MAX_FILES_PER_BATCH,
            'max_batches': Config.MAX_BATCHES,
            'txt_timestamp_mode': Config.TXT_TIMESTAMP_MODE,
            'supported_formats': ['facebook-json', 'instagram-json', 'line-txt', 'whatsapp-txt'],
            'detector_results': [f.value for f in ChatFormat],
        })
    except Exception as e:
        logger.error(f"Error getting system info: {e}")
        return jsonify({'success': False, 'error': str(e)}), 500
