"""
配置管理模块 - 读取和验证环境变量
"""

import os
from dotenv import load_dotenv

# 加载 .env 文件
load_dotenv()


class Config:
    """应用配置类"""

    # Flask配置
    DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    HOST = os.getenv('FLASK_HOST', '127.0.0.1')
    PORT = int(os.getenv('FLASK_PORT', 5000))

    # 上传/解析限制
    MAX_FILE_SIZE_MB = int(os.getenv('MAX_FILE_SIZE_MB', 200))
    MAX_FILES_PER_BATCH = int(os.getenv('MAX_FILES_PER_BATCH', 50))
    # 内存中最多保留的上传批次数，超出时淘汰最早的批次
    MAX_BATCHES = int(os.getenv('MAX_BATCHES', 20))

    LOG_LEVEL = os.getenv('CHATBRIDGE_LOG_LEVEL', 'INFO').strip().upper() or 'INFO'

    # TXT（Line / WhatsApp）时间语义：
    # - local: 导出里的 "HH:MM" 按本机时区解释（默认，与旧 TXT 导入一致）
    # - utc: 忽略本机时区，把看到的时间当作 UTC（便于跨机器得到相同的 epoch）
    _TXT_TIMESTAMP_MODE_RAW = os.getenv('CHATBRIDGE_TXT_TIMESTAMP_MODE', '').strip().lower()
    if _TXT_TIMESTAMP_MODE_RAW in ('utc', 'wysiwyg', 'as_is', 'asis', 'no_tz'):
        TXT_TIMESTAMP_MODE = 'utc'
    else:
        TXT_TIMESTAMP_MODE = 'local'

    @classmethod
    def validate_config(cls):
        """验证配置的有效性"""
        issues = []

        if cls.MAX_FILE_SIZE_MB < 1:
            issues.append("❌ MAX_FILE_SIZE_MB 配置无效")

        if cls.MAX_FILES_PER_BATCH < 1:
            issues.append("❌ MAX_FILES_PER_BATCH 配置无效")

        if cls.MAX_BATCHES < 1:
            issues.append("❌ MAX_BATCHES 配置无效")

        if cls.LOG_LEVEL not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            issues.append(f"⚠️  CHATBRIDGE_LOG_LEVEL={cls.LOG_LEVEL} 无法识别，将使用 INFO")

        if cls._TXT_TIMESTAMP_MODE_RAW and cls._TXT_TIMESTAMP_MODE_RAW not in (
            'local', 'utc', 'wysiwyg', 'as_is', 'asis', 'no_tz'
        ):
            issues.append(f"⚠️  CHATBRIDGE_TXT_TIMESTAMP_MODE={cls._TXT_TIMESTAMP_MODE_RAW} 无法识别，已按 local 处理")

        return issues

    @classmethod
    def print_config_status(cls):
        """打印配置状态"""
        print("\n" + "="*50)
        print("📋 应用配置状态")
        print("="*50)
        print(f"Flask: {cls.HOST}:{cls.PORT} (DEBUG={cls.DEBUG})")
        print(f"最大文件: {cls.MAX_FILE_SIZE_MB}MB")
        print(f"单批最多文件数: {cls.MAX_FILES_PER_BATCH}")
        print(f"最多保留批次数: {cls.MAX_BATCHES}")
        print(f"日志级别: {cls.LOG_LEVEL}")
        print(f"TXT 时间戳模式: {getattr(cls, 'TXT_TIMESTAMP_MODE', 'local')}")

        # 验证并显示问题
        issues = cls.validate_config()
        if issues:
            print("\n⚠️  配置问题:")
            for issue in issues:
                print(f"   {issue}")
        else:
            print("\n✅ 配置全部有效")

        print("="*50 + "\n")


if __name__ == '__main__':
    Config.print_config_status()
