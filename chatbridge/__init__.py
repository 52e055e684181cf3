"""chatbridge - 多平台聊天导出的导入、归一化与跨平台合并。"""

__version__ = "1.0.0"
