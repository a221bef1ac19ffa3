# plugin_system/logger_factory.py
# 插件日志工厂

import logging

from logger_config import get_logger


class LoggerFactory:
    """插件日志工厂"""

    @classmethod
    def get_logger(cls, plugin_id: str) -> logging.Logger:
        """获取插件专用日志器，输出到全局日志处理器

        Args:
            plugin_id: 插件ID

        Returns:
            日志器实例
        """
        return get_logger(f"Plugin.{plugin_id}")

