# core/bot_context/__init__.py
# 负责管理宿主全局状态，如配置、中间件链和插件管理器

from typing import Any, Dict, Optional

from logger_config import get_logger
from core.middleware import MiddlewareChain
from core.session import Session

logger = get_logger("BotContext")

class BotContext:
    """机器人的核心上下文，管理宿主配置和中间件链。"""

    def __init__(self, config: Dict[str, Any]):
        self._config = dict(config)
        self.middleware = MiddlewareChain()
        self.plugin_manager = None  # 由 PluginManager 创建后设置

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    def get_config_value(self, key: str, default=None):
        """安全地获取配置值。"""
        return self._config.get(key, default)

    async def update_config(self, new_config: Dict[str, Any]):
        """替换宿主配置，并通知插件系统重新构建依赖配置的状态。"""
        old_config = self._config
        self._config = dict(new_config)
        if self.plugin_manager is not None:
            await self.plugin_manager.notify_config_change(old_config, self._config)
            logger.info("配置变化已通知插件系统")

    async def dispatch(self, session: Session) -> Any:
        """把会话交给中间件链处理。"""
        return await self.middleware.dispatch(session)
