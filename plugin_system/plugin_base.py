# plugin_system/plugin_base.py
# 插件基类和相关数据结构

import time
from dataclasses import dataclass, field
from typing import Dict, Any
from abc import ABC, abstractmethod

from core.middleware import Middleware


@dataclass
class PluginInfo:
    """插件信息数据类"""
    id: str  # 插件ID
    meta: Dict[str, Any]  # 插件元信息
    instance: 'PluginBase'  # 插件实例
    context: 'PluginContext'  # 插件上下文
    status: str  # 状态: enabled, disabled
    load_time: float = field(default_factory=time.time)


class PluginContext:
    """插件上下文，提供受控的资源访问接口"""

    def __init__(self, plugin_id: str, config: dict, logger, core_context):
        self.plugin_id = plugin_id
        self.config = config
        self.logger = logger
        self.core_context = core_context
        self._middleware_registered = False

    @property
    def middleware_name(self) -> str:
        return f"plugin:{self.plugin_id}"

    def register_middleware(self, handler: Middleware, prepend: bool = False):
        """向宿主中间件链注册中间件，每个插件最多注册一个

        Args:
            handler: async (session, next_handler) -> result
            prepend: 是否插入到链首
        """
        if self._middleware_registered:
            self.unregister_middleware()
        self.core_context.middleware.use(self.middleware_name, handler, prepend=prepend)
        self._middleware_registered = True
        self.logger.info(f"注册中间件: {self.middleware_name} (prepend={prepend})")

    def unregister_middleware(self) -> bool:
        """移除本插件注册的中间件"""
        if not self._middleware_registered:
            return False
        self._middleware_registered = False
        removed = self.core_context.middleware.remove(self.middleware_name)
        if removed:
            self.logger.info(f"移除中间件: {self.middleware_name}")
        return removed

    def get_host_config(self) -> Dict[str, Any]:
        """获取宿主配置（只读使用）"""
        return self.core_context.config

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """获取配置值

        Args:
            key: 配置键
            default: 默认值

        Returns:
            配置值
        """
        # 先从插件自己的配置中获取
        value = self.config.get(key, default)
        if value is not default:
            return value

        # 如果插件配置中没有，尝试从宿主配置中获取
        return self.core_context.get_config_value(key, default)


class PluginBase(ABC):
    """插件基类，所有插件必须继承此类"""

    def __init__(self, plugin_id: str, context: PluginContext):
        self.plugin_id = plugin_id
        self.context = context
        self.logger = context.logger
        self.config = context.config
        self._enabled = False

    @property
    def enabled(self) -> bool:
        """插件是否启用"""
        return self._enabled

    @abstractmethod
    async def on_load(self) -> None:
        """插件加载（激活）时调用"""
        pass

    async def on_enable(self) -> None:
        """插件启用时调用"""
        self._enabled = True

    async def on_disable(self) -> None:
        """插件禁用时调用"""
        self._enabled = False

    async def on_unload(self) -> None:
        """插件卸载时调用"""
        self.context.unregister_middleware()

    async def on_config_change(self, old_config: dict, new_config: dict) -> None:
        """宿主配置变化时调用

        Args:
            old_config: 旧配置
            new_config: 新配置
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.plugin_id} enabled={self._enabled}>"
