# plugin_system/__init__.py
# 插件系统入口

from plugin_system.plugin_manager import PluginManager
from plugin_system.plugin_base import PluginBase, PluginContext, PluginInfo
from plugin_system.logger_factory import LoggerFactory
from plugin_system.exceptions import (
    PluginError,
    PluginNotFoundError,
    PluginLoadError,
    PluginDependencyError,
    PluginConfigError
)

__version__ = "1.0.0"

__all__ = [
    'PluginManager',
    'PluginBase',
    'PluginContext',
    'PluginInfo',
    'LoggerFactory',
    'PluginError',
    'PluginNotFoundError',
    'PluginLoadError',
    'PluginDependencyError',
    'PluginConfigError',
]
