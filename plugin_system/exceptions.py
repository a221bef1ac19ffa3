# plugin_system/exceptions.py
# 插件系统自定义异常


class PluginError(Exception):
    """插件基础异常"""
    pass


class PluginNotFoundError(PluginError):
    """插件未找到异常"""
    pass


class PluginLoadError(PluginError):
    """插件加载失败异常"""
    pass


class PluginDependencyError(PluginError):
    """插件依赖错误异常"""
    pass


class PluginConfigError(PluginError):
    """插件配置错误异常"""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"配置项 {key} 无效: {message}")
