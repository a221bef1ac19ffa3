# core/config_manager.py
# 负责加载、校验和缓存宿主配置（命令前缀、昵称、插件配置）

import os
from typing import Any, Dict, List, Optional

import yaml

from logger_config import get_logger, log_exception

# 缓存已加载的配置
_cached_config: Optional[Dict[str, Any]] = None
_config_path: Optional[str] = None

logger = get_logger("ConfigManager")

DEFAULT_CONFIG_FILE = "config.yml"


def _default_config_path() -> str:
    """默认配置文件路径（当前工作目录下的 config.yml），可通过环境变量 IGNORE_SPACE_CONFIG 覆盖"""
    env_path = os.environ.get("IGNORE_SPACE_CONFIG")
    if env_path:
        return env_path
    return os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)


def normalize_string_list(value: Any) -> List[str]:
    """将 单个字符串 / 字符串列表 / 空值 统一为字符串列表

    Args:
        value: 原始配置值

    Returns:
        List[str]: 字符串列表，可能为空

    Raises:
        TypeError: 值既不是字符串也不是字符串列表
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        for item in value:
            if not isinstance(item, str):
                raise TypeError(f"列表元素必须是字符串，实际为 {type(item).__name__}")
        return list(value)
    raise TypeError(f"需要字符串或字符串列表，实际为 {type(value).__name__}")


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """从 YAML 文件加载配置

    Args:
        path: 配置文件路径，为空时使用上次的路径或默认路径

    Returns:
        Dict[str, Any]: 配置字典，文件不存在或校验失败时返回空配置
    """
    global _cached_config, _config_path

    if path is not None:
        _config_path = path

    config = _read_config()
    if _validate_config(config):
        _cached_config = config
        return config
    else:
        logger.error("配置文件验证失败")
        return _empty_config()


def reload_config() -> Dict[str, Any]:
    """重新加载配置文件，新配置无效时保留原有配置"""
    global _cached_config
    logger.info("开始重新加载配置文件")

    previous = _cached_config
    new_config = _read_config()
    if _validate_config(new_config):
        _cached_config = new_config
        logger.info("配置文件重新加载完成并已生效")
        return new_config
    else:
        logger.warning("新配置文件验证失败，使用原有配置")
        return previous if previous else _empty_config()


def _empty_config() -> Dict[str, Any]:
    return {"prefix": [], "nickname": [], "plugins": {}}


def _read_config() -> Dict[str, Any]:
    """读取当前配置文件并填充默认值"""
    config: Dict[str, Any] = {}
    _load_config_file(_config_path or _default_config_path(), config)
    for key, value in _empty_config().items():
        config.setdefault(key, value)
    return config


def get_config_path() -> str:
    """当前使用的配置文件路径"""
    return _config_path or _default_config_path()


def get_cached_config() -> Optional[Dict[str, Any]]:
    """获取最近一次成功加载的配置"""
    return _cached_config


def get_plugin_section(config: Dict[str, Any], plugin_id: str) -> Dict[str, Any]:
    """获取特定插件的配置段

    Args:
        config: 宿主配置
        plugin_id: 插件ID

    Returns:
        Dict[str, Any]: 插件配置段，不存在时为空字典
    """
    plugins = config.get("plugins") or {}
    section = plugins.get(plugin_id) or {}
    return dict(section)


def _validate_config(config: Dict[str, Any]) -> bool:
    """验证配置是否有效"""
    for key in ("prefix", "nickname"):
        try:
            normalize_string_list(config.get(key))
        except TypeError as e:
            logger.error(f"配置项 {key} 格式错误: {e}")
            return False

    plugins = config.get("plugins")
    if plugins is not None and not isinstance(plugins, dict):
        logger.error("plugins 配置项格式错误，应为映射")
        return False

    for plugin_id, section in (plugins or {}).items():
        if section is not None and not isinstance(section, dict):
            logger.error(f"插件 {plugin_id} 配置格式错误")
            return False

    return True


def _load_config_file(filepath: str, config: Dict[str, Any]):
    """加载单个配置文件"""
    try:
        if not os.path.exists(filepath):
            logger.warning(f"{filepath}文件不存在，使用默认配置")
            return

        with open(filepath, "r", encoding="utf-8") as f:
            file_data = yaml.safe_load(f)
            if isinstance(file_data, dict):
                config.update(file_data)
            elif file_data is not None:
                logger.error(f"{filepath}顶层必须是映射")
    except (OSError, yaml.YAMLError) as e:
        log_exception(logger, f"加载{filepath}异常", e)
