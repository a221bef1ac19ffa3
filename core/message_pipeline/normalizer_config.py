# core/message_pipeline/normalizer_config.py
# 命令规范化配置：是否忽略开头标签、是否忽略引用、优先列表与普通列表

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from plugin_system.exceptions import PluginConfigError

# 旧版配置键 -> 当前配置键
LEGACY_KEYS = {
    'ignore_at': 'ignore_mention_tag',
    'whitelist': 'allow_list',
    'blacklist': 'deny_list',
}


@dataclass(frozen=True)
class NormalizerConfig:
    """插件激活时构建的不可变配置

    ignore_quote 为 True 时重组命令不附加引用内容；为 False 时附加。
    deny_list 先于 allow_list 检查，两者采用相同的前缀匹配与参数处理。
    """
    ignore_mention_tag: bool = True
    ignore_quote: bool = True
    allow_list: Tuple[str, ...] = ('help',)
    deny_list: Tuple[str, ...] = ('help-H',)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'NormalizerConfig':
        """从配置字典构建，缺失的键使用默认值

        Args:
            data: 插件配置字典，支持旧版键名 ignore_at / whitelist / blacklist

        Returns:
            NormalizerConfig: 配置实例

        Raises:
            PluginConfigError: 配置值类型不正确
        """
        values: Dict[str, Any] = {}
        for legacy, current in LEGACY_KEYS.items():
            if legacy in data:
                values[current] = data[legacy]
        for key in ('ignore_mention_tag', 'ignore_quote', 'allow_list', 'deny_list'):
            if key in data:
                values[key] = data[key]

        kwargs: Dict[str, Any] = {}
        for key in ('ignore_mention_tag', 'ignore_quote'):
            if key in values:
                kwargs[key] = _as_bool(key, values[key])
        for key in ('allow_list', 'deny_list'):
            if key in values:
                kwargs[key] = _as_command_list(key, values[key])
        return cls(**kwargs)


def _as_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise PluginConfigError(key, f"需要布尔值，实际为 {type(value).__name__}")
    return value


def _as_command_list(key: str, value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise PluginConfigError(key, f"需要字符串列表，实际为 {type(value).__name__}")
    commands = []
    for item in value:
        if not isinstance(item, str):
            raise PluginConfigError(key, f"列表元素必须是字符串，实际为 {type(item).__name__}")
        # 空字符串会匹配所有消息
        if item:
            commands.append(item)
    return tuple(commands)
