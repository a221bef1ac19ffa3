# core/message_pipeline/processors/marker_matcher.py
# 前缀/昵称匹配处理器，判断消息是否在呼叫机器人并去除前缀

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Pattern, Tuple, Union

from logger_config import get_logger
from core.config_manager import normalize_string_list
from ..processor import MessageProcessor
from ..message_context import MessageContext

logger = get_logger("MarkerMatcher")

# 昵称后可选的分隔符（半角与全角的逗号、冒号）
NICKNAME_SEPARATORS = "[,:，：]?"

StringOrList = Union[str, Iterable[str], None]


@dataclass(frozen=True)
class MarkerSet:
    """由宿主前缀和昵称派生的不可变匹配集合"""
    prefixes: Tuple[str, ...] = ()
    nicknames: Tuple[str, ...] = ()
    pattern: Optional[Pattern[str]] = None

    @classmethod
    def build(cls, prefixes: StringOrList = None, nicknames: StringOrList = None) -> 'MarkerSet':
        """构建匹配集合

        每个字面量都会先转义再拼入正则，前缀在前、昵称在后，保持配置顺序。
        前缀和昵称都为空时不构建正则，所有消息都视为已呼叫机器人。

        Args:
            prefixes: 命令前缀，可以是单个字符串、字符串列表或空
            nicknames: 机器人昵称，可以是单个字符串、字符串列表或空
        """
        prefixes = tuple(normalize_string_list(_as_list(prefixes)))
        nicknames = tuple(normalize_string_list(_as_list(nicknames)))
        if not prefixes and not nicknames:
            return cls(prefixes, nicknames, None)

        alternatives = [re.escape(p) for p in prefixes]
        alternatives += [re.escape(n) + NICKNAME_SEPARATORS for n in nicknames]
        pattern = re.compile(r"^(?:" + "|".join(alternatives) + r")\s*")
        return cls(prefixes, nicknames, pattern)

    @classmethod
    def from_host_config(cls, config: Mapping[str, Any]) -> 'MarkerSet':
        """从宿主配置的 prefix / nickname 构建"""
        return cls.build(config.get('prefix'), config.get('nickname'))


def _as_list(value: StringOrList):
    # 其他可迭代对象（如生成器）先展开，字符串与列表交给 normalize_string_list
    if value is None or isinstance(value, (str, list, tuple)):
        return value
    return list(value)


class MarkerMatcher(MessageProcessor):
    """前缀/昵称匹配处理器"""

    def __init__(self, marker_set: MarkerSet):
        super().__init__("marker_matcher", priority=10)
        self.marker_set = marker_set

    @property
    def pattern(self) -> Optional[Pattern[str]]:
        return self.marker_set.pattern

    def matches(self, text: str) -> bool:
        """消息开头是否为前缀或昵称；未配置任何前缀和昵称时总为 True"""
        if self.pattern is None:
            return True
        return self.pattern.match(text) is not None

    def strip(self, text: str) -> str:
        """去除开头的前缀或昵称以及其后的空白"""
        if self.pattern is None:
            return text
        return self.pattern.sub("", text, count=1)

    async def process(self, context: MessageContext) -> bool:
        if not self.matches(context.text):
            logger.debug(f"No marker matched, passing through: {context.text!r}")
            context.set_passthrough("no_marker")
            return False

        context.text = self.strip(context.text)
        return True
