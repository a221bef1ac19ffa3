# core/message_pipeline/processors/command_resolver.py
# 命令解析处理器，从去除前缀后的消息中提取命令名和参数

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from logger_config import get_logger
from ..processor import MessageProcessor
from ..message_context import MessageContext

logger = get_logger("CommandResolver")

TAG_PATTERN = re.compile(r"<.*?>")


@dataclass(frozen=True)
class CommandResolution:
    """命令解析结果"""
    command_name: str
    arguments: str = ""


def _match_prefix(text: str, commands: Iterable[str]) -> Optional[str]:
    """按顺序返回第一个作为 text 前缀的命令"""
    for command in commands:
        if text.startswith(command):
            return command
    return None


class CommandResolver(MessageProcessor):
    """命令解析处理器"""

    def __init__(self, allow_list: Sequence[str], deny_list: Sequence[str]):
        super().__init__("command_resolver", priority=10)
        self.allow_list = tuple(allow_list)
        self.deny_list = tuple(deny_list)

    def resolve(self, text: str) -> Optional[CommandResolution]:
        """解析命令

        文本包含 "<" 时，"<" 之前的部分为命令名，所有 <...> 标签按出现顺序
        以单个空格拼接为参数，不查询命令列表。否则先查 deny_list 再查
        allow_list，取第一个前缀匹配的命令，剩余部分去除首尾空白作为参数。

        Args:
            text: 去除开头标签和前缀后的消息

        Returns:
            Optional[CommandResolution]: 未识别为命令时返回 None
        """
        if "<" in text:
            command_name = text.split("<", 1)[0].strip()
            if not command_name:
                return None
            return CommandResolution(command_name, " ".join(TAG_PATTERN.findall(text)))

        command_name = _match_prefix(text, self.deny_list) or _match_prefix(text, self.allow_list)
        if command_name is None:
            return None
        return CommandResolution(command_name, text[len(command_name):].strip())

    async def process(self, context: MessageContext) -> bool:
        resolution = self.resolve(context.text)
        if resolution is None:
            logger.debug(f"Not a known command, passing through: {context.text!r}")
            context.set_passthrough("unknown_command")
            return False

        logger.debug(f"Resolved command: {resolution.command_name!r} args={resolution.arguments!r}")
        context.resolution = resolution
        return True
