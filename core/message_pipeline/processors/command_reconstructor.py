# core/message_pipeline/processors/command_reconstructor.py
# 命令重组处理器，拼接命令名、参数和引用内容并交给宿主执行

from typing import Optional

from logger_config import get_logger
from ..processor import MessageProcessor
from ..message_context import MessageContext
from .command_resolver import CommandResolution

logger = get_logger("CommandReconstructor")


class CommandReconstructor(MessageProcessor):
    """命令重组处理器"""

    def __init__(self, ignore_quote: bool = True):
        super().__init__("command_reconstructor", priority=10)
        self.ignore_quote = ignore_quote

    def can_handle(self, context: MessageContext) -> bool:
        return context.resolution is not None

    def build(self, resolution: CommandResolution, quoted_text: Optional[str] = None) -> str:
        """重组命令字符串

        Args:
            resolution: 命令解析结果
            quoted_text: 引用内容，仅在 ignore_quote 为 False 且内容非空时附加

        Returns:
            str: 以单个空格分隔、无首尾空白的命令字符串
        """
        parts = [resolution.command_name]
        if resolution.arguments:
            parts.append(resolution.arguments)
        if not self.ignore_quote and quoted_text:
            quoted = quoted_text.strip()
            if quoted:
                parts.append(quoted)
        return " ".join(parts)

    async def process(self, context: MessageContext) -> bool:
        context.command = self.build(context.resolution, context.quoted_text)

        if context.get_extra_data("dry_run", False):
            context.set_processed(self.name)
            return True

        logger.debug(f"Executing normalized command: {context.command!r}")
        result = await context.session.execute(context.command)
        context.set_processed(self.name, result)
        return True
