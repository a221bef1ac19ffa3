# core/message_pipeline/processors/tag_stripper.py
# 去除消息开头的标签（例如 @ 提及）

import re

from ..processor import MessageProcessor
from ..message_context import MessageContext

# 开头的单个 <...> 标签及其后的空白
LEADING_TAG_PATTERN = re.compile(r"^<.*?>\s*")


class TagStripper(MessageProcessor):
    """开头标签去除处理器"""

    def __init__(self, enabled: bool = True):
        super().__init__("tag_stripper", priority=10)
        self.enabled = enabled

    def can_handle(self, context: MessageContext) -> bool:
        return self.enabled

    @staticmethod
    def strip(text: str) -> str:
        """去除最多一个开头标签，其他位置的标签保持不变"""
        return LEADING_TAG_PATTERN.sub("", text, count=1)

    async def process(self, context: MessageContext) -> bool:
        context.text = self.strip(context.text)
        return True
