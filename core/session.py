# core/session.py
# 会话能力接口：消息管道只依赖消息内容、引用内容和命令执行

from abc import ABC, abstractmethod
from typing import Any, Optional


class Session(ABC):
    """宿主会话的最小能力接口"""

    @property
    @abstractmethod
    def content(self) -> str:
        """原始消息文本"""

    @property
    def quoted_text(self) -> Optional[str]:
        """被回复消息的文本，没有引用时为 None"""
        return None

    @abstractmethod
    async def execute(self, command: str) -> Any:
        """将命令字符串交给宿主的命令分发器执行

        Args:
            command: 完整命令字符串

        Returns:
            Any: 宿主分发器的执行结果
        """

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(content={self.content!r})"
