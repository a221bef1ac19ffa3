# core/middleware.py
# 宿主中间件链，按顺序把会话交给各个中间件，由中间件决定是否调用 next

from typing import Any, Awaitable, Callable, List, Tuple

from logger_config import get_logger
from core.session import Session

logger = get_logger("MiddlewareChain")

NextHandler = Callable[[], Awaitable[Any]]
Middleware = Callable[[Session, NextHandler], Awaitable[Any]]


class MiddlewareChain:
    """中间件链"""

    def __init__(self):
        self._middlewares: List[Tuple[str, Middleware]] = []

    def use(self, name: str, middleware: Middleware, prepend: bool = False):
        """注册中间件

        Args:
            name: 中间件名称，用于移除
            middleware: async (session, next_handler) -> result
            prepend: 是否插入到链首
        """
        entry = (name, middleware)
        if prepend:
            self._middlewares.insert(0, entry)
        else:
            self._middlewares.append(entry)
        logger.debug(f"Registered middleware '{name}' (prepend={prepend})")

    def remove(self, name: str) -> bool:
        """根据名称移除中间件"""
        before = len(self._middlewares)
        self._middlewares = [m for m in self._middlewares if m[0] != name]
        removed = len(self._middlewares) < before
        if removed:
            logger.debug(f"Removed middleware '{name}'")
        return removed

    def names(self) -> List[str]:
        return [name for name, _ in self._middlewares]

    async def dispatch(self, session: Session) -> Any:
        """把会话交给中间件链处理

        Returns:
            Any: 最终处理结果，链尾返回 None
        """
        # 快照，避免处理中注册/移除影响本次调用
        middlewares = list(self._middlewares)

        async def call(index: int) -> Any:
            if index >= len(middlewares):
                return None
            name, middleware = middlewares[index]
            logger.debug(f"Dispatching {session} to middleware '{name}'")
            return await middleware(session, lambda: call(index + 1))

        return await call(0)

    def __len__(self) -> int:
        return len(self._middlewares)
