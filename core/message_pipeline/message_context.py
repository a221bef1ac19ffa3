# core/message_pipeline/message_context.py
# 消息上下文，用于在管道中传递消息和相关信息

from typing import Any, Dict, Optional

from core.session import Session


class MessageContext:
    """消息上下文，封装一次消息规范化过程中的所有相关信息"""

    def __init__(self, session: Session):
        self.session = session  # 宿主会话
        self.content = session.content or ''  # 原始消息内容，不会被修改
        self.quoted_text = session.quoted_text  # 引用内容
        self.text = self.content.strip()  # 工作文本，各阶段在此基础上清理

        # 解析结果
        self.resolution = None  # CommandResolution，未识别为命令时为 None
        self.command: Optional[str] = None  # 重组后的命令字符串

        # 处理结果
        self.processed = False  # 命令是否已执行
        self.passthrough = False  # 是否原样交给下一个处理器
        self.passthrough_reason: Optional[str] = None
        self.response: Any = None  # 执行结果
        self.handled_by: Optional[str] = None  # 处理者标识

        # 扩展属性
        self.extra_data: Dict[str, Any] = {}  # 用于在不同阶段传递数据

    def set_processed(self, handled_by: str, response: Any = None):
        """标记命令已执行"""
        self.processed = True
        self.handled_by = handled_by
        self.response = response

    def set_passthrough(self, reason: str):
        """标记消息无需处理，原样交给下一个处理器"""
        self.passthrough = True
        self.passthrough_reason = reason

    def add_extra_data(self, key: str, value: Any):
        """添加扩展数据"""
        self.extra_data[key] = value

    def get_extra_data(self, key: str, default: Any = None) -> Any:
        """获取扩展数据"""
        return self.extra_data.get(key, default)

    def should_continue_processing(self) -> bool:
        """判断是否应该继续处理"""
        return not (self.processed or self.passthrough)

    def __str__(self) -> str:
        return (f"MessageContext(text={self.text!r}, processed={self.processed}, "
                f"passthrough={self.passthrough})")
