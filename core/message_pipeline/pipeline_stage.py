# core/message_pipeline/pipeline_stage.py
# 管道阶段，定义消息规范化的各个处理阶段

from enum import Enum
from typing import List

from logger_config import get_logger
from .message_context import MessageContext
from .processor import MessageProcessor

logger = get_logger("PipelineStage")

class StageType(Enum):
    """管道阶段类型"""
    PRE_PROCESS = "pre_process"  # 预处理阶段（去除开头标签）
    MARKER_MATCHING = "marker_matching"  # 前缀/昵称匹配阶段
    COMMAND_RESOLUTION = "command_resolution"  # 命令解析阶段
    COMMAND_EXECUTION = "command_execution"  # 命令重组与执行阶段

class PipelineStage:
    """管道阶段，按优先级依次执行该阶段的处理器"""

    def __init__(self, name: str, stage_type: StageType):
        self.name = name  # 阶段名称
        self.stage_type = stage_type  # 阶段类型
        self.processors: List[MessageProcessor] = []  # 该阶段的处理器列表

    async def execute(self, context: MessageContext) -> bool:
        """执行阶段处理

        Args:
            context: 消息上下文

        Returns:
            bool: 是否应该继续执行后续阶段
        """
        sorted_processors = sorted(self.processors, key=lambda p: p.priority, reverse=True)

        for processor in sorted_processors:
            if not processor.can_handle(context):
                continue
            logger.debug(f"Executing processor: {processor.name}")
            await processor.process(context)
            if not context.should_continue_processing():
                logger.debug(f"Message finished by processor {processor.name}")
                return False

        return True

    def add_processor(self, processor: MessageProcessor):
        """添加处理器到该阶段"""
        self.processors.append(processor)

    def __str__(self) -> str:
        return f"PipelineStage(name={self.name}, type={self.stage_type.value}, processors={len(self.processors)})"
