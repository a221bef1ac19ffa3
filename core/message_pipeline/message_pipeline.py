# core/message_pipeline/message_pipeline.py
# 消息管道核心类，管理和执行各个处理阶段

from typing import Dict, List, Optional
from logger_config import get_logger
from .message_context import MessageContext
from .pipeline_stage import PipelineStage, StageType
from .processor import MessageProcessor

logger = get_logger("MessagePipeline")

class MessagePipeline:
    """消息处理管道，管理多个处理阶段"""

    def __init__(self):
        self.stages: Dict[StageType, PipelineStage] = {}  # 按类型存储阶段
        self.stage_order: List[StageType] = [  # 阶段执行顺序
            StageType.PRE_PROCESS,
            StageType.MARKER_MATCHING,
            StageType.COMMAND_RESOLUTION,
            StageType.COMMAND_EXECUTION
        ]

    def add_stage(self, stage: PipelineStage):
        """添加处理阶段"""
        self.stages[stage.stage_type] = stage
        logger.debug(f"Added stage: {stage.name} ({len(stage.processors)} processors)")

    def get_stage(self, stage_type: StageType) -> Optional[PipelineStage]:
        """获取指定类型的阶段"""
        return self.stages.get(stage_type)

    def add_processor(self, stage_type: StageType, processor: MessageProcessor):
        """向指定阶段添加处理器"""
        if stage_type in self.stages:
            self.stages[stage_type].add_processor(processor)
            logger.debug(f"Added processor '{processor.name}' (priority {processor.priority}) to stage '{stage_type.value}'")
        else:
            logger.error(f"Cannot add processor to non-existent stage: {stage_type.value}")

    async def process_message(self, context: MessageContext) -> MessageContext:
        """处理消息，按顺序执行各个阶段

        执行阶段抛出的异常（例如宿主命令分发失败）原样向上传播。

        Args:
            context: 消息上下文

        Returns:
            MessageContext: 处理后的上下文
        """
        logger.debug(f"Processing message with pipeline: {context}")

        for stage_type in self.stage_order:
            stage = self.stages.get(stage_type)
            if stage is None:
                logger.debug(f"Skipping missing stage: {stage_type.value}")
                continue

            should_continue = await stage.execute(context)
            if not should_continue:
                logger.debug(f"Stage {stage.name} requested to stop processing")
                break

        # 所有阶段都走完仍未执行命令，视为无需处理
        if not context.processed and not context.passthrough:
            context.set_passthrough("not_executed")

        logger.debug(f"Message processing completed: {context}")
        return context
