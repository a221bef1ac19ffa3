# core/message_pipeline/pipeline_manager.py
# 管道管理器，负责按配置构建规范化管道，并作为中间件入口处理每条消息

from typing import Any, Optional

from logger_config import get_logger
from core.middleware import NextHandler
from core.session import Session
from .message_pipeline import MessagePipeline
from .message_context import MessageContext
from .normalizer_config import NormalizerConfig
from .pipeline_stage import PipelineStage, StageType
from .processors.tag_stripper import TagStripper
from .processors.marker_matcher import MarkerMatcher, MarkerSet
from .processors.command_resolver import CommandResolver
from .processors.command_reconstructor import CommandReconstructor

logger = get_logger("PipelineManager")


class _TextSession(Session):
    """仅用于试运行的会话，不执行命令"""

    def __init__(self, content: str, quoted_text: Optional[str] = None):
        self._content = content
        self._quoted_text = quoted_text

    @property
    def content(self) -> str:
        return self._content

    @property
    def quoted_text(self) -> Optional[str]:
        return self._quoted_text

    async def execute(self, command: str) -> Any:
        raise RuntimeError("试运行会话不能执行命令")


class PipelineManager:
    """管道管理器，负责初始化和管理消息规范化管道"""

    def __init__(self, config: NormalizerConfig, marker_set: MarkerSet):
        self.config = config
        self.marker_set = marker_set
        self.pipeline = self._build_pipeline(config, marker_set)

    @staticmethod
    def _build_pipeline(config: NormalizerConfig, marker_set: MarkerSet) -> MessagePipeline:
        """构建管道的各个阶段"""
        pipeline = MessagePipeline()
        pipeline.add_stage(PipelineStage("pre_process", StageType.PRE_PROCESS))
        pipeline.add_stage(PipelineStage("marker_matching", StageType.MARKER_MATCHING))
        pipeline.add_stage(PipelineStage("command_resolution", StageType.COMMAND_RESOLUTION))
        pipeline.add_stage(PipelineStage("command_execution", StageType.COMMAND_EXECUTION))

        pipeline.add_processor(StageType.PRE_PROCESS, TagStripper(config.ignore_mention_tag))
        pipeline.add_processor(StageType.MARKER_MATCHING, MarkerMatcher(marker_set))
        pipeline.add_processor(StageType.COMMAND_RESOLUTION, CommandResolver(config.allow_list, config.deny_list))
        pipeline.add_processor(StageType.COMMAND_EXECUTION, CommandReconstructor(config.ignore_quote))
        return pipeline

    def rebuild(self, config: Optional[NormalizerConfig] = None, marker_set: Optional[MarkerSet] = None):
        """宿主配置变化时重新构建管道

        Args:
            config: 新的插件配置，为空时沿用当前配置
            marker_set: 新的前缀/昵称集合，为空时沿用当前集合
        """
        config = config or self.config
        marker_set = marker_set or self.marker_set
        pipeline = self._build_pipeline(config, marker_set)
        # 一次性替换，正在处理的消息继续使用旧管道
        self.config, self.marker_set, self.pipeline = config, marker_set, pipeline
        logger.info(f"Pipeline rebuilt: prefixes={list(marker_set.prefixes)} nicknames={list(marker_set.nicknames)}")

    async def process_message(self, session: Session) -> MessageContext:
        """创建上下文并通过管道处理"""
        context = MessageContext(session)
        return await self.pipeline.process_message(context)

    async def handle(self, session: Session, next_handler: NextHandler) -> Any:
        """中间件入口

        识别出命令时执行规范化后的命令并返回执行结果，否则原样交给下一个处理器。

        Args:
            session: 宿主会话
            next_handler: 调用下一个中间件

        Returns:
            Any: 命令执行结果或下一个处理器的结果
        """
        context = await self.process_message(session)
        if context.processed:
            return context.response

        logger.debug(f"Passthrough ({context.passthrough_reason}): {context.content!r}")
        return await next_handler()

    async def normalize(self, text: str, quoted_text: Optional[str] = None) -> Optional[str]:
        """试运行管道，返回规范化后的命令字符串，不执行命令

        Returns:
            Optional[str]: 未识别为命令时返回 None
        """
        context = MessageContext(_TextSession(text, quoted_text))
        context.add_extra_data("dry_run", True)
        await self.pipeline.process_message(context)
        return context.command if context.processed else None
