# core/message_pipeline/__init__.py
# 消息规范化管道：去除开头标签 → 匹配前缀/昵称 → 解析命令 → 重组并执行

from .message_context import MessageContext
from .pipeline_stage import PipelineStage, StageType
from .message_pipeline import MessagePipeline
from .processor import MessageProcessor
from .normalizer_config import NormalizerConfig
from .processors.marker_matcher import MarkerSet
from .processors.command_resolver import CommandResolution
from .pipeline_manager import PipelineManager

__all__ = [
    'MessageContext',
    'PipelineStage',
    'StageType',
    'MessagePipeline',
    'MessageProcessor',
    'NormalizerConfig',
    'MarkerSet',
    'CommandResolution',
    'PipelineManager'
]
