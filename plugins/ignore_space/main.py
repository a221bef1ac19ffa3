# plugins/ignore_space/main.py
# 忽略空格插件：把带多余空格、开头 @ 标签或前缀的消息规范化为命令后重新执行

from typing import Optional

from core.message_pipeline import MarkerSet, NormalizerConfig, PipelineManager
from plugin_system import PluginBase, PluginConfigError


class IgnoreSpacePlugin(PluginBase):
    """消息规范化插件"""

    def __init__(self, plugin_id, context):
        super().__init__(plugin_id, context)
        self.pipeline_manager: Optional[PipelineManager] = None

    async def on_load(self) -> None:
        config = NormalizerConfig.from_dict(self.config)
        marker_set = MarkerSet.from_host_config(self.context.get_host_config())
        self.pipeline_manager = PipelineManager(config, marker_set)
        self.logger.info(
            f"已激活: 前缀={list(marker_set.prefixes)} 昵称={list(marker_set.nicknames)} "
            f"allow_list={list(config.allow_list)} deny_list={list(config.deny_list)}"
        )

    async def on_enable(self) -> None:
        await super().on_enable()
        self.context.register_middleware(self.pipeline_manager.handle)

    async def on_disable(self) -> None:
        await super().on_disable()
        self.context.unregister_middleware()

    async def on_config_change(self, old_config: dict, new_config: dict) -> None:
        try:
            config = NormalizerConfig.from_dict(self.config)
        except PluginConfigError as e:
            self.logger.error(f"新配置无效，保留原有插件配置: {e}")
            config = None
        self.pipeline_manager.rebuild(config, MarkerSet.from_host_config(new_config))
