# plugin_system/plugin_manager.py
# 插件管理器，负责插件的生命周期管理

import os
import sys
import importlib
import importlib.util
import asyncio
import yaml
from typing import Dict, List, Optional, Any
from plugin_system.plugin_base import PluginBase, PluginContext, PluginInfo
from plugin_system.logger_factory import LoggerFactory
from plugin_system.exceptions import PluginError, PluginNotFoundError, PluginLoadError, PluginDependencyError
from core.config_manager import get_plugin_section
from logger_config import get_logger


class PluginManager:
    """插件管理器，负责插件的生命周期管理"""

    def __init__(self, core_context, plugins_dir: str = "plugins"):
        self.core_context = core_context
        self.plugins_dir = plugins_dir
        self.plugins: Dict[str, PluginInfo] = {}  # plugin_id -> PluginInfo
        self.logger = get_logger("PluginManager")
        self._lock = asyncio.Lock()
        core_context.plugin_manager = self

    async def load_all(self) -> Dict[str, bool]:
        """加载所有插件

        Returns:
            加载结果字典 {plugin_name: success}
        """
        self.logger.info("开始加载所有插件...")
        results = {}

        if not os.path.isdir(self.plugins_dir):
            self.logger.warning(f"插件目录不存在: {self.plugins_dir}")
            return results

        for plugin_name in sorted(os.listdir(self.plugins_dir)):
            plugin_path = os.path.join(self.plugins_dir, plugin_name)
            if os.path.isdir(plugin_path) and not plugin_name.startswith(('_', '.')):
                results[plugin_name] = await self.load(plugin_name)

        success_count = sum(1 for s in results.values() if s)
        self.logger.info(f"插件加载完成: 成功 {success_count}/{len(results)}")
        return results

    async def load(self, plugin_name: str) -> bool:
        """加载单个插件

        Args:
            plugin_name: 插件名称（即插件目录名）

        Returns:
            是否加载成功
        """
        plugin_id = plugin_name

        try:
            async with self._lock:
                if plugin_id in self.plugins:
                    self.logger.warning(f"插件 {plugin_id} 已加载")
                    return False

                await self._load_plugin(plugin_id)
                return True
        except PluginError as e:
            self.logger.error(f"加载插件 {plugin_id} 失败: {e}")
            return False
        except Exception as e:
            self.logger.error(f"加载插件 {plugin_id} 失败: {e}", exc_info=True)
            return False

    async def _load_plugin(self, plugin_id: str):
        plugin_path = os.path.join(self.plugins_dir, plugin_id)

        # 1. 读取插件元信息
        meta = self._load_plugin_meta(plugin_path)
        self.logger.info(f"正在加载插件: {plugin_id} v{meta.get('version', 'N/A')}")

        # 2. 检查依赖
        self._check_dependencies(meta)

        # 3. 创建插件上下文，插件配置 = 元信息默认值 + 宿主配置中的插件段
        config = self._merge_plugin_config(meta, plugin_id, self.core_context.config)
        context = PluginContext(
            plugin_id=plugin_id,
            config=config,
            logger=LoggerFactory.get_logger(plugin_id),
            core_context=self.core_context
        )

        # 4. 动态导入插件模块并实例化
        plugin_class = self._import_plugin_class(plugin_id, plugin_path, meta)
        plugin_instance = plugin_class(plugin_id, context)
        if not isinstance(plugin_instance, PluginBase):
            raise PluginLoadError(f"{plugin_class.__name__} 不是 PluginBase 的子类")

        # 5. 调用生命周期钩子
        await plugin_instance.on_load()

        # 6. 根据配置决定是否启用
        if config.get('enabled', True):
            await plugin_instance.on_enable()
            status = 'enabled'
        else:
            status = 'disabled'

        self.plugins[plugin_id] = PluginInfo(
            id=plugin_id,
            meta=meta,
            instance=plugin_instance,
            context=context,
            status=status
        )
        self.logger.info(f"插件 {plugin_id} 加载成功 (状态: {status})")

    def _import_plugin_class(self, plugin_id: str, plugin_path: str, meta: dict):
        entry_point = meta.get('entry_point', 'main:Plugin')
        if ':' not in entry_point:
            entry_point = f'main:{entry_point}'
        module_name, class_name = entry_point.split(':', 1)

        module_file = os.path.join(plugin_path, f"{module_name}.py")
        full_name = f"plugins.{plugin_id}.{module_name}"
        spec = importlib.util.spec_from_file_location(full_name, module_file)
        if spec is None or spec.loader is None or not os.path.exists(module_file):
            raise PluginLoadError(f"无法加载插件模块: {module_file}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[full_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            del sys.modules[full_name]
            raise

        plugin_class = getattr(module, class_name, None)
        if plugin_class is None:
            raise PluginLoadError(f"插件模块 {module_name} 中未找到 {class_name}")
        return plugin_class

    async def unload(self, plugin_id: str) -> bool:
        """卸载插件

        Args:
            plugin_id: 插件ID

        Returns:
            是否卸载成功
        """
        async with self._lock:
            if plugin_id not in self.plugins:
                self.logger.warning(f"插件 {plugin_id} 未加载")
                return False

            plugin_info = self.plugins[plugin_id]
            try:
                if plugin_info.status == 'enabled':
                    await plugin_info.instance.on_disable()
                await plugin_info.instance.on_unload()
            except Exception as e:
                self.logger.error(f"卸载插件 {plugin_id} 失败: {e}", exc_info=True)
                return False
            finally:
                # 确保中间件不会残留在宿主链上
                plugin_info.context.unregister_middleware()

            del self.plugins[plugin_id]
            self.logger.info(f"插件 {plugin_id} 卸载成功")
            return True

    async def reload(self, plugin_id: str) -> bool:
        """重载插件"""
        self.logger.info(f"正在重载插件: {plugin_id}")
        if await self.unload(plugin_id):
            return await self.load(plugin_id)
        return False

    async def enable(self, plugin_id: str) -> bool:
        """启用插件"""
        plugin_info = self._require(plugin_id)
        if plugin_info is None:
            return False
        if plugin_info.status == 'enabled':
            return True

        try:
            await plugin_info.instance.on_enable()
            plugin_info.status = 'enabled'
            self.logger.info(f"插件 {plugin_id} 已启用")
            return True
        except Exception as e:
            self.logger.error(f"启用插件 {plugin_id} 失败: {e}", exc_info=True)
            return False

    async def disable(self, plugin_id: str) -> bool:
        """禁用插件"""
        plugin_info = self._require(plugin_id)
        if plugin_info is None:
            return False
        if plugin_info.status == 'disabled':
            return True

        try:
            await plugin_info.instance.on_disable()
            plugin_info.status = 'disabled'
            self.logger.info(f"插件 {plugin_id} 已禁用")
            return True
        except Exception as e:
            self.logger.error(f"禁用插件 {plugin_id} 失败: {e}", exc_info=True)
            return False

    async def notify_config_change(self, old_config: Dict[str, Any], new_config: Dict[str, Any]):
        """宿主配置变化时更新插件配置并通知所有插件

        Args:
            old_config: 旧宿主配置
            new_config: 新宿主配置
        """
        for plugin_id, plugin_info in list(self.plugins.items()):
            try:
                merged = self._merge_plugin_config(plugin_info.meta, plugin_id, new_config)
                # 原地替换，插件实例持有同一个字典引用
                plugin_info.context.config.clear()
                plugin_info.context.config.update(merged)
                await plugin_info.instance.on_config_change(old_config, new_config)
                self.logger.debug(f"通知插件 {plugin_id} 配置变化成功")
            except Exception as e:
                self.logger.error(f"通知插件 {plugin_id} 配置变化失败: {e}", exc_info=True)

    def get_plugin_info(self, plugin_id: str) -> Optional[PluginInfo]:
        """获取插件信息"""
        return self.plugins.get(plugin_id)

    def list_plugins(self) -> List[PluginInfo]:
        """列出所有插件"""
        return list(self.plugins.values())

    def get_enabled_plugins(self) -> List[PluginInfo]:
        """获取所有已启用的插件"""
        return [p for p in self.plugins.values() if p.status == 'enabled']

    def _require(self, plugin_id: str) -> Optional[PluginInfo]:
        plugin_info = self.plugins.get(plugin_id)
        if plugin_info is None:
            self.logger.warning(f"插件 {plugin_id} 未加载")
        return plugin_info

    @staticmethod
    def _merge_plugin_config(meta: dict, plugin_id: str, host_config: Dict[str, Any]) -> Dict[str, Any]:
        config = dict(meta.get('config') or {})
        config.update(get_plugin_section(host_config, plugin_id))
        return config

    def _load_plugin_meta(self, plugin_path: str) -> dict:
        """加载插件元信息

        Args:
            plugin_path: 插件路径

        Returns:
            插件元信息字典

        Raises:
            PluginNotFoundError: plugin.yml 不存在
            PluginLoadError: plugin.yml 无法解析
        """
        meta_path = os.path.join(plugin_path, 'plugin.yml')
        if not os.path.exists(meta_path):
            raise PluginNotFoundError(f"插件元信息文件不存在: {meta_path}")

        try:
            with open(meta_path, 'r', encoding='utf-8') as f:
                meta = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise PluginLoadError(f"读取插件元信息失败: {e}") from e

        if not isinstance(meta, dict):
            raise PluginLoadError(f"插件元信息格式错误: {meta_path}")
        return meta

    def _check_dependencies(self, meta: dict):
        """检查插件依赖

        Args:
            meta: 插件元信息

        Raises:
            PluginDependencyError: 缺少 Python 包或插件依赖
        """
        dependencies = meta.get('dependencies') or {}

        # 检查 Python 包依赖
        for dep in dependencies.get('python', []):
            pkg_name = dep.split('>=')[0].split('==')[0].split('<=')[0].split('~=')[0].strip().lower()
            # 特殊处理包名与导入名不一致的情况
            pkg_map = {
                'pyyaml': 'yaml',
            }
            import_name = pkg_map.get(pkg_name, pkg_name)
            try:
                importlib.import_module(import_name)
            except ImportError as e:
                raise PluginDependencyError(f"缺少依赖: {dep}") from e

        # 检查插件依赖
        for dep in dependencies.get('plugins', []):
            dep_name = dep.split('>=')[0].split('==')[0].strip()
            if dep_name not in self.plugins:
                raise PluginDependencyError(f"缺少插件依赖: {dep}")
