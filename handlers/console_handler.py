# handlers/console_handler.py
# 负责处理控制台输入：普通行作为聊天消息交给中间件链，":" 开头的行是控制台命令

import asyncio
import sys
from typing import Any, Optional

from logger_config import get_logger, set_log_level, LOG_LEVEL_MAP
from core.config_manager import reload_config
from core.session import Session

logger = get_logger("ConsoleHandler")

# "引用内容 >> 消息" 形式（">>" 两侧需有空格）的输入会把前半部分作为引用
QUOTE_SEPARATOR = " >> "


class ConsoleSession(Session):
    """控制台会话，执行命令时只记录并返回命令字符串"""

    def __init__(self, content: str, quoted_text: Optional[str] = None):
        self._content = content
        self._quoted_text = quoted_text
        self.executed = []

    @property
    def content(self) -> str:
        return self._content

    @property
    def quoted_text(self) -> Optional[str]:
        return self._quoted_text

    async def execute(self, command: str) -> Any:
        self.executed.append(command)
        logger.success(f"执行命令: {command}")
        return command

    @classmethod
    def from_line(cls, line: str) -> 'ConsoleSession':
        """解析一行输入"""
        if QUOTE_SEPARATOR in line:
            quoted, message = line.split(QUOTE_SEPARATOR, 1)
            return cls(message, quoted.strip() or None)
        return cls(line)


class ConsoleHandler:
    """控制台处理器"""

    def __init__(self, context):
        self.context = context
        self.should_exit = False

    async def _read_line(self) -> Optional[str]:
        """在线程池中读取一行，EOF 时返回 None"""
        loop = asyncio.get_running_loop()
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            return None
        return line.rstrip("\r\n")

    async def handle_console_input(self):
        """处理控制台输入直到退出"""
        while not self.should_exit:
            line = await self._read_line()
            if line is None:
                break
            if not line.strip():
                continue
            await self.process_line(line)

    async def process_line(self, line: str) -> Any:
        """处理单行输入

        Returns:
            Any: 聊天消息的处理结果，控制台命令返回 None
        """
        if line.startswith(":"):
            await self._process_command(line[1:].strip())
            return None

        session = ConsoleSession.from_line(line)
        try:
            result = await self.context.dispatch(session)
        except Exception as e:
            logger.error(f"处理消息时出错: {e}", exc_info=True)
            return None
        if not session.executed:
            logger.info(f"消息未被处理: {session.content}")
        return result

    async def _process_command(self, command: str):
        """处理单个控制台命令"""
        parts = command.split()
        if not parts:
            return
        name = parts[0].lower()
        if name in ["exit", "quit", "q", "stop"]:
            logger.info("收到退出命令，正在关闭程序...")
            self.should_exit = True
        elif name == "reload":
            await self._handle_reload()
        elif name == "log":
            self._handle_log_level(parts)
        elif name in ["plugin", "pl"]:
            await self._handle_plugin(parts)
        elif name in ["help", "h"]:
            self._show_help()
        else:
            logger.warning(f"未知命令: {command}，输入 ':help' 查看可用命令")

    async def _handle_reload(self):
        """重新加载配置并通知插件"""
        logger.info("收到重新加载配置命令")
        await self.context.update_config(reload_config())
        logger.info("配置重新加载完成")

    def _handle_log_level(self, parts):
        """切换日志级别"""
        if len(parts) < 2 or parts[1].upper() not in LOG_LEVEL_MAP:
            logger.error(f"无效的日志级别，有效级别为: {', '.join(LOG_LEVEL_MAP)}")
            return
        set_log_level(parts[1].upper())
        logger.info(f"日志级别已切换为: {parts[1].upper()}")

    async def _handle_plugin(self, parts):
        """处理 plugin 系列命令"""
        plugin_manager = self.context.plugin_manager
        if plugin_manager is None:
            print("\n错误: 插件管理器未初始化")
            return

        sub_cmd = parts[1] if len(parts) > 1 else ""
        if sub_cmd == "list":
            print("\n插件列表及运行状态:")
            print("-" * 50)
            plugins = plugin_manager.list_plugins()
            if not plugins:
                print("  未加载任何插件")
            for plugin in plugins:
                status = "🟢 已启用" if plugin.status == 'enabled' else "🟡 已加载（禁用）"
                print(f"  {plugin.id} v{plugin.meta.get('version', 'N/A')}: {status}")
            print("-" * 50)
            return

        actions = {
            "load": plugin_manager.load,
            "unload": plugin_manager.unload,
            "reload": plugin_manager.reload,
            "enable": plugin_manager.enable,
            "disable": plugin_manager.disable,
        }
        if sub_cmd not in actions:
            print(f"\n未知子命令: {sub_cmd}")
            print("可用子命令: list, load, unload, reload, enable, disable")
            return
        if len(parts) < 3:
            print(f"\n命令格式错误: plugin {sub_cmd} 后面需要接插件名称")
            return

        plugin_name = parts[2]
        success = await actions[sub_cmd](plugin_name)
        print(f"  plugin {sub_cmd} {plugin_name}: {'成功' if success else '失败'}")

    def _show_help(self):
        """显示帮助信息"""
        print("\n普通输入会作为聊天消息处理，\"引用 >> 消息\"（两侧带空格）可附带引用内容。")
        print("控制台命令:")
        print("  :exit/:quit/:q/:stop   - 退出程序")
        print("  :reload                - 重新加载配置")
        print("  :log <级别>            - 切换日志级别 (DEBUG/INFO/WARNING/ERROR/CRITICAL)")
        print("  :plugin list           - 查看插件列表和运行状态")
        print("  :plugin load <name>    - 加载插件")
        print("  :plugin unload <name>  - 卸载插件")
        print("  :plugin reload <name>  - 重载插件")
        print("  :plugin enable <name>  - 启用插件")
        print("  :plugin disable <name> - 禁用插件")
        print("  :help/:h               - 显示此帮助信息")
