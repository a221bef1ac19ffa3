# bot.py
# 入口文件：加载配置、激活插件、启动配置监控，并通过控制台接收消息

import argparse
import asyncio
import os
import sys

# 解析命令行参数，检查是否禁用 colorama
_no_colorama = '--no_colorama' in sys.argv

from logger_config import get_logger, set_log_level, set_no_colorama
set_no_colorama(_no_colorama)
logger = get_logger("Bot")

from core.bot_context import BotContext
from core.config_manager import load_config, get_config_path
from core.config_watcher import ConfigWatcher
from handlers.console_handler import ConsoleHandler
from plugin_system import PluginManager
import plugins

# 内置插件随 plugins 包一起安装
BUILTIN_PLUGINS_DIR = os.path.dirname(os.path.abspath(plugins.__file__))


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="消息命令规范化机器人（控制台模式）")
    parser.add_argument('--config', default=None, help="配置文件路径，默认使用当前目录下的 config.yml")
    parser.add_argument('--plugins-dir', default=BUILTIN_PLUGINS_DIR, help="插件目录，默认使用内置插件")
    parser.add_argument('--no_colorama', action='store_true', help="禁用 colorama")
    return parser.parse_args(argv)


def _on_config_update_done(future):
    """记录后台配置更新中未处理的异常"""
    if future.cancelled():
        return
    exc = future.exception()
    if exc:
        logger.error(f"应用新配置失败: {type(exc).__name__}: {exc}")


def schedule_config_update(context, new_config, loop):
    """从监控线程把配置更新提交到事件循环

    Returns:
        concurrent.futures.Future: 配置更新的结果
    """
    future = asyncio.run_coroutine_threadsafe(context.update_config(new_config), loop)
    future.add_done_callback(_on_config_update_done)
    return future


async def main(argv=None):
    """主函数，协调整个程序的启动和运行。"""
    args = parse_args(argv)

    # 1. 加载配置
    config = load_config(args.config)
    set_log_level(config.get('log_level', 'INFO'))
    logger.info("正在初始化...")

    # 2. 创建核心上下文
    context = BotContext(config)

    # 3. 初始化插件管理器并加载插件
    plugin_manager = PluginManager(context, plugins_dir=args.plugins_dir)
    await plugin_manager.load_all()

    # 4. 启动配置文件监控，回调在监控线程中执行，需要切回事件循环
    loop = asyncio.get_running_loop()

    def on_config_change(changed_files, new_config):
        logger.info(f"配置文件 {', '.join(changed_files)} 已更新")
        schedule_config_update(context, new_config, loop)

    config_watcher = ConfigWatcher([get_config_path()])
    config_watcher.add_callback(on_config_change)
    config_watcher.start()

    # 5. 控制台主循环
    console = ConsoleHandler(context)
    print("输入消息进行测试，输入 ':help' 查看控制台命令")
    try:
        await console.handle_console_input()
    finally:
        config_watcher.stop()
        for plugin in plugin_manager.list_plugins():
            await plugin_manager.unload(plugin.id)
        logger.info("主程序结束")


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("程序被用户中断")


if __name__ == "__main__":
    run()
