"""Tests for the command line entry point defaults and watcher bridging."""

import asyncio
import os

import pytest

import bot
from core import config_manager
from core.bot_context import BotContext
from plugin_system import PluginManager


def test_default_plugins_dir_ships_ignore_space():
    args = bot.parse_args([])
    assert os.path.isfile(os.path.join(args.plugins_dir, "ignore_space", "plugin.yml"))
    assert os.path.isfile(os.path.join(args.plugins_dir, "ignore_space", "main.py"))


def test_default_config_path_follows_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("IGNORE_SPACE_CONFIG", raising=False)
    monkeypatch.setattr(config_manager, "_config_path", None)
    assert config_manager.get_config_path() == os.path.join(str(tmp_path), "config.yml")


@pytest.mark.asyncio
async def test_default_plugins_load_outside_source_tree(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    args = bot.parse_args([])
    context = BotContext({"prefix": ["!"]})
    manager = PluginManager(context, plugins_dir=args.plugins_dir)

    assert await manager.load_all() == {"ignore_space": True}
    assert context.middleware.names() == ["plugin:ignore_space"]
    await manager.unload("ignore_space")


@pytest.mark.asyncio
async def test_failed_config_update_is_logged(caplog):
    class BrokenContext:
        async def update_config(self, new_config):
            raise RuntimeError("broken update")

    loop = asyncio.get_running_loop()
    future = await loop.run_in_executor(None, bot.schedule_config_update, BrokenContext(), {}, loop)
    with pytest.raises(RuntimeError):
        await asyncio.wrap_future(future)

    assert "应用新配置失败: RuntimeError: broken update" in caplog.text
