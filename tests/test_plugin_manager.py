"""Tests for plugin activation and the ignore_space plugin lifecycle."""

from pathlib import Path

import pytest

from core.bot_context import BotContext
from plugin_system import PluginManager
from helpers import FakeSession

PLUGINS_DIR = str(Path(__file__).resolve().parents[1] / "plugins")


async def activate(config):
    context = BotContext(config)
    manager = PluginManager(context, plugins_dir=PLUGINS_DIR)
    results = await manager.load_all()
    return context, manager, results


@pytest.mark.asyncio
async def test_plugin_registers_normalizing_middleware():
    context, manager, results = await activate({"prefix": ["!"], "nickname": "Bot"})

    assert results == {"ignore_space": True}
    assert context.middleware.names() == ["plugin:ignore_space"]
    assert context.plugin_manager is manager

    session = FakeSession("!   help   me")
    assert await context.dispatch(session) == "executed"
    assert session.executed == ["help me"]

    session = FakeSession("Bot, help-H x")
    await context.dispatch(session)
    assert session.executed == ["help-H x"]


@pytest.mark.asyncio
async def test_unaddressed_message_reaches_end_of_chain():
    context, _, _ = await activate({"prefix": ["!"]})
    session = FakeSession("hello")
    assert await context.dispatch(session) is None
    assert session.executed == []


@pytest.mark.asyncio
async def test_host_plugin_section_overrides_defaults():
    context, manager, _ = await activate({
        "prefix": ["!"],
        "plugins": {"ignore_space": {"ignore_quote": False, "allow_list": ["echo"]}},
    })
    plugin = manager.get_plugin_info("ignore_space")
    assert plugin.context.config["ignore_quote"] is False

    session = FakeSession("!echo  hi", quoted_text="earlier message")
    await context.dispatch(session)
    assert session.executed == ["echo hi earlier message"]


@pytest.mark.asyncio
async def test_config_change_rebuilds_markers():
    context, _, _ = await activate({"prefix": ["!"]})

    await context.update_config({"prefix": ["#"], "nickname": []})

    session = FakeSession("!help me")
    await context.dispatch(session)
    assert session.executed == []

    session = FakeSession("#help me")
    await context.dispatch(session)
    assert session.executed == ["help me"]


@pytest.mark.asyncio
async def test_invalid_config_change_keeps_previous_lists():
    context, manager, _ = await activate({"prefix": ["!"]})

    await context.update_config({
        "prefix": ["!"],
        "plugins": {"ignore_space": {"allow_list": [1, 2]}},
    })

    session = FakeSession("!help me")
    await context.dispatch(session)
    assert session.executed == ["help me"]


@pytest.mark.asyncio
async def test_invalid_plugin_config_fails_activation():
    context, manager, results = await activate({
        "plugins": {"ignore_space": {"ignore_quote": "yes"}},
    })
    assert results == {"ignore_space": False}
    assert manager.list_plugins() == []
    assert len(context.middleware) == 0


@pytest.mark.asyncio
async def test_disable_enable_and_unload():
    context, manager, _ = await activate({"prefix": ["!"]})

    assert await manager.disable("ignore_space")
    assert len(context.middleware) == 0
    assert manager.get_enabled_plugins() == []

    assert await manager.enable("ignore_space")
    assert context.middleware.names() == ["plugin:ignore_space"]

    assert await manager.unload("ignore_space")
    assert len(context.middleware) == 0
    assert manager.get_plugin_info("ignore_space") is None
    assert not await manager.unload("ignore_space")


@pytest.mark.asyncio
async def test_reload_keeps_single_middleware():
    context, manager, _ = await activate({"prefix": ["!"]})
    assert await manager.reload("ignore_space")
    assert context.middleware.names() == ["plugin:ignore_space"]


@pytest.mark.asyncio
async def test_disabled_by_config():
    context, manager, _ = await activate({"plugins": {"ignore_space": {"enabled": False}}})
    assert manager.get_plugin_info("ignore_space").status == "disabled"
    assert len(context.middleware) == 0


@pytest.mark.asyncio
async def test_missing_plugin_and_duplicate_load():
    context, manager, _ = await activate({})
    assert not await manager.load("does_not_exist")
    assert not await manager.load("ignore_space")


@pytest.mark.asyncio
async def test_missing_python_dependency(tmp_path):
    plugin_dir = tmp_path / "needs_dep"
    plugin_dir.mkdir()
    (plugin_dir / "plugin.yml").write_text(
        "name: needs_dep\ndependencies:\n  python:\n    - surely-not-installed-package\n",
        encoding="utf-8",
    )
    (plugin_dir / "main.py").write_text("raise AssertionError('must not be imported')\n", encoding="utf-8")

    manager = PluginManager(BotContext({}), plugins_dir=str(tmp_path))
    assert await manager.load_all() == {"needs_dep": False}


@pytest.mark.asyncio
async def test_entry_point_must_subclass_plugin_base(tmp_path):
    plugin_dir = tmp_path / "not_a_plugin"
    plugin_dir.mkdir()
    (plugin_dir / "plugin.yml").write_text("entry_point: main:Thing\n", encoding="utf-8")
    (plugin_dir / "main.py").write_text(
        "class Thing:\n    def __init__(self, plugin_id, context):\n        pass\n",
        encoding="utf-8",
    )

    manager = PluginManager(BotContext({}), plugins_dir=str(tmp_path))
    assert not await manager.load("not_a_plugin")


@pytest.mark.asyncio
async def test_plugin_config_value_falls_back_to_host_config():
    context, manager, _ = await activate({"prefix": ["!"], "log_level": "DEBUG"})
    plugin_context = manager.get_plugin_info("ignore_space").context
    assert plugin_context.get_config_value("ignore_quote") is True
    assert plugin_context.get_config_value("log_level") == "DEBUG"
    assert plugin_context.get_config_value("missing", "fallback") == "fallback"


@pytest.mark.asyncio
async def test_pipeline_manager_is_per_instance():
    first, manager, _ = await activate({"prefix": ["!"]})
    second, other_manager, _ = await activate({"prefix": ["#"]})

    first_plugin = manager.get_plugin_info("ignore_space").instance
    second_plugin = other_manager.get_plugin_info("ignore_space").instance
    assert "pipeline_manager" in vars(first_plugin)
    assert first_plugin.pipeline_manager is not second_plugin.pipeline_manager
    assert first_plugin.pipeline_manager.marker_set.prefixes == ("!",)
    assert second_plugin.pipeline_manager.marker_set.prefixes == ("#",)
