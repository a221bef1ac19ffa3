"""End-to-end tests for the normalization middleware entry point."""

import pytest

from core.message_pipeline import MarkerSet, NormalizerConfig
from helpers import FakeSession, NextRecorder, make_manager


async def run(manager, content, quoted_text=None):
    session = FakeSession(content, quoted_text)
    next_handler = NextRecorder()
    result = await manager.handle(session, next_handler)
    return session, next_handler, result


@pytest.mark.asyncio
async def test_prefix_with_extra_spaces():
    manager = make_manager(prefixes=["!"])
    session, next_handler, result = await run(manager, "!   help   me")
    assert session.executed == ["help me"]
    assert result == "executed"
    assert next_handler.calls == 0


@pytest.mark.asyncio
async def test_deny_list_wins_over_allow_list():
    manager = make_manager(prefixes=["!"])
    session, _, _ = await run(manager, "!help-H please")
    assert session.executed == ["help-H please"]


@pytest.mark.asyncio
async def test_nickname_with_colon():
    manager = make_manager(nicknames=["Bot"])
    session, _, _ = await run(manager, "Bot: help x")
    assert session.executed == ["help x"]


@pytest.mark.asyncio
async def test_leading_mention_tag_is_ignored():
    manager = make_manager(ignore_mention_tag=True)
    session, _, _ = await run(manager, "<at:123> help y")
    assert session.executed == ["help y"]


@pytest.mark.asyncio
async def test_leading_mention_tag_kept_when_disabled():
    manager = make_manager(ignore_mention_tag=False)
    session, next_handler, _ = await run(manager, "<at:123> help y")
    # the remainder starts with "<", so there is no command name
    assert session.executed == []
    assert next_handler.calls == 1


@pytest.mark.asyncio
async def test_mention_tag_before_prefix():
    manager = make_manager(prefixes=["!"])
    session, _, _ = await run(manager, "<at:123> !help y")
    assert session.executed == ["help y"]


@pytest.mark.asyncio
async def test_tag_arguments_without_prefixes():
    manager = make_manager()
    session, _, _ = await run(manager, "help <at:123> <at:456>")
    assert session.executed == ["help <at:123> <at:456>"]


@pytest.mark.asyncio
async def test_missing_marker_passes_through():
    manager = make_manager(prefixes=["!"])
    session, next_handler, result = await run(manager, "hello")
    assert session.executed == []
    assert next_handler.calls == 1
    assert result == "passed"
    assert session.content == "hello"


@pytest.mark.asyncio
async def test_unknown_command_passes_through():
    manager = make_manager(prefixes=["!"])
    session, next_handler, _ = await run(manager, "!ping")
    assert session.executed == []
    assert next_handler.calls == 1


@pytest.mark.asyncio
async def test_no_markers_never_rejects_for_missing_marker():
    manager = make_manager()
    session, _, _ = await run(manager, "  help   me  ")
    assert session.executed == ["help me"]


@pytest.mark.asyncio
async def test_reconstructed_command_is_not_processed_again():
    manager = make_manager(prefixes=["!"])
    first, _, _ = await run(manager, "!   help   me")
    second, next_handler, _ = await run(manager, first.executed[0])
    assert second.executed == []
    assert next_handler.calls == 1


@pytest.mark.asyncio
async def test_quote_appended_only_when_not_ignored():
    excluded = make_manager(prefixes=["!"], ignore_quote=True)
    included = make_manager(prefixes=["!"], ignore_quote=False)

    session, _, _ = await run(excluded, "!help me", quoted_text="original")
    assert session.executed == ["help me"]

    session, _, _ = await run(included, "!help me", quoted_text="original")
    assert session.executed == ["help me original"]

    session, _, _ = await run(included, "!help me")
    assert session.executed == ["help me"]


@pytest.mark.asyncio
async def test_execution_failure_propagates_to_caller():
    class FailingSession(FakeSession):
        async def execute(self, command):
            raise RuntimeError("unknown command")

    manager = make_manager(prefixes=["!"])
    next_handler = NextRecorder()
    with pytest.raises(RuntimeError):
        await manager.handle(FailingSession("!help"), next_handler)
    assert next_handler.calls == 0


@pytest.mark.asyncio
async def test_normalize_does_not_execute():
    manager = make_manager(prefixes=["!"])
    assert await manager.normalize("!   help   me") == "help me"
    assert await manager.normalize("hello") is None
    assert await manager.normalize("!help", quoted_text="q") == "help"


@pytest.mark.asyncio
async def test_rebuild_replaces_markers_and_lists():
    manager = make_manager(prefixes=["!"])
    assert await manager.normalize("#help me") is None

    manager.rebuild(marker_set=MarkerSet.build(["#"], []))
    assert await manager.normalize("#help me") == "help me"
    assert await manager.normalize("!help me") is None

    manager.rebuild(config=NormalizerConfig(allow_list=("ping",), deny_list=()))
    assert await manager.normalize("#ping  now") == "ping now"
    assert await manager.normalize("#help me") is None
    assert manager.marker_set.prefixes == ("#",)


def test_stages_run_in_fixed_order():
    manager = make_manager(prefixes=["!"])
    pipeline = manager.pipeline
    names = [
        [p.name for p in pipeline.get_stage(stage_type).processors]
        for stage_type in pipeline.stage_order
    ]
    assert names == [["tag_stripper"], ["marker_matcher"], ["command_resolver"], ["command_reconstructor"]]
