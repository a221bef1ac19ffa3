"""Shared test doubles for the message pipeline."""

from typing import Any, List, Optional

from core.message_pipeline import MarkerSet, NormalizerConfig, PipelineManager
from core.session import Session


class FakeSession(Session):
    """In-memory session that records executed commands."""

    def __init__(self, content: str, quoted_text: Optional[str] = None, result: Any = "executed"):
        self._content = content
        self._quoted_text = quoted_text
        self._result = result
        self.executed: List[str] = []

    @property
    def content(self) -> str:
        return self._content

    @property
    def quoted_text(self) -> Optional[str]:
        return self._quoted_text

    async def execute(self, command: str) -> Any:
        self.executed.append(command)
        return self._result


class NextRecorder:
    """Stands in for the host's next handler."""

    def __init__(self, result: Any = "passed"):
        self.calls = 0
        self.result = result

    async def __call__(self) -> Any:
        self.calls += 1
        return self.result


def make_manager(prefixes=None, nicknames=None, **config) -> PipelineManager:
    return PipelineManager(NormalizerConfig(**config), MarkerSet.build(prefixes, nicknames))
