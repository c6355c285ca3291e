"""Editor — хост-объект: intents слоя ввода, рендер, история выражений."""

from .session import CommitCallback, EditorConfig, EditorSession, RenderCallback

__all__ = [
    "EditorSession",
    "EditorConfig",
    "RenderCallback",
    "CommitCallback",
]
