"""Label submission for resolved rules."""

from autolabel.actions.labels import (
    ItemKind,
    LabelApplyError,
    LabelSink,
    LabelTarget,
)

__all__ = [
    "ItemKind",
    "LabelApplyError",
    "LabelSink",
    "LabelTarget",
]
