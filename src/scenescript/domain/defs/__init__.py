"""Instruction definition exports."""

from .instruction_defs import (
    SUSPENDING_INSTRUCTIONS,
    Branch,
    Choice,
    ClearLayer,
    Instruction,
    Jump,
    JumpIf,
    Label,
    Modify,
    PlayBgm,
    PlayMovie,
    PlaySe,
    Say,
    Scene,
    Set,
    ShowImage,
    Wait,
    jump_targets,
)

__all__ = [
    "SUSPENDING_INSTRUCTIONS",
    "Branch",
    "Choice",
    "ClearLayer",
    "Instruction",
    "Jump",
    "JumpIf",
    "Label",
    "Modify",
    "PlayBgm",
    "PlayMovie",
    "PlaySe",
    "Say",
    "Scene",
    "Set",
    "ShowImage",
    "Wait",
    "jump_targets",
]
