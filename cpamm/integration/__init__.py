"""Host-facing integration: instruction parsing and the signed dispatcher."""

from .dispatcher import DispatchResult, InstructionDispatcher, sign_instruction
from .operations import Instruction, InstructionKind, parse_instruction

__all__ = [
    "DispatchResult",
    "Instruction",
    "InstructionDispatcher",
    "InstructionKind",
    "parse_instruction",
    "sign_instruction",
]
