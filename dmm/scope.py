"""Frames and the call stack for dmm."""
from __future__ import annotations
from typing import Optional

from .ast_nodes import FunctionDeclaration
from .types import DmmValue, source_text


class Frame:
    """One call's variables plus the functions it can see."""

    def __init__(self, functions: Optional[dict[str, FunctionDeclaration]] = None):
        self.variables: dict[str, DmmValue] = {}
        # Shallow copy: declarations are shared, the table is not
        self.functions: dict[str, FunctionDeclaration] = dict(functions or {})

    def child(self) -> Frame:
        """A fresh frame for a call made from this one."""
        return Frame(self.functions)

    def get(self, name: str) -> Optional[DmmValue]:
        return self.variables.get(name)

    def set(self, name: str, value: DmmValue):
        self.variables[name] = value

    def has(self, name: str) -> bool:
        return name in self.variables

    def function(self, name: str) -> Optional[FunctionDeclaration]:
        return self.functions.get(name)

    def declare(self, decl: FunctionDeclaration) -> bool:
        """Register a function. Returns False if the name is already taken."""
        if decl.name in self.functions:
            return False
        self.functions[decl.name] = decl
        return True

    def describe(self) -> str:
        """Variables as ``name = value`` pairs, for display."""
        if not self.variables:
            return "(nothing)"
        return ", ".join(f"{name} = {source_text(value)}" for name, value in self.variables.items())


class CallStack:
    """Frames of the running program. The root frame is never popped."""

    def __init__(self):
        self._frames: list[Frame] = [Frame()]

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def top(self) -> Frame:
        return self._frames[-1]

    @property
    def root(self) -> Frame:
        return self._frames[0]

    def push(self, frame: Frame):
        self._frames.append(frame)

    def pop(self) -> Frame:
        if len(self._frames) == 1:
            raise RuntimeError("Empty callstack! :s")
        return self._frames.pop()

    def unwind(self):
        """Drop every frame but the root."""
        del self._frames[1:]
