from __future__ import annotations

from typing import Callable, Iterable, Optional
from typing_extensions import TypeAlias

from ..tree import Statement
from ..types import Frame, ToyValue

ExecFunc: TypeAlias = Callable[[Statement, Frame], Optional[ToyValue]]

def exec_statements(stmts: Iterable[Statement], frame: Frame, exec_func: ExecFunc) -> Optional[ToyValue]:
    """Run statements in order; the first one that returns ends the block."""
    for stmt in stmts:
        result = exec_func(stmt, frame)
        if result is not None:
            return result

    return None
