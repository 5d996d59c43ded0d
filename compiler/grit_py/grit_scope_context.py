"""
Scope Context

Tracks which variables are already bound in the current Rust block, so the
backend knows whether an assignment introduces a `let` or reassigns.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Optional, Set


@dataclass
class ScopeContext:
    """Track variables declared in the current block."""
    declared_vars: Set[str] = field(default_factory=set)
    parent: Optional['ScopeContext'] = None

    def add_declared(self, var_name: str) -> None:
        self.declared_vars.add(var_name)

    def is_declared(self, var_name: str) -> bool:
        """Look the variable up through enclosing blocks."""
        scope: Optional[ScopeContext] = self
        while scope is not None:
            if var_name in scope.declared_vars:
                return True
            scope = scope.parent
        return False
