"""Evaluation state: global and local bindings, function table, builtins."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable

from .ast import FunctionDeclaration
from .builtins import Builtin, default_builtins
from .errors import (
    ExternalMutationError,
    FunctionRedeclarationError,
    UndefinedAssignmentError,
    UnknownVariableError,
    VariableRedeclarationError,
)
from .values import Number, Value

logger = logging.getLogger(__name__)


class Scope(MutableMapping[str, Value]):
    """One frame of local bindings, chained to the frame it was opened in.

    Lookups walk outward through the parents, so code running in an inner
    frame sees every local of the frames that enclose it dynamically.
    Writes through ``__setitem__`` always bind in this frame.
    """

    def __init__(self, data: Mapping[str, Value] | None = None, parent: "Scope | None" = None) -> None:
        self.data: dict[str, Value] = {} if data is None else dict(data)
        self.parent = parent

    def __getitem__(self, key: str) -> Value:
        if key in self.data:
            return self.data[key]
        if self.parent is not None:
            return self.parent[key]
        raise KeyError(key)

    def __setitem__(self, key: str, value: Value) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __iter__(self):
        seen: set[str] = set()
        current: Scope | None = self
        while current is not None:
            for key in current.data:
                if key not in seen:
                    seen.add(key)
                    yield key
            current = current.parent

    def __len__(self) -> int:
        return sum(1 for _ in self.__iter__())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.find_scope(key) is not None

    def find_scope(self, key: str) -> "Scope | None":
        current: Scope | None = self
        while current is not None:
            if key in current.data:
                return current
            current = current.parent
        return None

    def set_existing(self, key: str, value: Value) -> None:
        scope = self.find_scope(key)
        if scope is None:
            raise KeyError(key)
        scope.data[key] = value


def _write_line(text: str) -> None:
    print(text, flush=True)


def _default_globals() -> dict[str, Value]:
    return {
        "pi": Number.real(math.pi),
        "e": Number.real(math.e),
    }


@dataclass
class EvaluationState:
    """The single mutable context of one evaluation run."""

    globals: dict[str, Value] = field(default_factory=dict)
    locals: Scope = field(default_factory=Scope)
    functions: dict[str, FunctionDeclaration] = field(default_factory=dict)
    builtins: Mapping[str, Builtin] = field(default_factory=lambda: MappingProxyType({}))
    call_depth: int = 0
    start_instant: float = field(default_factory=time.monotonic)
    output: Callable[[str], None] = _write_line

    @classmethod
    def with_defaults(cls, *, output: Callable[[str], None] | None = None) -> "EvaluationState":
        state = cls(
            globals=_default_globals(),
            builtins=MappingProxyType(default_builtins()),
        )
        if output is not None:
            state.output = output
        return state

    @property
    def in_function(self) -> bool:
        return self.call_depth > 0

    def reset_clock(self) -> None:
        self.start_instant = time.monotonic()

    def elapsed(self) -> float:
        return time.monotonic() - self.start_instant

    def has_local(self, name: str) -> bool:
        return name in self.locals

    def has_global(self, name: str) -> bool:
        return name in self.globals

    def has_function(self, name: str) -> bool:
        return name in self.functions or name in self.builtins

    def lookup(self, name: str) -> Value:
        scope = self.locals.find_scope(name)
        if scope is not None:
            return scope.data[name]
        if name in self.globals:
            return self.globals[name]
        raise UnknownVariableError(name)

    def declare_variable(self, name: str, value: Value) -> None:
        self.check_variable_free(name)
        if self.in_function:
            self.locals[name] = value
        else:
            self.globals[name] = value
        logger.debug("declared %s %s", "local" if self.in_function else "global", name)

    def check_variable_free(self, name: str) -> None:
        if self.has_global(name) or self.has_local(name):
            raise VariableRedeclarationError(name)

    def declare_function(self, declaration: FunctionDeclaration) -> None:
        if self.has_function(declaration.name):
            raise FunctionRedeclarationError(declaration.name)
        self.functions[declaration.name] = declaration
        logger.debug("declared function %s/%d", declaration.name, len(declaration.parameters))

    def assign(self, name: str, value: Value) -> None:
        if self.has_local(name):
            self.locals.set_existing(name, value)
            return
        if name not in self.globals:
            raise UndefinedAssignmentError(name)
        if self.in_function:
            raise ExternalMutationError(name)
        self.globals[name] = value

    @contextmanager
    def frame(self, bindings: Mapping[str, Value] | None = None) -> Iterator[Scope]:
        """Open a local frame; its bindings vanish when the block exits."""
        scope = Scope(bindings, parent=self.locals)
        self.locals = scope
        try:
            yield scope
        finally:
            self.locals = scope.parent

    @contextmanager
    def call_frame(self, bindings: Mapping[str, Value]) -> Iterator[Scope]:
        self.call_depth += 1
        try:
            with self.frame(bindings) as scope:
                yield scope
        finally:
            self.call_depth -= 1
