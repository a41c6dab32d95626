from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from ..errors import ParameterBindingNotFound


class IndexBindingScope:
    def __init__(self, name: str):
        self.name = name
        self.count = 0

    def __repr__(self) -> str:
        return f"IndexBindingScope({self.name!r}, count={self.count})"

    def increment(self) -> None:
        self.count += 1


class IndexBindings:
    """Iteration counters of the named repetitions being walked, innermost last."""

    def __init__(self):
        self._scopes: list[IndexBindingScope] = []

    @contextmanager
    def scope(self, name: str) -> Iterator[IndexBindingScope]:
        scope = IndexBindingScope(name)
        self._scopes.append(scope)
        before_len = len(self._scopes)
        try:
            yield scope
        finally:
            assert len(self._scopes) == before_len
            assert self._scopes.pop() is scope

    def get_maybe_index(self, name: str) -> int | None:
        for scope in reversed(self._scopes):
            if scope.name == name:
                return scope.count
        return None

    def get_index(self, name: str) -> int:
        index = self.get_maybe_index(name)
        if index is None:
            raise ParameterBindingNotFound(name)
        return index

    def active(self) -> frozenset[str]:
        return frozenset(scope.name for scope in self._scopes)


__all__ = ("IndexBindingScope", "IndexBindings")
