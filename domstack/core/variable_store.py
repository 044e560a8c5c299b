"""Variable store for one program run.

There is a single flat namespace per run, shared by every handler the
evaluator calls.  All access is single-threaded.

A name that maps to ``None`` is *bound but absent*; a name that is not a
key at all is *unbound*.  ``get`` returns ``None`` for both, use ``in``
to tell them apart.
"""
from __future__ import annotations

from typing import Iterator, Union

StoredValue = Union[str, int, float, None]


class VariableStore:
    """Maps 'varname' → str | int | float | None."""

    def __init__(self) -> None:
        self._vars: dict[str, StoredValue] = {}

    # ------------------------------------------------------------------
    def get(self, name: str, default: StoredValue = None) -> StoredValue:
        return self._vars.get(name, default)

    def set(self, name: str, value: StoredValue) -> None:
        self._vars[name] = value

    def delete(self, name: str) -> bool:
        """Remove ``name``; return whether it was bound.  Never raises."""
        return self._vars.pop(name, _MISSING) is not _MISSING

    def as_dict(self) -> dict[str, StoredValue]:
        return dict(self._vars)

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __repr__(self) -> str:
        return f"VariableStore({self._vars!r})"


_MISSING = object()
