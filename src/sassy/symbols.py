"""
Symbol tables for one compilation unit.

Each Engine owns one ConstantTable and one MixinTable. Nothing here is
global: at an @import boundary the importer hands copies of its tables
to the nested Engine and adopts the nested Engine's tables afterwards.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional

from sassy.errors import SassSyntaxError
from sassy.model import Line

DEFAULT_CONSTANTS = {"important": "!important"}


class ConstantTable:
    """
    Mapping of constant name to value string.

    Reads always see the latest assignment: the template is processed in
    a single pass, in textual order, with no forward references.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(DEFAULT_CONSTANTS)
        if initial:
            self._values.update(initial)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value

    def set_if_absent(self, name: str, value: str) -> None:
        """Assign only when `name` is not defined yet (the `||=` operator)."""
        if name not in self._values:
            self._values[name] = value

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def copy(self) -> ConstantTable:
        return ConstantTable(self._values)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __getitem__(self, name: str) -> str:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ConstantTable({self._values!r})"


class MixinTable:
    """
    Mapping of mixin name to its body.

    A body is the list of unresolved Lines nested under the definition,
    stored as captured. Every inclusion re-assembles the body, so the
    constants it uses are the ones in effect at the inclusion site.
    """

    def __init__(self, initial: Optional[Mapping[str, List[Line]]] = None) -> None:
        self._bodies: Dict[str, List[Line]] = dict(initial or {})

    def define(self, name: str, lines: List[Line]) -> None:
        self._bodies[name] = lines

    def include(self, name: str, line: Optional[int] = None) -> List[Line]:
        """
        Return the body of mixin `name`.

        Raises:
            SassSyntaxError: If the mixin is not defined
        """
        if name not in self._bodies:
            raise SassSyntaxError(f"Undefined mixin '{name}'.", line)
        return self._bodies[name]

    def copy(self) -> MixinTable:
        return MixinTable(self._bodies)

    def __contains__(self, name: object) -> bool:
        return name in self._bodies

    def __iter__(self) -> Iterator[str]:
        return iter(self._bodies)

    def __len__(self) -> int:
        return len(self._bodies)

    def __repr__(self) -> str:
        return f"MixinTable({sorted(self._bodies)!r})"


__all__ = ["ConstantTable", "MixinTable", "DEFAULT_CONSTANTS"]
