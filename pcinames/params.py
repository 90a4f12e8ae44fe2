"""Named, documented access parameters (paths, switches and the like)."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass
class Param:
    """One parameter: its name, current value and a help text."""

    name: str
    value: str | None
    help: str


class ParamRegistry:
    """The parameters known to an access object.

    Parameters defined later are listed first and shadow earlier
    definitions of the same name.
    """

    def __init__(self) -> None:
        self._params: list[Param] = []

    def define(self, name: str, value: str | None, help: str) -> Param:
        """Declare a parameter with its default value."""
        param = Param(name, value, help)
        self._params.insert(0, param)
        return param

    def _find(self, name: str) -> Param | None:
        return next((p for p in self._params if p.name == name), None)

    def get(self, name: str) -> str | None:
        """Return the value of a parameter, or None if it is not defined."""
        param = self._find(name)
        return param.value if param is not None else None

    def set(self, name: str, value: str | None) -> None:
        """Change the value of a defined parameter.

        Raises KeyError if no parameter of that name has been defined.
        """
        param = self._find(name)
        if param is None:
            raise KeyError(name)
        param.value = value

    def __iter__(self) -> Iterator[Param]:
        return iter(list(self._params))

    def __len__(self) -> int:
        return len(self._params)

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self._params)

    def clear(self) -> None:
        """Forget all parameters."""
        self._params.clear()