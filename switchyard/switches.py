"""
Switchyard switch specifications and tables.

Overview
- SwitchType: the five value grammars a switch can have
  (boolean, string, numeric, required, array).
- Switch: one named, typed option with optional short aliases, default and description.
- SwitchTable: read-only mapping canonical name -> Switch, plus the reverse
  short alias -> canonical name mapping used by the parser.

Declarations
- A table is built from a mapping whose keys are a name ("level", "--level",
  "max_width") or a tuple (name, *shorts), and whose values are either:
  • a type marker: a SwitchType member or one of bool/str/int/float/list,
  • a default, from which the type is inferred
    (True/False → boolean, "text" → string, 3 / 1.5 → numeric, ["a", "b"] → array),
  • a dict {"type": ..., "default": ..., "descr": ..., "shorts": ...}.

Short aliases
- When a switch declares no alias and its name is longer than one letter, "-<first letter>"
  is generated for it.
- Declared aliases win over generated ones; among generated ones the earliest
  declaration wins.
- An alias that equals another switch's flag form is dropped (the canonical name wins).

Quick example
    >>> table = SwitchTable({"verbose": bool, ("level", "-l"): 1, "name": "me"})
    >>> table.usage
    '[--verbose] [--level=1] [--name=me]'
"""
import functools
import operator
import re
from collections.abc import Iterable, Mapping, Sequence
from enum import StrEnum

from rich.box import ROUNDED
from rich.table import Table
from rich.text import Text

from .utils import *


class SwitchType(StrEnum):
    BOOLEAN = "boolean"
    STRING = "string"
    NUMERIC = "numeric"
    REQUIRED = "required"
    ARRAY = "array"


# Python types accepted in place of a SwitchType member.
_MARKERS = {
    bool: SwitchType.BOOLEAN,
    str: SwitchType.STRING,
    int: SwitchType.NUMERIC,
    float: SwitchType.NUMERIC,
    list: SwitchType.ARRAY,
    tuple: SwitchType.ARRAY,
}


class SpecType(type):
    """
    Metaclass that gives specs a stable typename and readable representations.

    Responsibilities
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in construction messages.
    - Every name listed in __introspectable__ becomes a read-only property backed
      by "_<name>" (see mirror()).
    - __repr__/__rich_repr__ list the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name, /):
    """
    Internal: validate a switch name and return its canonical form.

    Accepted spellings: "level", "-l", "--level", "max_width", "--max-width".
    The canonical form drops the dashes and uses underscores ("max_width").
    """
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} name cannot be empty")
    elif not re.fullmatch(r"-{0,2}[^\W\d_][\w-]*", name):
        raise ValueError(f"{cls.__typename__} name {name!r} is not a valid switch name")
    return normalize(name)


def _sanitize_shorts(cls, shorts, /):
    """
    Internal: validate short aliases ("v" or "-v") and return them dashed, in order.
    """
    if isinstance(shorts, str) or not isinstance(shorts, Iterable):
        raise TypeError(f"{cls.__typename__} 'shorts' must be an iterable of strings")
    sanitized = []
    for short in shorts:
        if not isinstance(short, str):
            raise TypeError(f"{cls.__typename__} 'shorts' must be an iterable of strings")
        elif not re.fullmatch(r"-?[A-Za-z]", short := short.strip()):
            raise ValueError(f"{cls.__typename__} short alias {short!r} must be a single letter")
        elif (short := "-" + short.lstrip("-")) in sanitized:
            raise ValueError(f"{cls.__typename__} 'shorts' cannot contain duplicates")
        sanitized.append(short)
    return sanitized


def _sanitize_default(cls, type, default, /):
    """
    Internal: check a default against its switch type; arrays are stored as tuples.
    """
    if default is Unset:
        return default
    match type:
        case SwitchType.BOOLEAN if not isinstance(default, bool):
            raise TypeError(f"boolean {cls.__typename__} default must be a bool")
        case SwitchType.STRING if not isinstance(default, str):
            raise TypeError(f"string {cls.__typename__} default must be a string")
        case SwitchType.NUMERIC if isinstance(default, bool) or not isinstance(default, int | float):
            raise TypeError(f"numeric {cls.__typename__} default must be an int or a float")
        case SwitchType.REQUIRED:
            raise ValueError(f"required {cls.__typename__} cannot declare a default")
        case SwitchType.ARRAY:
            if isinstance(default, str) or not isinstance(default, Sequence):
                raise TypeError(f"array {cls.__typename__} default must be a sequence of strings")
            if not all(isinstance(item, str) for item in default):
                raise TypeError(f"array {cls.__typename__} default must be a sequence of strings")
            return tuple(default)
    return default


class Switch(metaclass=SpecType):
    """
    Named, typed option specification.

    Properties
    - name: canonical name ("max_width"), the key used in parsed options.
    - flag: dashed form shown in usage ("--max-width", "-x" for one-letter names).
    - shorts: explicitly declared short aliases ("-m", ...); generated aliases
      live on the table, not on the switch.
    - type: SwitchType.
    - default: Unset when the switch declares none.
    - descr: short description or None.
    """

    __introspectable__ = (
        "name",
        "flag",
        "shorts",
        "type",
        "default",
        "descr",
    )

    def __init__(self, name, /, type=SwitchType.BOOLEAN, default=Unset, *, shorts=(), descr=Unset):
        cls = self.__class__
        if not isinstance(type, SwitchType):
            raise TypeError(f"{cls.__typename__} 'type' must be a switch type")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        self._name = _sanitize_name(cls, name)
        self._flag = dasherize(self._name)
        self._shorts = _sanitize_shorts(cls, shorts)
        self._type = type
        self._default = _sanitize_default(cls, type, default)
        self._descr = coalesce(descr)

    @property
    def placeholder(self):
        """
        Sample value shown in usage: the default when there is one, else a metavar.
        """
        if self._type is SwitchType.ARRAY and self._default is not Unset:
            return ",".join(self._default)
        if self._default is not Unset:
            return str(self._default)
        if self._type is SwitchType.NUMERIC:
            return "N"
        return self._name.upper()

    @property
    def usage(self):
        match self._type:
            case SwitchType.BOOLEAN:
                return f"[{self._flag}]"
            case SwitchType.REQUIRED:
                return f"{self._flag}={self._name.upper()}"
            case _:
                return f"[{self._flag}={self.placeholder}]"


def _resolve_type(cls, marker, /):
    if isinstance(marker, SwitchType):
        return marker
    if isinstance(marker, type) and marker in _MARKERS:
        return _MARKERS[marker]
    if isinstance(marker, str):
        try:
            return SwitchType(marker)
        except ValueError:
            raise ValueError(f"{cls.__typename__} type {marker!r} is not a switch type") from None
    raise TypeError(f"{cls.__typename__} type must be a switch type or one of bool/str/int/float/list")


def _infer_type(cls, default, /):
    match default:
        case bool():
            return SwitchType.BOOLEAN
        case str():
            return SwitchType.STRING
        case int() | float():
            return SwitchType.NUMERIC
        case list() | tuple():
            return SwitchType.ARRAY
    raise TypeError(f"{cls.__typename__} default {default!r} has no switch type")


def declare(key, value, /):
    """
    Build a Switch from one declaration entry (see the module docstring).

    Raises
    - TypeError / ValueError: when the declaration cannot be understood. These are
      registration bugs and are never turned into user-facing diagnostics.
    """
    if isinstance(key, tuple):
        if not key:
            raise ValueError("switch declaration key cannot be an empty tuple")
        name, *shorts = key
    else:
        name, shorts = key, []

    if isinstance(value, Mapping):
        if unknown := set(value) - {"type", "default", "descr", "shorts"}:
            raise ValueError(f"switch {name!r} declaration has unknown keys: {', '.join(sorted(unknown))}")
        default = value.get("default", Unset)
        if "type" in value:
            kind = _resolve_type(Switch, value["type"])
        elif default is not Unset:
            kind = _infer_type(Switch, default)
        else:
            kind = SwitchType.BOOLEAN
        return Switch(
            name,
            kind,
            default,
            shorts=[*shorts, *value.get("shorts", ())],
            descr=value.get("descr", Unset),
        )

    if isinstance(value, SwitchType | type):
        return Switch(name, _resolve_type(Switch, value), shorts=shorts)
    if value is None:
        raise TypeError(f"switch {name!r} declaration cannot be None")
    return Switch(name, _infer_type(Switch, value), value, shorts=shorts)


class SwitchTable(Mapping):
    """
    Read-only table of switches keyed by canonical name.

    Lookups normalize the key, so table["max-width"] and table["max_width"] are
    the same entry. Built once; there is no way to mutate it afterwards.
    """

    def __init__(self, spec=(), /):
        if isinstance(spec, SwitchTable):
            switches = list(spec.values())
        elif isinstance(spec, Mapping):
            switches = [declare(key, value) for key, value in spec.items()]
        elif isinstance(spec, Iterable):
            switches = list(spec)
            if not all(isinstance(switch, Switch) for switch in switches):
                raise TypeError("switch-table() argument must be a mapping of declarations or switches")
        else:
            raise TypeError("switch-table() argument must be a mapping of declarations or switches")

        self._switches = {}
        for switch in switches:
            if switch.name in self._switches:
                raise ValueError(f"switch-table name {switch.flag!r} is declared twice")
            self._switches[switch.name] = switch

        self._flags = {switch.flag: switch.name for switch in self._switches.values()}

        # Declared aliases first, then generated ones; the earliest claim wins.
        shorts = {}
        for switch in self._switches.values():
            for short in switch.shorts:
                if short in shorts:
                    raise ValueError(f"switch-table short alias {short!r} is declared twice")
                shorts[short] = switch.name
        for switch in self._switches.values():
            if not switch.shorts and len(switch.name) > 1:
                shorts.setdefault("-" + switch.name[0], switch.name)

        self._shorts = {short: name for short, name in shorts.items() if short not in self._flags}

    shorts = mirror("shorts")

    def __getitem__(self, key, /):
        return self._switches[normalize(key)]

    def __iter__(self):
        return iter(self._switches)

    def __len__(self):
        return len(self._switches)

    def __repr__(self):
        return f"switch-table({', '.join(switch.flag for switch in self._switches.values())})"

    def __str__(self):
        return self.usage

    def lookup(self, token, /):
        """
        Return the switch a raw token names (flag form or short alias), else None.

        Underscores and dashes are interchangeable in long names ("--max_width").
        """
        token = token.replace("_", "-")
        if token in self._shorts:
            return self._switches[self._shorts[token]]
        if token in self._flags:
            return self._switches[self._flags[token]]
        return None

    def resolve(self, token, /):
        """
        Flag form for a short alias; any other token is returned with dashes normalized.
        """
        token = token.replace("_", "-")
        if token in self._shorts:
            return self._switches[self._shorts[token]].flag
        return token

    @property
    def defaults(self):
        """
        Declared defaults by canonical name (array defaults as fresh lists).
        """
        return {
            name: list(switch.default) if switch.type is SwitchType.ARRAY else switch.default
            for name, switch in self._switches.items() if switch.default is not Unset
        }

    @property
    def usage(self):
        return " ".join(switch.usage for switch in self._switches.values())

    def aliases(self, name, /):
        """
        Every short alias (declared or generated) that resolves to the given switch.
        """
        name = normalize(name)
        return tuple(short for short, target in self._shorts.items() if target == name)

    def __rich__(self):
        table = Table(box=ROUNDED, show_edge=True, pad_edge=True)
        table.add_column("option", no_wrap=True)
        table.add_column("type")
        table.add_column("default")
        table.add_column("description")
        for switch in self._switches.values():
            table.add_row(
                Text(", ".join((*self.aliases(switch.name), switch.flag))),
                Text(str(switch.type)),
                Text("" if switch.default is Unset else repr(switch.default)),
                Text(switch.descr or ""),
            )
        return table


__all__ = (
    "SwitchType",
    "Switch",
    "SwitchTable",
    "declare",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports.
del SpecType
