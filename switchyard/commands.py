"""
Switchyard command layer: describe, register and expose commands.

What this module provides
- Argument: one positional slot of a command (name, optional default, splat flag).
- deferred(factory): a positional default produced at dispatch time from the
  dispatch target instead of a literal.
- Command: the immutable descriptor of a command:
  • name, alias and description,
  • ordered positional Arguments (the last one may be a splat),
  • the local SwitchTable, or None for commands that take no options mapping,
  • render option overrides and an optional default option.
- Registry / registry: thread-safe name → Entry(command, callback, invoker) store.
- command(...): decorator that builds a Command, registers it and returns the invoker.

Quick start
    from switchyard import command

    @command(arguments=["path"], options={"spicy": bool, ("level", "-l"): 1})
    def cook(path, options=None):
        return path, dict(options)

    cook("dish.txt --spicy -l 3")            # ('dish.txt', {'level': 3, 'spicy': True})
    cook("dish.txt", {"spicy": True})        # ('dish.txt', {'level': 1, 'spicy': True})

Design notes
- Nothing is patched in place: registration builds the invoker once through
  Dispatcher.wrap() and keeps the original callable on the entry.
- Descriptors never read source text or signatures; everything is declared.
"""
import copy
import functools
import operator
import re
import threading
from collections.abc import Iterable, Mapping
from typing import NamedTuple, final

from .layers import compose
from .switches import SwitchTable
from .utils import *


class CommandType(type):
    """
    Metaclass for descriptors: stable typename, read-only fields, readable repr.

    - __typename__ is the class name split on camel case with hyphens, lowercased.
    - every name in __introspectable__ becomes a property over "_<name>" (mirror()).
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
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
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


@final
class deferred:
    """
    Positional default computed when the slot is actually left empty.

    The factory is called with the dispatch target (the bound instance of a
    method, or the callable itself). Any exception it raises is reported as a
    DefaultEvalError for that slot.
    """

    def __init__(self, factory, /):
        if not callable(factory):
            raise TypeError("deferred() argument must be callable")
        self.factory = factory

    def __call__(self, target, /):
        return self.factory(target)

    def __repr__(self):
        return f"deferred({getattr(self.factory, '__qualname__', self.factory)!s})"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'deferred' is not an acceptable base type")


class Argument(metaclass=CommandType):
    """
    One positional slot.

    - name: identifier shown in usage.
    - default: literal value, deferred(factory), or Unset when the slot is mandatory.
    - splat: the slot swallows every remaining positional (must be last).
    """

    __introspectable__ = (
        "name",
        "default",
        "splat",
    )

    def __init__(self, name, /, default=Unset, *, splat=False):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} name must be a string")
        if name.startswith("*"):
            name, splat = name[1:], True
        if not re.fullmatch(r"[^\W\d]\w*", name):
            raise ValueError(f"{type(self).__typename__} name {name!r} is not an identifier")
        if splat and default is not Unset:
            raise ValueError(f"{type(self).__typename__} {name!r} cannot be a splat and have a default")
        self._name = name
        self._default = default
        self._splat = bool(splat)

    @property
    def usage(self):
        if self._splat:
            return f"[*{self._name}]"
        if self._default is Unset:
            return self._name
        if isinstance(self._default, deferred):
            return f"[{self._name}={getattr(self._default.factory, '__name__', '?')}()]"
        return f"[{self._name}={self._default!r}]"

    def resolve(self, target, /):
        """
        Value for an empty slot: a copy of the literal or the deferred factory's result.
        """
        if isinstance(self._default, deferred):
            return self._default(target)
        return copy.copy(self._default)


def _resolve_argument(x):
    match x:
        case Argument():
            return x
        case str():
            return Argument(x)
        case (str() as name,):
            return Argument(name)
        case (str() as name, default):
            return Argument(name, default)
        case _:
            raise TypeError("command 'arguments' items must be names, (name, default) pairs or arguments")


class Command(metaclass=CommandType):
    """
    Immutable command descriptor.

    Construction
    - Command(name, arguments=(), options=None, *, alias=None, descr=None,
              render_options=None, default_option=None)
    - arguments: iterable of Argument, "name", "*name" or (name, default).
    - options: a SwitchTable or declaration mapping; None means the command is
      called without a trailing options mapping.
    - render_options: declarations merged over the default render switches for
      this command only.
    - default_option: switch name a single bare value is rewritten into.

    Derived
    - arity: number of positional slots, plus one for the options slot.
    - splat: whether the last slot is a splat.
    - usage: argument usage followed by the local table usage.
    - table: the merged global/render table (built on first use, then cached).
    """

    __introspectable__ = (
        "name",
        "alias",
        "descr",
        "arguments",
        "options",
        "render_options",
        "default_option",
    )

    def __init__(
        self,
        name,
        /,
        arguments=(),
        options=None,
        *,
        alias=None,
        descr=None,
        render_options=None,
        default_option=None,
    ):
        cls = type(self)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} name must be a string")
        if not re.fullmatch(r"[^\W\d][\w-]*", name):
            raise ValueError(f"{cls.__typename__} name {name!r} is not a valid command name")
        if alias is not None and not (isinstance(alias, str) and re.fullmatch(r"[^\W\d][\w-]*", alias)):
            raise ValueError(f"{cls.__typename__} alias must be a valid command name")
        if descr is not None and not isinstance(descr, str):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError(f"{cls.__typename__} 'arguments' must be an iterable")

        arguments = [*map(_resolve_argument, arguments)]
        if any(argument.splat for argument in arguments[:-1]):
            raise ValueError(f"{cls.__typename__} splat argument must be the last one")
        if len({argument.name for argument in arguments}) != len(arguments):
            raise ValueError(f"{cls.__typename__} 'arguments' cannot contain duplicates")

        if options is not None and not isinstance(options, SwitchTable):
            if not isinstance(options, Mapping):
                raise TypeError(f"{cls.__typename__} 'options' must be a mapping, a switch table or None")
            options = SwitchTable(options)
        if render_options is not None and not isinstance(render_options, Mapping):
            raise TypeError(f"{cls.__typename__} 'render_options' must be a mapping or None")
        if default_option is not None:
            if options is None or default_option not in options:
                raise ValueError(f"{cls.__typename__} default option {default_option!r} is not declared")
            default_option = options[default_option].name

        self._name = name
        self._alias = alias
        self._descr = descr
        self._arguments = arguments
        self._options = options
        self._render_options = dict(render_options) if render_options else None
        self._default_option = default_option
        self._table = None

    # a SwitchTable is already read-only; mirror() would hide it behind a proxy
    options = property(operator.attrgetter("_options"))

    @property
    def splat(self):
        return bool(self._arguments) and self._arguments[-1].splat

    @property
    def arity(self):
        return len(self._arguments) + (self._options is not None)

    @property
    def usage(self):
        return " ".join(filter(None, [
            *(argument.usage for argument in self._arguments),
            self._options.usage if self._options is not None else "",
        ]))

    @property
    def table(self):
        if self._table is None:
            self._table = compose(self._render_options)
        return self._table

    @property
    def names(self):
        return (self._name,) if self._alias is None else (self._name, self._alias)


class Entry(NamedTuple):
    """
    Registered command: its descriptor, the original callable and the invoker.
    """
    command: Command
    callback: object
    invoker: object


class Registry:
    """
    Process-wide command store keyed by name and alias.

    Writes are serialized with a lock; reads go straight to the dict, which is
    safe once registration is done.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries = {}

    def register(self, command, callback, /, dispatcher=None):
        """
        Wrap callback with a dispatcher and store the entry under every name of command.

        Raises
        - TypeError: command is not a Command or callback is not callable.
        - ValueError: the name or alias is already registered.
        """
        from .dispatcher import Dispatcher

        if not isinstance(command, Command):
            raise TypeError("register() first argument must be a command")
        if not callable(callback):
            raise TypeError("register() second argument must be callable")

        entry = Entry(command, callback, (dispatcher or Dispatcher()).wrap(command, callback))
        with self._lock:
            if taken := [name for name in command.names if name in self._entries]:
                raise ValueError(f"command {taken[0]!r} is already registered")
            self._entries.update(dict.fromkeys(command.names, entry))
        return entry

    def __getitem__(self, name, /):
        return self._entries[name]

    def __contains__(self, name, /):
        return name in self._entries

    def get(self, name, default=None, /):
        return self._entries.get(name, default)

    def __iter__(self):
        return iter(dict.fromkeys(entry.command.name for entry in self._entries.values()))

    def __len__(self):
        return len({entry.command.name for entry in self._entries.values()})

    def __repr__(self):
        return f"registry({', '.join(self)})"


registry = Registry()


def command(source=Unset, /, *args, registry=registry, dispatcher=None, **kwargs):
    """
    Build a Command for a callable, register it and return its invoker.

    Invocation modes
    - Direct:
        invoker = command(func, arguments=[...], options={...})
    - Decorator:
        @command(arguments=[...], options={...})
        def func(...): ...

    Parameters
    - source: the callable, or Unset to get a decorator.
    - *args, **kwargs: forwarded to Command(); the name defaults to the callable's __name__.
    - registry: where to register (the process-wide registry by default).
    - dispatcher: Dispatcher used to wrap the callable (a default one otherwise).

    Returns
    - the invoker; the original callable stays reachable as registry[name].callback.
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        options = dict(kwargs)
        name = options.pop("name", getattr(source, "__name__", Unset))
        if name is Unset:
            raise TypeError("command() needs a name for callables without __name__")
        return registry.register(Command(name, *args, **options), source, dispatcher).invoker

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Argument",
    "deferred",
    "Command",
    "Entry",
    "Registry",
    "registry",
    "command",
)
