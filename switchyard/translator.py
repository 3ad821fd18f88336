"""
Switchyard argument translator.

translate(command, args) infers which of the supported call shapes was used and
normalizes it into an Invocation (global options, local options, positionals):

- cmd("1 --spicy")              one string: shell-split and parsed in two passes
- cmd(x, "2 --spicy")           last arg a string: only that string is parsed
- cmd("1", "2")                 plain positionals: defaults only, nothing is tokenized
- cmd("1", {"spicy": True})     trailing mapping: merged over the local defaults

Two-pass parse
- pass 1 parses the tokens against the command's own table; whatever it leaves in
  front of the first local switch goes to pass 2,
- pass 2 parses those leading tokens against the merged global/render table.

Notes
- Global switches must come before local ones; when a name is taken by the
  command, "-g 'p fields=a,b'" reaches the global one.
- Positional defaults and the arity check run for every recognized call shape; an
  argument list that fits none of them reaches the callable unchanged.
"""
import shlex
from collections.abc import Mapping
from typing import NamedTuple

from .faults import ArityError, DefaultEvalError, HelpRequest
from .layers import render_options
from .parser import Options, parse, strip_invalid
from .switches import SwitchTable
from .utils import Unset

_EMPTY = SwitchTable()


class Invocation(NamedTuple):
    """
    Immutable record of one translated call.

    - command: the Command descriptor.
    - globals: global and render options (Options).
    - options: local options, or None when no parser pass produced them.
    - args: positional arguments, in order.
    - invalid: undeclared option tokens that were dropped.
    """
    command: object
    globals: Options
    options: Options | None
    args: tuple
    invalid: tuple = ()

    @property
    def help(self):
        return bool(self.globals.get("help"))

    @property
    def render(self):
        return bool(self.globals.get("render"))

    @property
    def verbose(self):
        return bool(self.globals.get("verbose"))

    @property
    def pretend(self):
        return bool(self.globals.get("pretend"))

    @property
    def escape(self):
        return self.globals.get("global")

    @property
    def render_options(self):
        return render_options(self.globals)


def _passes(command, tokens):
    local = parse(tokens, command.options if command.options is not None else _EMPTY)
    merged = parse(local.leading, command.table, delete_invalid=True)
    trailing, invalid = strip_invalid(local.trailing)
    return (
        Options(merged),
        Options(local),
        [*merged.nonopts, *trailing],
        merged.invalid + invalid,
    )


def _escape(table, escape):
    tokens = [
        ("-" if len(word.split("=", 1)[0]) == 1 else "--") + word
        for word in shlex.split(escape)
    ]
    return parse(tokens, table)


def _prepend_default_option(command, args):
    if (
        command.default_option is not None and
        command.arity <= 1 and
        not command.splat and
        args and
        not isinstance(args[0], Mapping) and
        not str(args[0]).startswith("-") and
        "".join(map(str, args))
    ):
        args[0] = f"--{command.default_option}={args[0]}"


def _fill_defaults(command, args, target):
    for index, argument in enumerate(command.arguments):
        if index < len(args):
            continue
        if argument.splat or argument.default is Unset:
            break
        try:
            args.append(argument.resolve(target))
        except Exception as error:
            raise DefaultEvalError(
                f"unable to set default argument at position {index + 1}: {error}",
                index=index + 1,
                title="default argument",
            ) from error


def _check_arity(command, args):
    slot = int(command.options is not None)
    expected = command.arity - slot
    if len(args) > expected:
        raise ArityError(
            f"wrong number of arguments ({len(args)} for {command.arity})",
            expected=command.arity,
            given=len(args),
            title="wrong arity",
            hint=f"usage: {command.name} {command.usage}".rstrip(),
        )
    if len(args) < expected:
        raise ArityError(
            f"wrong number of arguments ({len(args)} for {expected})",
            expected=expected,
            given=len(args),
            title="wrong arity",
            hint=f"usage: {command.name} {command.usage}".rstrip(),
        )


def translate(command, args, /, *, target=None):
    """
    Normalize a raw call into an Invocation.

    Parameters
    - command: the Command descriptor.
    - args: the positional arguments the invoker received.
    - target: what deferred positional defaults are computed from (usually the
      wrapped callable or the instance it is bound to).

    Raises
    - HelpRequest: help resolved true; carries "<name> <usage>".
    - SwitchError / ArityError: the input does not fit the command.
    - DefaultEvalError: a deferred default failed.
    """
    args = list(args)
    _prepend_default_option(command, args)

    single = len(args) == 1 and isinstance(args[0], str)
    globals, options, invalid = None, None, ()
    shaped = True

    if command.options is None and not command.splat and len(args) == command.arity and not single:
        pass
    elif single:
        globals, options, args, invalid = _passes(command, shlex.split(args[0]))
    elif len(args) > 1 and isinstance(args[-1], str):
        globals, options, trailing, invalid = _passes(command, shlex.split(args[-1]))
        args = [*args[:-1], *trailing]
    elif (
        command.options is None or
        (not command.splat and len(args) <= abs(command.arity - 1)) or
        (command.splat and not (args and isinstance(args[-1], Mapping)))
    ):
        if command.options is not None:
            globals, options, _, _ = _passes(command, [])
    elif args and isinstance(args[-1], Mapping) and (command.splat or len(args) == command.arity):
        globals, options, _, _ = _passes(command, [])
        options = options | args.pop()
    else:
        shaped = False

    if globals is None:
        globals = Options(command.table.defaults)

    if escape := globals.get("global"):
        globals = globals | _escape(command.table, escape)

    invocation = Invocation(command, globals, options, tuple(args), tuple(invalid))
    if invocation.help:
        raise HelpRequest(f"{command.name} {command.usage}".rstrip(), invocation=invocation)

    if shaped:
        _fill_defaults(command, args, target)
        if not command.splat:
            _check_arity(command, args)
        invocation = invocation._replace(args=tuple(args))

    return invocation


__all__ = (
    "Invocation",
    "translate",
)
