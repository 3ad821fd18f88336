"""
Switchyard low-level option parser.

Scope
- Turn a token sequence into typed option values against one SwitchTable.
- Keep the non-option tokens that precede the first recognized switch (leading)
  and everything after the last consumed one (trailing).

Token forms
- "--long", "-x"                  switch, value (if any) in the next token
- "--long=value", "-x=value"      switch with an inline value
- "-x1.5"                          short switch with an inline numeric value
- "-xyz"                           squashed short booleans, expanded to -x -y -z
- "--no-long"                      negation of a declared boolean "long"

Notes
- Underscores and dashes are interchangeable in long names ("--max_width").
- A token counts as an option only if the table declares it; anything else is
  a plain value, so "-5" or an undeclared "--foo" ends up in leading/trailing.
- With delete_invalid=True, dash-prefixed tokens left in leading/trailing are
  removed and reported on ParseResult.invalid instead of passed through.
"""
import re
from collections import deque
from collections.abc import Mapping

from .faults import MissingRequiredError, MissingValueError, NumericValueError, OccupiedValueError
from .switches import SwitchTable, SwitchType
from .utils import normalize

NUMERIC = re.compile(r"\d*\.\d+|\d+")
LONG = re.compile(r"(--\w[\w-]*)")
SHORT = re.compile(r"(-[a-z])", re.IGNORECASE)
EQ = re.compile(r"(--\w[\w-]*|-[a-z])=(.*)", re.IGNORECASE | re.DOTALL)
SHORT_SQ = re.compile(r"-([a-z]{2,})", re.IGNORECASE)
SHORT_NUM = re.compile(r"(-[a-z])(\d*\.\d+|\d+)", re.IGNORECASE)
NEGATION = re.compile(r"--no-(\w[\w-]*)")


class Options(Mapping):
    """
    Read-only option values keyed by canonical name.

    Any spelling of a switch name can be used for lookups:
        >>> options = Options({"max_width": 80})
        >>> options["max-width"], options["--max-width"], options.get("max_width")
        (80, 80, 80)

    `options | mapping` returns a new Options with the mapping's values winning.
    """

    def __init__(self, values=(), /):
        self._values = {normalize(key): value for key, value in dict(values).items()}

    def __getitem__(self, key, /):
        return self._values[normalize(key)]

    def __contains__(self, key, /):
        return normalize(key) in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __or__(self, other, /):
        if not isinstance(other, Mapping):
            return NotImplemented
        return Options(self._values | {normalize(key): value for key, value in other.items()})

    def __ror__(self, other, /):
        if not isinstance(other, Mapping):
            return NotImplemented
        return Options({normalize(key): value for key, value in other.items()} | self._values)

    def __repr__(self):
        return f"options({self._values!r})"

    def __rich_repr__(self):
        yield from self._values.items()


class ParseResult(Options):
    """
    Options produced by one parse, together with the tokens around them.

    - leading: non-option tokens before the first recognized switch
    - trailing: tokens left after the last consumed switch
    - invalid: dash-prefixed tokens removed in invalid-option-stripping mode
    """

    def __init__(self, values=(), /, leading=(), trailing=(), invalid=()):
        super().__init__(values)
        self.leading = tuple(leading)
        self.trailing = tuple(trailing)
        self.invalid = tuple(invalid)

    @property
    def nonopts(self):
        return self.leading + self.trailing

    def __repr__(self):
        return f"parse-result({self._values!r}, leading={self.leading!r}, trailing={self.trailing!r})"


def strip_invalid(tokens, /):
    """
    Split tokens into (kept, invalid): anything starting with "-" is invalid here.

    Callers use it on tokens that already went through a parse, where every
    declared switch has been consumed, so a leftover dash means an unknown option.
    """
    kept, invalid = [], []
    for token in tokens:
        (invalid if isinstance(token, str) and token.startswith("-") else kept).append(token)
    return tuple(kept), tuple(invalid)


class _Parser:
    """internal: one parse over a token deque."""

    def __init__(self, table, tokens):
        self.table = table
        self.tokens = deque(tokens)

    def peek(self):
        return self.tokens[0] if self.tokens else None

    def valid(self, token):
        if not isinstance(token, str):
            return False
        if self.table.lookup(token) is not None:
            return True
        if match := NEGATION.fullmatch(token.replace("_", "-")):
            positive = self.table.lookup("--" + match[1])
            return positive is not None and positive.type is SwitchType.BOOLEAN
        return False

    def current_is_option(self):
        if not isinstance(token := self.peek(), str):
            return False
        if match := LONG.fullmatch(token) or SHORT.fullmatch(token) or EQ.fullmatch(token) or SHORT_NUM.fullmatch(token):
            return self.valid(match[1])
        if match := SHORT_SQ.fullmatch(token):
            return any(self.valid("-" + letter) for letter in match[1])
        return False

    def value(self, name, *, numeric=False):
        if not self.tokens:
            raise MissingValueError(
                f"no value provided for option '{name}'",
                switch=name,
                title="missing value",
                hint=f"pass a value after {self.table[name].flag}",
            )
        if numeric:
            if not (isinstance(token := self.peek(), str) and NUMERIC.fullmatch(token)):
                raise NumericValueError(
                    f"expected numeric value for option '{name}'; got {token!r}",
                    switch=name,
                    title="not a number",
                )
            token = self.tokens.popleft()
            return float(token) if "." in token else int(token)
        if self.valid(token := self.peek()):
            raise OccupiedValueError(
                f"cannot pass '{token}' as an argument to option '{name}'",
                switch=name,
                title="missing value",
                hint=f"{token} is an option itself",
            )
        return self.tokens.popleft()

    def run(self, *, opts_before_args=False):
        values = self.table.defaults
        leading = []
        if not opts_before_args:
            while self.tokens and not self.current_is_option():
                leading.append(self.tokens.popleft())

        while self.current_is_option():
            token = self.tokens.popleft()
            if match := SHORT_SQ.fullmatch(token):
                self.tokens.extendleft(reversed(["-" + letter for letter in match[1]]))
                continue
            if match := EQ.fullmatch(token) or SHORT_NUM.fullmatch(token):
                self.tokens.appendleft(match[2])
                token = match[1]

            flag = self.table.resolve(token)
            if (switch := self.table.lookup(flag)) is None:
                # only a negated boolean gets here
                values[normalize(NEGATION.fullmatch(flag)[1])] = False
                continue

            match switch.type:
                case SwitchType.REQUIRED:
                    values[switch.name] = self.value(switch.name)
                case SwitchType.STRING:
                    values[switch.name] = "" if self.peek() is None or self.valid(self.peek()) else self.tokens.popleft()
                case SwitchType.BOOLEAN:
                    values[switch.name] = True
                case SwitchType.NUMERIC:
                    values[switch.name] = self.value(switch.name, numeric=True)
                case SwitchType.ARRAY:
                    values[switch.name] = self.value(switch.name).split(",")

        for switch in self.table.values():
            if switch.type is SwitchType.REQUIRED and switch.name not in values:
                raise MissingRequiredError(
                    f"no value provided for required option '{switch.name}'",
                    switch=switch.name,
                    title="missing option",
                    hint=f"usage: {switch.usage}",
                )

        return values, leading, list(self.tokens)


def parse(tokens, table, /, *, delete_invalid=False, opts_before_args=False):
    """
    Parse tokens against a switch table.

    Parameters
    - tokens: iterable of raw tokens (already shell-split).
    - table: a SwitchTable, or a declaration mapping to build one from.
    - delete_invalid: strip undeclared dash-prefixed tokens from leading/trailing
      into ParseResult.invalid instead of passing them through.
    - opts_before_args: do not collect leading non-option tokens; parsing stops at
      the first token that is not a declared switch.

    Returns
    - ParseResult holding the declared defaults overlaid with the parsed values.

    Raises
    - SwitchError subclasses for missing, occupied or non-numeric values and for
      required switches that were never given.
    """
    if not isinstance(table, SwitchTable):
        table = SwitchTable(table)
    values, leading, trailing = _Parser(table, tokens).run(opts_before_args=opts_before_args)

    invalid = ()
    if delete_invalid:
        leading, dropped = strip_invalid(leading)
        trailing, invalid = strip_invalid(trailing)
        invalid = dropped + invalid
    return ParseResult(values, leading, trailing, invalid)


__all__ = (
    "Options",
    "ParseResult",
    "parse",
    "strip_invalid",
)
