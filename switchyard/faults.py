"""
Switchyard faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings), grouped by domain.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves.
- SwitchError / ArityError / DefaultEvalError: the three error families of the
  translation layer.
- HelpRequest: control-flow signal raised by the translator when --help resolved true.
- trigger(): central entry point to surface any fault (respecting nested/fancy/colorful).

Propagation
- In a nested context (a command called from another command, an interactive
  session), faults are raised (errors) or emitted through warnings.warn (warnings).
- In the outermost context they are printed on the stderr console as
  "Error: <message>" and the caller receives a clean failure value.
- DefaultEvalError is a registration bug, never a user-input bug; dispatchers
  must not swallow it.
"""
import inspect
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the translation layer (stable identifiers).

    grouping (by high-level domain)
    - switches (2111x)
      • MISSING_VALUE, OCCUPIED_VALUE, NUMERIC_VALUE, MISSING_REQUIRED
    - positionals (2112x)
      • WRONG_ARITY
    - registration (2113x)
      • DEFAULT_EVALUATION
    - warnings (2211x)
      • INVALID_OPTION
    """
    # --- switch errors (21xxx) ---
    MISSING_VALUE               = 21111
    OCCUPIED_VALUE              = 21112
    NUMERIC_VALUE               = 21113
    MISSING_REQUIRED            = 21114

    # --- positional errors (21xxx) ---
    WRONG_ARITY                 = 21121

    # --- registration errors (21xxx) ---
    DEFAULT_EVALUATION          = 21131

    # --- warnings (22xxx) ---
    INVALID_OPTION              = 22111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _styles(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


class CommandException(Exception):
    """
    base type of every user-facing error raised while translating a call.

    the positional message is the whole human-readable text; any keyword is kept
    as a read-only option (code, title, hint, and rendering flags such as
    nested/fancy/colorful) and survives __replace__.
    """
    code = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": type(self).code} | options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styles = _styles({
            "error-label": "bold #FF4DA6",
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })
        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if colorful else "")

        if not self.options.get("fancy", False):
            return Text.assemble(text("Error: ", "error-label"), text(self.message, "error-message"))

        prog = getattr(__import__("__main__"), "__prog__", self.options.get("command", "switchyard"))
        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(self.options["code"].normalize() if self.options["code"] else "-", "code"),
            " | ",
            text(self.options.get("title", "error").title()),
            " ]"
        )
        body = [text(self.message, "error-message")]
        if hint := self.options.get("hint"):
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
        return Panel(Group(*body), title=header, title_align="left")

    def __trigger__(self):
        if self.options.get("nested", False):
            raise self
        console.print(self, soft_wrap=True)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SwitchError(CommandException):
    """
    a switch token could not be honored: missing value, a value slot occupied by
    another switch, a non-numeric value for a numeric switch, or a required
    switch never given.
    """

    @property
    def switch(self):
        return self.options.get("switch")


class MissingValueError(SwitchError):
    code = FaultCode.MISSING_VALUE


class OccupiedValueError(SwitchError):
    code = FaultCode.OCCUPIED_VALUE


class NumericValueError(SwitchError):
    code = FaultCode.NUMERIC_VALUE


class MissingRequiredError(SwitchError):
    code = FaultCode.MISSING_REQUIRED


class ArityError(CommandException):
    """
    positional count does not fit a non-splat command; carries both counts.
    """
    code = FaultCode.WRONG_ARITY

    @property
    def expected(self):
        return self.options.get("expected")

    @property
    def given(self):
        return self.options.get("given")


class DefaultEvalError(CommandException):
    """
    a deferred positional default could not be produced.

    index is the 1-based slot; the failure of the factory is chained as __cause__.
    """
    code = FaultCode.DEFAULT_EVALUATION

    @property
    def index(self):
        return self.options.get("index")


class CommandWarning(ABC, Warning):
    code = None

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({"code": type(self).code} | options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        styles = _styles({
            "warning-label": "bold #FFB400",
            "warning-message": "#D6D6DE",
        })
        colorful = self.options.get("colorful", False)
        return Text.assemble(
            Text("Warning: ", styles["warning-label"] if colorful else ""),
            Text(str(self.message), styles["warning-message"] if colorful else ""),
        )

    def __trigger__(self):
        if self.options.get("nested", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self, soft_wrap=True)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InvalidOptionWarning(CommandWarning):
    """
    dash-prefixed tokens that no table declared were dropped from the positionals.
    """
    code = FaultCode.INVALID_OPTION

    @property
    def tokens(self):
        return self.options.get("tokens", ())


class HelpRequest(Exception):
    """
    raised by the translator when the help switch resolved true.

    carries the help line ("<command> <usage>") and the invocation state gathered
    so far; the dispatcher prints it and never calls the target.
    """

    def __init__(self, usage, /, invocation=None):
        super().__init__(usage)
        self.usage = usage
        self.invocation = invocation


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - nested=True raises errors / warns warnings; otherwise both are printed
      on the stderr console.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "CommandException",
    "SwitchError",
    "MissingValueError",
    "OccupiedValueError",
    "NumericValueError",
    "MissingRequiredError",
    "ArityError",
    "DefaultEvalError",
    "CommandWarning",
    "InvalidOptionWarning",
    "HelpRequest",
    "FaultCode",
    "trigger",
    "console",
)
