"""
Switchyard dispatcher: run a registered callable through the translator.

Dispatcher(nested=False, colorful=True, fancy=False)
- nested=False (outermost, non-interactive): user-input errors are printed as
  "Error: <message>" on stderr and the call returns Failure.
- nested=True (called from another command, an interactive session): the same
  errors propagate unchanged so the caller can react.
- colorful / fancy: styling of printed faults (see switchyard.faults).

Subclasses may override after_parse(invocation) and process_result(result, invocation).
"""
import functools
from collections.abc import Mapping

from rich.console import Console
from rich.text import Text

from .commands import Entry
from .faults import ArityError, HelpRequest, InvalidOptionWarning, SwitchError, trigger
from .translator import translate
from .utils import Failure

console = Console(highlight=False)


class Dispatcher:
    """
    Pure function over (entry, raw arguments), plus two overridable hooks.
    """

    def __init__(self, *, nested=False, colorful=True, fancy=False):
        self.nested = nested
        self.colorful = colorful
        self.fancy = fancy

    def __repr__(self):
        return f"dispatcher(nested={self.nested!r}, colorful={self.colorful!r}, fancy={self.fancy!r})"

    def dispatch(self, entry, args, /):
        """
        Translate args for entry.command and call entry.callback with the result.

        Returns
        - the post-processed result of the callback,
        - None after printing help or a pretend summary,
        - Failure when user input was rejected in an outermost context.

        Raises
        - SwitchError / ArityError in a nested context.
        - DefaultEvalError, and anything raised by the callback, always.
        """
        command, callback = entry.command, entry.callback
        try:
            invocation = translate(command, args, target=getattr(callback, "__self__", callback))
        except HelpRequest as request:
            self.help(request)
            return None
        except (SwitchError, ArityError) as error:
            if self.nested:
                raise
            trigger(error, nested=False, colorful=self.colorful, fancy=self.fancy, command=command.name)
            return Failure

        for token in invocation.invalid:
            trigger(
                InvalidOptionWarning(f"Invalid option '{token}'", tokens=(token,), command=command.name),
                nested=self.nested,
                colorful=self.colorful,
            )

        if invocation.pretend:
            self.pretend(invocation)
            return None

        self.after_parse(invocation)
        if invocation.options is None or command.options is None:
            result = callback(*invocation.args)
        else:
            result = callback(*invocation.args, invocation.options)
        return self.process_result(result, invocation)

    def help(self, request, /):
        console.print(Text(request.usage), soft_wrap=True)
        if (invocation := request.invocation) is None or not invocation.verbose:
            return
        if invocation.command.options:
            console.print(Text("Local options:"), invocation.command.options)
        console.print(Text("Global options:"), invocation.command.table)

    def pretend(self, invocation, /):
        args = [*invocation.args]
        if invocation.options is not None and invocation.command.options is not None:
            args.append(dict(invocation.options))
        console.print(Text(f"Arguments: {args!r}"), soft_wrap=True)
        console.print(Text(f"Global options: {dict(invocation.globals)!r}"), soft_wrap=True)

    def after_parse(self, invocation, /):
        """
        Hook called once the call is translated and right before the callback runs.
        """

    def process_result(self, result, invocation, /):
        """
        Hook applied to the callback's return value; identity by default.
        """
        return result

    def wrap(self, command, callback, /):
        """
        Return the invoker for callback: a function that dispatches its arguments.

        Keyword arguments given to the invoker are collected into a trailing
        options mapping, so cook("x", spicy=True) is cook("x", {"spicy": True}).
        Nothing is registered here.
        """
        @functools.wraps(callback)
        def invoker(*args, **options):
            if options:
                if args and isinstance(args[-1], Mapping):
                    raise TypeError(f"{command.name}() got both an options mapping and keyword options")
                args = (*args, options)
            return self.dispatch(entry, args)

        entry = Entry(command, callback, invoker)
        invoker.__command__ = command
        return invoker


__all__ = (
    "Dispatcher",
)
