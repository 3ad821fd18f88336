"""
Switchyard option layers.

Every command that takes options also understands two fixed layers of switches:
- GLOBAL_OPTIONS: help, render, verbose, global (escape string) and pretend.
- RENDER_OPTIONS: formatting switches consumed by an external renderer
  (fields, filter_class, max_width, vertical). A host program can extend them
  with a __render_options__ mapping in __main__.

compose() merges both layers with a command's own render overrides into the single
"merged" table used against whatever the command's local table left unparsed.

Precedence on a name collision: command overrides > render switches > globals.
Declarations are merged key-wise, so an override may only change a default:
    >>> compose({"max_width": 120})["max_width"].default
    120
"""
from collections.abc import Mapping
from types import MappingProxyType

from .parser import Options
from .switches import SwitchTable, SwitchType
from .utils import normalize

GLOBAL_OPTIONS = MappingProxyType({
    "help": {"type": SwitchType.BOOLEAN, "descr": "Display a command's help"},
    "render": {"type": SwitchType.BOOLEAN, "descr": "Toggle a command's default rendering behavior"},
    "verbose": {"type": SwitchType.BOOLEAN, "descr": "Increase verbosity for help, errors, etc."},
    "global": {"type": SwitchType.STRING, "descr": "Pass a string of global options without the dashes"},
    "pretend": {"type": SwitchType.BOOLEAN, "descr": "Display what a command would execute without executing it"},
})

RENDER_OPTIONS = MappingProxyType({
    "fields": {"type": SwitchType.ARRAY, "descr": "Displays fields in the order given"},
    "filter_class": {"type": SwitchType.STRING, "descr": "Renderer class that formats the result"},
    "max_width": {"type": SwitchType.NUMERIC, "descr": "Max width of a table"},
    "vertical": {"type": SwitchType.BOOLEAN, "descr": "Display a vertical table"},
})

_default = {"declarations": None, "table": None}


def _declaration(value):
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, SwitchType | type):
        return {"type": value}
    return {"default": value}


def merge_declarations(*layers):
    """
    Merge declaration mappings by canonical name; later layers win key by key.

    Tuple keys (name, *shorts) are folded into the "shorts" entry so that two
    spellings of one switch always land on the same declaration.
    """
    merged = {}
    for layer in layers:
        for key, value in (layer or {}).items():
            name, shorts = (key[0], key[1:]) if isinstance(key, tuple) and key else (key, ())
            declaration = _declaration(value)
            if shorts:
                declaration["shorts"] = [*shorts, *declaration.get("shorts", ())]
            merged[normalize(name)] = merged.get(normalize(name), {}) | declaration
    return merged


def default_render_options():
    """
    RENDER_OPTIONS extended (and possibly overridden) by __main__.__render_options__.
    """
    return merge_declarations(RENDER_OPTIONS, getattr(__import__("__main__"), "__render_options__", None))


def compose(overrides=None, /):
    """
    Build the merged global/render table, optionally with a command's render overrides.

    The table without overrides is rebuilt only when the host render configuration
    changes; tables with overrides are cached by their command descriptor.
    """
    declarations = merge_declarations(GLOBAL_OPTIONS, default_render_options())
    if overrides:
        return SwitchTable(merge_declarations(declarations, overrides))
    if _default["declarations"] != declarations:
        _default.update(declarations=declarations, table=SwitchTable(declarations))
    return _default["table"]


def render_options(options, /):
    """
    Drop the fixed global keys, leaving what a renderer consumes.
    """
    return Options({key: value for key, value in options.items() if normalize(key) not in GLOBAL_OPTIONS})


__all__ = (
    "GLOBAL_OPTIONS",
    "RENDER_OPTIONS",
    "default_render_options",
    "merge_declarations",
    "compose",
    "render_options",
)
