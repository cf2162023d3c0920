"""
Bindery faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
  Codes are grouped by domain (parse errors, configuration errors, warnings).
- BindingException / BindingWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Two tiers
- configuration faults are detected while registering options
  (InvalidDefaultError, RedefinedOptionWarning);
- parse faults are detected while binding the argument vector
  (UnknownOptionError, ConversionError, MissingRequiredError, SwallowedOptionWarning).

Integration
- The registry builds a fault and calls Registry.trigger(fault, **context).
- In non-shell mode exceptions are raised and warnings go through warnings.warn;
  in shell mode both are rendered via rich on stderr and exceptions exit with 1.
"""
import copy
import inspect
import sys
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
    canonical fault codes used across the parser (stable identifiers).

    grouping
    - parse errors (111xx)
      • UNKNOWN_OPTION, UNCASTABLE_VALUE, MISSING_REQUIRED
    - configuration errors (112xx)
      • INVALID_DEFAULT
    - warnings (12xxx)
      • SWALLOWED_OPTION (parse), REDEFINED_OPTION (configuration)
    """
    # --- parse errors (111xx) ---
    UNKNOWN_OPTION              = 11112
    UNCASTABLE_VALUE            = 11123
    MISSING_REQUIRED            = 11125

    # --- configuration errors (112xx) ---
    INVALID_DEFAULT             = 11201

    # --- warnings (12xxx) ---
    SWALLOWED_OPTION            = 12111
    REDEFINED_OPTION            = 12201

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    Internal: build the rich renderable shared by exceptions and warnings.

    layout
    - header: [ <prog> — <code> | <Title> ]
    - body: the one-line message
    - hint: an arrow followed by the single actionable hint
    """
    main = __import__("__main__")
    options = fault.options

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    tool = options.get("tool")
    prog = text(getattr(main, "__prog__", getattr(tool, "prog", "bindery")), "prog-name")

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if code is not None else "?", "code"),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    hint = Text.assemble(text(" → ", "hint-arrow"), text(options.get("hint", ""), "hint"))

    if fancy:
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class BindingException(Exception):
    """
    base class of every fatal parser fault.

    the message is a single lowercased sentence; every other piece of context
    (title, code, hint, phrase, text, ...) lives in the read-only options mapping.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownOptionError(BindingException): ...
class ConversionError(BindingException): ...
class MissingRequiredError(BindingException): ...
class InvalidDefaultError(BindingException): ...


class BindingWarning(ABC, Warning):
    """
    base class of non-fatal parser notices.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class RedefinedOptionWarning(BindingWarning): ...
class SwallowedOptionWarning(BindingWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise, exceptions are raised.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., phrase/text/expected).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "BindingException",
    "UnknownOptionError",
    "ConversionError",
    "MissingRequiredError",
    "InvalidDefaultError",
    "BindingWarning",
    "RedefinedOptionWarning",
    "SwallowedOptionWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
