"""
Arglet faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep logs/searches predictable.
- ArgumentParserError / ArgumentParserWarning: base types that carry message + options
  and know how to render themselves in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Result channels
- ConfigurationError: misuse while registering arguments. Always a caller bug and
  always raised, whatever the shell mode.
- ParseError (UnknownArgumentError, MissingValueError, TypeCoercionError,
  FlagAssignmentError): a malformed invocation. Raised outside shell mode; printed
  through rich (then exit) in shell mode.
- ValueUnavailableError: an accessor asked for a value that does not exist.

Integration
- The parser builds faults with title/code/hint/context and calls trigger(fault, **ctx).
- In non-shell mode, exceptions are raised and warnings go through warnings.warn;
  in shell mode, both are rendered on stderr via rich.
"""
import inspect
import sys
import warnings
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

    grouping (by high-level domain)
    - configuration (101xx)
      • INVALID_SPELLING, DUPLICATED_SPELLING, INVALID_DESCRIPTION, MISMATCHED_MODE,
        LATE_CONFIGURATION, SECOND_POSITIONAL, DUPLICATED_HELP
    - parsing (111xx)
      • UNKNOWN_ARGUMENT, FLAG_ASSIGNMENT, MISSING_VALUE, TYPE_COERCION
    - accessors (1115x)
      • VALUE_UNAVAILABLE
    - warnings (121xx)
      • EMPTY_INLINE_VALUE, UNEXPECTED_POSITIONAL
    """
    # --- configuration errors (10xxx) ---
    INVALID_SPELLING            = 10101
    DUPLICATED_SPELLING         = 10102
    INVALID_DESCRIPTION         = 10103
    MISMATCHED_MODE             = 10104
    LATE_CONFIGURATION          = 10105
    SECOND_POSITIONAL           = 10106
    DUPLICATED_HELP             = 10107

    # --- parse errors (11xxx) ---
    UNKNOWN_ARGUMENT            = 11112
    FLAG_ASSIGNMENT             = 11113
    MISSING_VALUE               = 11117
    TYPE_COERCION               = 11124

    # --- accessor errors (11xxx) ---
    VALUE_UNAVAILABLE           = 11151

    # --- warnings (12xxx) ---
    EMPTY_INLINE_VALUE          = 12111
    UNEXPECTED_POSITIONAL       = 12121

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette):
    """
    build the rich renderable shared by errors and warnings.

    layout
    - plain: "[ prog — code | title ]", then the message, then " → hint".
    - fancy: the same parts inside a Panel titled with the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    prog = text(getattr(main, "__prog__", options.get("prog", "arglet")), styler("prog-name"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
        " | ",
        text(options.get("title", type(fault).__name__).title(), styler("title")),
        " ]"
    )
    message = text(fault.message, styler("message"))
    hint = Text("")
    if options.get("hint"):
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options["hint"], styler("hint")))

    if options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class ArgumentParserError(Exception):
    """
    base of every error raised by arglet.

    attributes
    - message: str, a one-sentence, lowercased description.
    - options: read-only mapping with rendering and context keys
      (title, code, hint, shell, fancy, colorful, prog, token, input, index, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message else ""

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConfigurationError(ArgumentParserError):
    def __trigger__(self):
        # misuse of the registration api is a programming error, never printed
        raise self from None


class ParseError(ArgumentParserError): ...
class UnknownArgumentError(ParseError, LookupError): ...
class FlagAssignmentError(ParseError): ...
class MissingValueError(ParseError): ...
class TypeCoercionError(ParseError, ValueError): ...


class ValueUnavailableError(ArgumentParserError, LookupError):
    def __trigger__(self):
        raise self from None


class ArgumentParserWarning(Warning):
    """
    base of every warning emitted by arglet (non-fatal, parsing continues).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message else ""

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class EmptyInlineValueWarning(ArgumentParserWarning): ...
class UnexpectedPositionalWarning(ArgumentParserWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise, exceptions
      are raised and warnings are emitted through the warnings module.

    typical options
    - shell, fancy, colorful, prog, title, code, hint, docs, and any other
      context the reporter may want to show (e.g., token/input/index).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ArgumentParserError",
    "ConfigurationError",
    "ParseError",
    "UnknownArgumentError",
    "FlagAssignmentError",
    "MissingValueError",
    "TypeCoercionError",
    "ValueUnavailableError",
    "ArgumentParserWarning",
    "EmptyInlineValueWarning",
    "UnexpectedPositionalWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
