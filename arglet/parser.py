"""
Arglet parser: register arguments, parse a token list, read the results.

What this module provides
- ArgParser: the configuration API (add_flag, add_int_argument,
  add_string_argument, add_help), the tokenizing dispatcher (parse and friends),
  the correctness checker (check_all), and the accessor/introspection layer
  (get_* accessors, help(), help_description(), print_help()).
- ParseOutcome / ParseResult: the tagged result of try_parse().

Token grammar (the first token is the program name and is skipped)
1. no leading '-'          → positional token, routed to the positional cell.
2. contains '='            → "--long=value" or "-s=value"; the key is resolved and
                             the value ingested as if supplied after a space.
3. '-abc' (one dash, > 2)  → combined short flags, each character set to True.
4. '-s'   (one dash, <= 2) → short option; value-bearing kinds take the next token.
5. '--long'                → long option; value-bearing kinds take the next token.

Results
- parse() returns True when every value cell is satisfied, or when help was
  requested (help takes priority over arity failures; check help()).
- Unknown keys, missing trailing values, bad integers, and values given to flags
  are faults: raised outside shell mode, printed (then exit) in shell mode.
- try_parse() never raises parse faults; it returns ParseResult(outcome, fault).

Quick start
    from arglet import ArgParser

    parser = ArgParser("prog")
    parser.add_int_argument("-n", "--number").default(0)
    parser.add_flag("-v", "--verbose")
    parser.add_string_argument("--name", descr="who to greet")
    parser.add_help("-h", "--help", descr="show this help")

    if parser.parse(["prog", "-n", "5", "-v", "--name", "Alice"]) and not parser.help():
        parser.get_int_value("number")  # 5
"""
import functools
import os
import shlex
import sys
from collections import deque, namedtuple
from collections.abc import Iterable
from enum import Enum

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .cells import Kind
from .faults import *
from .registry import KeyRegistry
from .utils import *


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _strip(spelling, /):
    """
    Drop one or two leading dashes: "--number" → "number", "-n" → "n".
    """
    if spelling.startswith("--"):
        return spelling[2:]
    if spelling.startswith("-"):
        return spelling[1:]
    return spelling


class ParseOutcome(Enum):
    SATISFIED = "satisfied"
    UNSATISFIED = "unsatisfied"
    HELP = "help"
    FAILED = "failed"


class ParseResult(namedtuple("ParseResult", ("outcome", "fault"))):
    """
    Tagged result of ArgParser.try_parse().

    - outcome: ParseOutcome.
    - fault: the ParseError that stopped parsing (FAILED only), else None.

    Truthy exactly when the outcome is SATISFIED.
    """
    __slots__ = ()

    def __bool__(self):
        return self.outcome is ParseOutcome.SATISFIED


class ArgParser(metaclass=IntrospectableType):
    """
    Declarative command-line argument parser.

    Lifecycle
    - configuration: add_* calls register keys and build cells; misuse raises
      ConfigurationError at the call site.
    - parse: one left-to-right pass over the tokens mutates the cells; every
      parse starts from a clean state (external storage is left as is).
    - query: get_* accessors, help(), help_description().

    Options
    - shell: print faults through rich and exit(1) instead of raising; also
      print the help when it is requested or when arguments are missing.
    - fancy: render faults and help inside panels.
    - colorful: style the rich output.
    """

    __introspectable__ = (
        "name",
        "shell",
        "fancy",
        "colorful",
    )

    def __init__(self, name, /, *, shell=False, fancy=False, colorful=True):
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError(
                "parser name must be a non-empty string",
                title="invalid parser name",
                code=FaultCode.INVALID_DESCRIPTION,
                hint="pass the program name, e.g. ArgParser('prog')",
            )
        self._name = name.strip()
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)

        self._registry = KeyRegistry()
        self._help = False
        self._satisfied = Unset
        self._capture = False
        self._tokens = deque()
        self._index = 0

    @property
    def registry(self):
        return self._registry

    @property
    def satisfied(self):
        """
        Result of the last correctness check, or Unset before any complete parse
        (and after a parse that ended in help).
        """
        return self._satisfied

    # configuration

    def _register(self, names, kind, descr, /, **options):
        return self._registry.cell(self._registry.register(names, kind, descr, **options))

    def add_flag(self, *names, descr=Unset):
        """
        Register a boolean flag, e.g. add_flag("-v", "--verbose").

        Returns the FlagCell (fluent: .default(bool), .store_value(reference)).
        """
        return self._register(names, Kind.FLAG, descr)

    def add_int_argument(self, *names, descr=Unset):
        """
        Register an integer argument, e.g. add_int_argument("-n", "--number").

        Returns the ValueCell (fluent: .positional(), .default(...), .multi_value(...),
        .store_value(...), .store_values(...)).
        """
        return self._register(names, Kind.INTEGER, descr)

    def add_string_argument(self, *names, descr=Unset):
        """
        Register a text argument; see add_int_argument().
        """
        return self._register(names, Kind.TEXT, descr)

    def add_help(self, *names, descr=Unset):
        """
        Register the reserved help key, e.g. add_help("-h", "--help").

        Its spellings short-circuit parsing into the "help requested" state.
        """
        return self._register(names, Kind.FLAG, descr, helper=True)

    # faults

    def trigger(self, fault, /, **options):
        trigger(
            fault,
            **options,
            shell=self._shell and not self._capture,
            fancy=self._fancy,
            colorful=self._colorful,
            prog=self._name,
        )

    def _hint(self, spelling):
        suggestions = self._registry.suggestions(spelling)
        helper = self._registry.helper
        try:
            hint = "did you mean %r?" % self._registry.key(self._registry.lookup(suggestions[0])).label
        except IndexError:
            hint = ""
        if helper is not Unset:
            more = "run '%s %s' to see all arguments" % (self._name, self._registry.key(helper).label)
            hint = "%s you can also %s" % (hint, more) if hint else more
        return hint, suggestions

    def _unknown(self, spelling, token):
        hint, suggestions = self._hint(spelling)
        self.trigger(UnknownArgumentError(
            "unknown argument %r at %s position" % (token, _ordinal(self._index)),
            title="unknown argument",
            code=FaultCode.UNKNOWN_ARGUMENT,
            hint=hint,
            token=token,
            input=spelling,
            index=self._index,
            suggestions=suggestions,
            docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
        ))

    # dispatcher

    def _ingest(self, handle, token, *, index):
        """
        coerce `token` into the cell behind `handle`, surfacing bad integers.
        """
        cell = self._registry.cell(handle)
        key = self._registry.key(handle)
        try:
            cell.ingest(token)
        except ValueError:
            self.trigger(TypeCoercionError(
                "value %r for %r at %s position is not a valid %s" % (
                    token, key.label, _ordinal(index), key.kind.value
                ),
                title="invalid %s value" % key.kind.value,
                code=FaultCode.TYPE_COERCION,
                hint="pass a base-10 whole number (for example: %s 42)" % key.label,
                token=token,
                input=key.label,
                index=index,
                docs=getdoc(FaultCode.TYPE_COERCION),
            ))

    def _take_value(self, handle, token):
        """
        consume the token following a value-bearing option.
        """
        if not self._tokens:
            key = self._registry.key(handle)
            self.trigger(MissingValueError(
                "option %r at %s position requires a value" % (token, _ordinal(self._index)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                hint="pass a value after it (for example: %s <%s>) or use %s=<%s>" % (
                    token, key.kind.value, token, key.kind.value
                ),
                token=token,
                input=key.label,
                index=self._index,
                docs=getdoc(FaultCode.MISSING_VALUE),
            ))
        value = self._tokens.popleft()
        self._index += 1
        self._ingest(handle, value, index=self._index)

    def _set_flag(self, handle):
        if self._registry.key(handle).helper:
            self._help = True
        self._registry.cell(handle).set(True)

    def _parse_positional(self, token):
        """
        route a dash-less token to the positional cell (if any).
        """
        handle = self._registry.positional
        if handle is Unset:
            self.trigger(UnexpectedPositionalWarning(
                "positional token %r at %s position is ignored" % (token, _ordinal(self._index)),
                title="unexpected positional",
                code=FaultCode.UNEXPECTED_POSITIONAL,
                hint="no argument accepts positional tokens; did you forget an option name?",
                token=token,
                index=self._index,
                docs=getdoc(FaultCode.UNEXPECTED_POSITIONAL),
            ))
            return
        self._ingest(handle, token, index=self._index)

    def _parse_assignment(self, token):
        """
        handle '--long=value' and '-s=value' (split on the first '=').
        """
        raw, _, value = token.partition("=")
        spelling = _strip(raw)
        if (handle := self._registry.lookup(spelling)) is Unset:
            return self._unknown(spelling, raw)
        key = self._registry.key(handle)

        if not key.kind.bearing:
            self.trigger(FlagAssignmentError(
                "flag %r at %s position cannot take a value" % (raw, _ordinal(self._index)),
                title="flag cannot take a value",
                code=FaultCode.FLAG_ASSIGNMENT,
                hint="remove everything from '=' (for example: %s)" % raw,
                token=token,
                input=key.label,
                index=self._index,
                docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
            ))

        if not value:
            self.trigger(EmptyInlineValueWarning(
                "empty inline value for %r at %s position" % (raw, _ordinal(self._index)),
                title="empty inline value",
                code=FaultCode.EMPTY_INLINE_VALUE,
                hint="add a value after '=' (for example: %s=<%s>)" % (raw, key.kind.value),
                token=token,
                input=key.label,
                index=self._index,
                docs=getdoc(FaultCode.EMPTY_INLINE_VALUE),
            ))

        self._ingest(handle, value, index=self._index)

    def _parse_combined(self, token):
        """
        handle '-abc': every character is a short flag spelling.
        """
        for spelling in token[1:]:
            handle = self._registry.lookup(spelling)
            if handle is Unset or self._registry.key(handle).kind is not Kind.FLAG:
                hint, suggestions = self._hint(spelling)
                if handle is not Unset:
                    hint = "%r takes a value and cannot be combined; pass it on its own" % (
                        self._registry.key(handle).label
                    )
                self.trigger(UnknownArgumentError(
                    "%r in %r at %s position is not a flag" % (spelling, token, _ordinal(self._index)),
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_ARGUMENT,
                    hint=hint,
                    token=token,
                    input=spelling,
                    index=self._index,
                    suggestions=suggestions,
                    docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
                ))
            self._set_flag(handle)

    def _parse_named(self, token, spelling):
        """
        handle '-s' and '--long' once the dashes are stripped.
        """
        if (handle := self._registry.lookup(spelling)) is Unset:
            return self._unknown(spelling, token)
        if self._registry.key(handle).kind is Kind.FLAG:
            return self._set_flag(handle)
        self._take_value(handle, token)

    def _parseargs(self, tokens, /, *, capture=False):
        """
        run one left-to-right pass over `tokens` and return a ParseOutcome.

        phases
        - setup: reset cells and help state; skip the program name.
        - loop: classify each token (see the module docstring) and dispatch it.
        - check: help short-circuits; otherwise the correctness checker decides.

        indexing
        - self._index is the position of the current token (program name is 0),
          used for position-first messages.
        """
        self._registry.reset()
        self._help = False
        self._satisfied = Unset
        self._capture = capture

        self._tokens = deque(tokens)
        self._index = 0
        if self._tokens:
            self._tokens.popleft()

        try:
            while self._tokens:
                token = self._tokens.popleft()
                self._index += 1

                if not token.startswith("-"):
                    self._parse_positional(token)
                elif "=" in token:
                    self._parse_assignment(token)
                elif not token.startswith("--"):
                    if len(token) > 2:
                        self._parse_combined(token)
                    else:
                        self._parse_named(token, token[1:])
                else:
                    self._parse_named(token, token[2:])
        finally:
            self._capture = False
            self._tokens.clear()

        if self._help:
            return ParseOutcome.HELP

        self._satisfied = self.check_all()
        return ParseOutcome.SATISFIED if self._satisfied else ParseOutcome.UNSATISFIED

    @staticmethod
    def _sanitize(tokens):
        if tokens is Unset:
            return list(sys.argv)
        if isinstance(tokens, str | bytes) or not isinstance(tokens, Iterable):
            raise TypeError("tokens must be an iterable of strings (use parse_string() for a single string)")
        tokens = list(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("tokens must be strings, got %r" % (token,))
        return tokens

    def parse(self, tokens=Unset, /):
        """
        Parse an argv-like token list (the first token is the program name).

        Parameters
        - tokens: iterable of str; defaults to sys.argv.

        Returns
        - bool: True when every value argument is satisfied or help was requested.

        Raises
        - ParseError subclasses (outside shell mode).
        """
        outcome = self._parseargs(self._sanitize(tokens))
        if self._shell:
            if outcome is ParseOutcome.HELP:
                self.print_help()
            elif outcome is ParseOutcome.UNSATISFIED:
                self.print_help(stderr=True)
        return outcome is not ParseOutcome.UNSATISFIED

    def parse_argv(self, argc, argv, /):
        """
        Parse the native (count, array) form: the first `argc` entries of `argv`.

        Byte strings are decoded with the filesystem encoding.
        """
        if not isinstance(argc, int) or isinstance(argc, bool):
            raise TypeError("argc must be an integer")
        argv = list(argv)
        if not 0 <= argc <= len(argv):
            raise ValueError("argc must be between 0 and %d, got %d" % (len(argv), argc))
        return self.parse([os.fsdecode(token) if isinstance(token, bytes) else token for token in argv[:argc]])

    def parse_string(self, prompt, /):
        """
        Parse a shell-like string of arguments (without the program name).

            >>> parser.parse_string("-n 5 --name 'Ada Lovelace'")
        """
        if not isinstance(prompt, str):
            raise TypeError("prompt must be a string")
        return self.parse([self._name, *shlex.split(prompt)])

    def try_parse(self, tokens=Unset, /):
        """
        Parse without raising parse faults.

        Returns
        - ParseResult(outcome, fault): fault is the ParseError when outcome is FAILED.
        """
        try:
            outcome = self._parseargs(self._sanitize(tokens), capture=True)
        except ParseError as fault:
            return ParseResult(ParseOutcome.FAILED, fault)
        return ParseResult(outcome, None)

    # correctness checker

    def check_all(self):
        """
        True when every integer/text cell is satisfied (flags always are).
        """
        return all(cell.is_satisfied() for _, cell in self._registry.value_cells())

    def missing(self):
        """
        Keys of the value arguments that are currently unsatisfied, in registration order.
        """
        return tuple(key for key, cell in self._registry.value_cells() if not cell.is_satisfied())

    # accessors

    def _cell(self, spelling, kind=Unset):
        if not isinstance(spelling, str):
            raise TypeError("argument spelling must be a string")
        handle = self._registry.resolve(_strip(spelling))
        key = self._registry.key(handle)
        if kind is not Unset and key.kind is not kind:
            raise UnknownArgumentError(
                "%r is a %s argument, not a %s argument" % (key.label, key.kind.value, kind.value),
                title="wrong argument kind",
                code=FaultCode.UNKNOWN_ARGUMENT,
                hint="use the accessor matching its kind",
                input=spelling,
            )
        return self._registry.cell(handle)

    def get_int_value(self, spelling, index=0, /):
        return self._cell(spelling, Kind.INTEGER).read(index)

    def get_string_value(self, spelling, index=0, /):
        return self._cell(spelling, Kind.TEXT).read(index)

    def get_value(self, spelling, index=0, /):
        """
        Kind-agnostic read of an integer or text argument.
        """
        cell = self._cell(spelling)
        if not hasattr(cell, "read"):
            raise UnknownArgumentError(
                "%r is a flag; use get_flag()" % spelling,
                title="wrong argument kind",
                code=FaultCode.UNKNOWN_ARGUMENT,
                hint="use get_flag() for flags",
                input=spelling,
            )
        return cell.read(index)

    def get_values(self, spelling, /):
        """
        Every live (or default) value of an integer/text argument, as a list.
        """
        cell = self._cell(spelling)
        if not hasattr(cell, "read_all"):
            raise UnknownArgumentError(
                "%r is a flag; use get_flag()" % spelling,
                title="wrong argument kind",
                code=FaultCode.UNKNOWN_ARGUMENT,
                hint="use get_flag() for flags",
                input=spelling,
            )
        return cell.read_all()

    def get_flag(self, spelling, /):
        return self._cell(spelling, Kind.FLAG).get()

    def set_flag(self, spelling, /):
        """
        Set a flag to True programmatically (setting the help flag requests help).
        """
        cell = self._cell(spelling, Kind.FLAG)
        if self._registry.key(self._registry.resolve(_strip(spelling))).helper:
            self._help = True
        cell.set(True)

    # introspection

    def help(self):
        """True when the last parse saw the help key."""
        return self._help

    def help_description(self):
        """
        Plain help text: the parser name, then one line per registered argument
        in registration order ("-s<TAB>--long<TAB>description", empty fields omitted).
        """
        lines = [self._name]
        lines.extend(key.describe() for key, _ in self._registry)
        return "\n".join(lines) + "\n"

    def __rich__(self):
        """
        Rich renderable of the help: a table of names, values, defaults, and descriptions.
        """
        styles = {
            "program-name": "bold #FF4D94",  # magenta-pink brand
            "option-name": "bold #00E6FF",  # cyan for value arguments
            "flag-name": "bold #22C55E",  # green for flags
            "metavar": "bold #FFD600",  # amber for values
            "default": "italic #9CA3AF",  # muted gray
            "argument-description": "#9CA3AF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {})

        def styler(style):
            return styles.get(style, "") if self._colorful else ""

        table = Table(box=None, show_header=False, pad_edge=False)
        table.add_column("names", no_wrap=True)
        table.add_column("value", no_wrap=True)
        table.add_column("description")

        for key, cell in self._registry:
            names = Text(", ").join(
                Text(name, styler("flag-name" if key.kind is Kind.FLAG else "option-name"))
                for name in (
                    "-" + key.short if key.short else "",
                    "--" + key.long if key.long else "",
                ) if name
            )
            value = Text("")
            if key.kind.bearing:
                metavar = "<%s>" % key.kind.value
                if cell.is_multi_value:
                    metavar += " ..."
                if cell.is_positional:
                    metavar = "[%s]" % metavar
                value = Text(metavar, styler("metavar"))
            descr = Text(key.descr or "", styler("argument-description"))
            if key.kind.bearing and cell.fallback is not Unset:
                descr.append_text(Text(" (default: %s)" % (cell.fallback,), styler("default")))
            table.add_row(names, value, descr)

        title = Text(self._name, styler("program-name"))
        if self._fancy:
            return Panel(table, title=title, title_align="left")
        return Group(title, table)

    def print_help(self, *, stderr=False):
        Console(stderr=stderr).print(self)


__all__ = (
    "ArgParser",
    "ParseOutcome",
    "ParseResult",
)
