r"""
Arglet key registry: the single source of truth for "does this spelling exist
and what is it".

Model
- Cells live in an arena (a list) and are addressed by an integer handle.
- Every spelling (short "n" or long "number", stored without dashes) maps to
  exactly one handle; short and long spellings of the same argument share it.
- Keys and cells are kept in insertion order, which drives help-text ordering.

Invariants
- A spelling appears at most once across all registered arguments of all kinds.
- At most one value cell is positional.
- At most one key is the reserved help key.

Validation highlights
- Names are given shell-style ("-n", "--number"); at most one short and one long.
- Short spellings are one letter or digit; long spellings match
  r"[^\W\d_](?:[-_]?[^\W_])+": a leading letter, then letters or digits with
  single inner hyphens or underscores, two or more characters in all.
- Descriptions are trimmed; empty descriptions are rejected.
"""
import difflib
import functools
import re

from .cells import Kind, ValueCell, FlagCell
from .faults import ConfigurationError, UnknownArgumentError, FaultCode
from .utils import *


def _invalid(names, message, hint, /):
    return ConfigurationError(
        message,
        title="invalid argument spelling",
        code=FaultCode.INVALID_SPELLING,
        hint=hint,
        names=names,
    )


def _sanitize_names(names, /):
    """
    Internal: split shell-style names into (short, long) spellings without dashes.

    Accepted forms
    - "-x": short spelling (a single letter or digit).
    - "--long-name": long spelling (two or more characters).

    Raises
    - ConfigurationError: no names, non-string names, bad forms, two shorts or two longs.
    """
    if not names:
        raise _invalid(names, "an argument must specify at least one name", "pass '-x' and/or '--name'")

    short = long = Unset
    for name in names:
        if not isinstance(name, str):
            raise _invalid(names, "argument names must be strings, got %r" % (name,), "pass '-x' and/or '--name'")
        name = name.strip()
        if match := re.fullmatch(r"-([^\W_])", name):
            if short is not Unset:
                raise _invalid(names, "argument cannot have two short names", "keep a single '-x' name")
            short = match[1]
        elif match := re.fullmatch(r"--([^\W\d_](?:[-_]?[^\W_])+)", name):
            if long is not Unset:
                raise _invalid(names, "argument cannot have two long names", "keep a single '--name' name")
            long = match[1]
        else:
            raise _invalid(
                names,
                "bad argument name %r" % name,
                "use '-x' (one letter or digit) or '--name' (letters, digits, inner hyphens)",
            )
    return short, long


def _sanitize_descr(descr, /):
    if not isinstance(descr, str | Unset):
        raise ConfigurationError(
            "argument description must be a string",
            title="invalid description",
            code=FaultCode.INVALID_DESCRIPTION,
            hint="pass a short, non-empty string",
        )
    if isinstance(descr, str) and not (descr := descr.strip()):
        raise ConfigurationError(
            "argument description cannot be empty",
            title="invalid description",
            code=FaultCode.INVALID_DESCRIPTION,
            hint="omit it or pass a short, non-empty string",
        )
    return coalesce(descr)


class Key(metaclass=IntrospectableType):
    """
    Identity record of one registered argument.

    Properties
    - short: str | None, the one-character spelling (no dash).
    - long: str | None, the long spelling (no dashes).
    - descr: str | None, the help description.
    - kind: Kind of the owning cell.
    - handle: int, the arena slot of the owning cell.
    - helper: bool, True for the reserved help key.
    """

    __introspectable__ = (
        "short",
        "long",
        "descr",
        "kind",
        "handle",
        "helper",
    )

    def __init__(self, short, long, descr, kind, handle, *, helper=False):
        self._short = coalesce(short)
        self._long = coalesce(long)
        self._descr = coalesce(descr)
        self._kind = kind
        self._handle = handle
        self._helper = helper

    @property
    def spellings(self):
        return tuple(spelling for spelling in (self._short, self._long) if spelling)

    @property
    def label(self):
        """Display name, preferring the long form: "--number" over "-n"."""
        if self._long:
            return "--" + self._long
        return "-" + self._short

    def describe(self):
        """
        One help line: "-s", "--long", and the description joined by tabs, empty fields omitted.
        """
        fields = (
            "-" + self._short if self._short else "",
            "--" + self._long if self._long else "",
            self._descr or "",
        )
        return "\t".join(field for field in fields if field)


class KeyRegistry:
    """
    Arena of cells addressed by integer handles plus a flat spelling -> handle map.

    Contract
    - register(names, kind, descr) -> handle; ConfigurationError on a taken spelling.
    - resolve(spelling) -> handle; UnknownArgumentError when absent.
    - lookup(spelling) -> handle | Unset (non-raising form for the dispatcher).
    """

    def __init__(self):
        self._cells = []
        self._keys = []
        self._spellings = {}
        self._positional = Unset
        self._helper = Unset

    def __len__(self):
        return len(self._keys)

    def __iter__(self):
        """
        Yield (key, cell) pairs in insertion order.
        """
        return iter(zip(self._keys, self._cells))

    def __contains__(self, spelling):
        return spelling in self._spellings

    def register(self, names, kind, descr=Unset, /, *, helper=False):
        """
        Register one argument and build its cell.

        Parameters
        - names: iterable of shell-style names ("-n", "--number").
        - kind: Kind of the argument.
        - descr: Unset | str, help description.
        - helper: marks the reserved help key (must be a FLAG).

        Returns
        - int: the handle of the new cell.

        Raises
        - ConfigurationError: invalid names/description, a spelling already taken,
          or a second help key.
        """
        short, long = _sanitize_names(tuple(names))
        descr = _sanitize_descr(descr)

        for spelling in (short, long):
            if spelling and spelling in self._spellings:
                holder = self._keys[self._spellings[spelling]]
                raise ConfigurationError(
                    "spelling %r is already used by %r" % (spelling, holder.label),
                    title="duplicated argument spelling",
                    code=FaultCode.DUPLICATED_SPELLING,
                    hint="pick another name for one of the two arguments",
                    spelling=spelling,
                )

        if helper:
            if kind is not Kind.FLAG:
                raise TypeError("help key must be a flag")
            if self._helper is not Unset:
                raise ConfigurationError(
                    "help is already registered as %r" % self._keys[self._helper].label,
                    title="duplicated help",
                    code=FaultCode.DUPLICATED_HELP,
                    hint="register help once",
                )

        handle = len(self._cells)
        key = Key(short, long, descr, kind, handle, helper=helper)

        if kind is Kind.FLAG:
            cell = FlagCell(key.label)
        else:
            cell = ValueCell(kind, key.label, claim=functools.partial(self._claim_positional, handle))

        self._cells.append(cell)
        self._keys.append(key)
        for spelling in key.spellings:
            self._spellings[spelling] = handle
        if helper:
            self._helper = handle

        return handle

    def _claim_positional(self, handle, /):
        if self._positional is not Unset and self._positional != handle:
            raise ConfigurationError(
                "%r cannot be positional: %r already receives positional tokens" % (
                    self._keys[handle].label,
                    self._keys[self._positional].label,
                ),
                title="second positional argument",
                code=FaultCode.SECOND_POSITIONAL,
                hint="mark a single argument as positional (use multi_value() to collect several tokens)",
            )
        self._positional = handle

    def lookup(self, spelling, /):
        return self._spellings.get(spelling, Unset)

    def resolve(self, spelling, /):
        """
        Return the handle registered for `spelling` (no dashes).

        Raises UnknownArgumentError, suggesting close spellings when there are some.
        """
        try:
            return self._spellings[spelling]
        except KeyError:
            pass
        try:
            hint = "did you mean %r?" % self.suggestions(spelling)[0]
        except IndexError:
            hint = "check the registered arguments with help_description()"
        raise UnknownArgumentError(
            "there is no argument named %r" % spelling,
            title="unknown argument",
            code=FaultCode.UNKNOWN_ARGUMENT,
            hint=hint,
            input=spelling,
        )

    def suggestions(self, spelling, /, count=3):
        return difflib.get_close_matches(spelling, self._spellings.keys(), count)

    def cell(self, handle, /):
        return self._cells[handle]

    def key(self, handle, /):
        return self._keys[handle]

    @property
    def positional(self):
        """Handle of the positional cell, or Unset."""
        return self._positional

    @property
    def helper(self):
        """Handle of the help key, or Unset."""
        return self._helper

    def value_cells(self):
        """
        Yield (key, cell) for every integer/text argument, in insertion order.
        """
        for key, cell in self:
            if key.kind.bearing:
                yield key, cell

    def reset(self):
        for cell in self._cells:
            cell.reset()


__all__ = (
    "Key",
    "KeyRegistry",
)
