r"""
Arglet cells: the mutable records behind every registered argument.

Overview
- Kind: closed set of argument kinds (INTEGER, TEXT, FLAG) with a pluggable
  coercion function per value-bearing kind.
- Reference[_T]: a caller-owned, mutable single-value box used for
  store-by-reference bindings (Python has no lvalue references).
- OwnedStorage / ExternalStorage: the two places a cell's live slot can live.
  Owned storage belongs to the cell; external storage wraps a caller-provided
  Reference (scalar) or mutable sequence (multi-value) and is mutated in place.
- ValueCell[_T]: typed container for an integer/text argument's supplied
  value(s), default(s), and arity bookkeeping.
- FlagCell: boolean-only cell (no arity, no multi-value).

Modes
- A ValueCell is either scalar (one value, last write wins) or sequence
  (every supplied value, in supply order). The mode is chosen once while
  configuring and cannot be changed after a value is supplied, a default of
  the other mode is set, or storage of the other mode is bound.

Satisfaction and reads
- is_satisfied(): supplied >= minimum, or nothing supplied and a default exists.
- read(index): live slot when enough values were supplied, otherwise the default.

Binding contract
- store_value()/store_values() hand the live slot over to caller-owned storage.
  The caller must keep that storage alive and must not mutate it concurrently
  while a parse runs. Configuration never writes into external storage; only
  ingestion does, and a reset before a new parse leaves it untouched.

Quick example:
    >>> cell = ValueCell(Kind.INTEGER, label="--count").multi_value(2)
    >>> cell.append(1); cell.append(2)
    >>> cell.is_satisfied(), cell.read(1)
    (True, 2)
"""
import re
from collections.abc import MutableSequence, Sequence
from enum import Enum

from .faults import ConfigurationError, ValueUnavailableError, FaultCode
from .utils import *


def _integer(token, /):
    """
    Base-10 signed integer coercion.

    Only an optional sign followed by ASCII digits is accepted; whitespace,
    underscores, and trailing garbage are rejected.
    """
    if not re.fullmatch(r"[+-]?[0-9]+", token):
        raise ValueError("%r is not a base-10 integer" % token)
    return int(token)


def _text(token, /):
    return token


class Kind(Enum):
    """
    Closed set of argument kinds.

    Each value-bearing kind owns a coercion function (str -> value) and a
    python type used to validate defaults. FLAG has neither.
    """
    INTEGER = "integer"
    TEXT = "text"
    FLAG = "flag"

    @property
    def bearing(self):
        """True for kinds that carry a value (everything but FLAG)."""
        return self is not Kind.FLAG

    def coerce(self, token, /):
        """
        Convert a raw token into this kind's value.

        Raises
        - ValueError: the token cannot be converted.
        - TypeError: the kind does not carry values.
        """
        try:
            coercer = _COERCERS[self]
        except KeyError:
            raise TypeError("%s arguments do not carry values" % self.value) from None
        return coercer(token)

    def accepts(self, value, /):
        match self:
            case Kind.INTEGER:
                return isinstance(value, int) and not isinstance(value, bool)
            case Kind.TEXT:
                return isinstance(value, str)
            case Kind.FLAG:
                return isinstance(value, bool)


_COERCERS = {
    Kind.INTEGER: _integer,
    Kind.TEXT: _text,
}


class Reference[_T]:
    """
    Caller-owned single-value storage.

    Bind it with ValueCell.store_value() or FlagCell.store_value(); the cell
    writes every ingested value into .value.

        >>> count = Reference(0)
        >>> parser.add_int_argument("--count").store_value(count)
    """
    __slots__ = ("value",)

    def __init__(self, value=None, /):
        self.value = value

    def __repr__(self):
        return f"reference({self.value!r})"

    def __eq__(self, other):
        if isinstance(other, Reference):
            return self.value == other.value
        return NotImplemented

    __hash__ = None


class OwnedStorage:
    """
    Internally owned live slot: a scalar (Unset until written) or a list.
    """
    __slots__ = ("_sequence", "_slot")

    external = False

    def __init__(self, sequence=False, /):
        self._sequence = sequence
        self._slot = [] if sequence else Unset

    def put(self, value, /):
        if self._sequence:
            self._slot.append(value)
        else:
            self._slot = value

    def get(self):
        return self._slot

    def clear(self):
        self._slot = [] if self._sequence else Unset


class ExternalStorage:
    """
    Live slot redirected to caller-owned storage.

    - scalar: target is a Reference; put() assigns target.value.
    - sequence: target is a mutable sequence; put() appends to it in place.

    The parser never owns the target and never clears it. A sequence target
    only exposes what was appended since binding or the last clear(); earlier
    items stay in place but belong to the caller.
    """
    __slots__ = ("_sequence", "_target", "_start")

    external = True

    def __init__(self, target, sequence=False, /):
        self._sequence = sequence
        self._target = target
        self._start = len(target) if sequence else 0

    def put(self, value, /):
        if self._sequence:
            self._target.append(value)
        else:
            self._target.value = value

    def get(self):
        if self._sequence:
            return self._target[self._start:]
        return self._target.value

    def clear(self):
        if self._sequence:
            self._start = len(self._target)


def _mismatch(cell, message, hint, /):
    return ConfigurationError(
        message,
        title="mismatched argument mode",
        code=FaultCode.MISMATCHED_MODE,
        hint=hint,
        label=cell._label,
    )


class ValueCell[_T](metaclass=IntrospectableType):
    """
    Typed container for one integer/text argument.

    Fluent configuration (each returns the cell)
    - positional(): receive positional tokens.
    - default(value): scalar default, or sequence default when given a list/tuple.
    - multi_value(minimum=0): switch to sequence mode with an arity floor.
    - store_value(reference) / store_values(sequence): bind caller-owned storage.

    Parse-time operations
    - append(value), is_satisfied(), read(index), read_all(), reset().
    """

    __introspectable__ = (
        "label",
        "kind",
        "is_multi_value",
        "is_positional",
        "minimum",
        "supplied",
        "fallback",
    )

    __displayable__ = __introspectable__ + ("is_bound",)

    def __init__(self, kind, /, label=Unset, *, claim=Unset):
        if not isinstance(kind, Kind) or not kind.bearing:
            raise TypeError(f"{type(self).__typename__} kind must be a value-bearing Kind")
        self._label = coalesce(label, kind.value)
        self._kind = kind
        self._storage = OwnedStorage(False)
        self._is_multi_value = False
        self._is_positional = False
        self._minimum = 1
        self._supplied = 0
        self._fallback = Unset
        self._claim = claim  # called once by positional(); may refuse with ConfigurationError

    @property
    def is_bound(self):
        return self._storage.external

    def positional(self):
        """
        Mark this cell as the receiver of positional (dash-less) tokens.
        """
        if self._is_positional:
            return self
        if self._claim is not Unset:
            self._claim()
        self._is_positional = True
        return self

    def set_scalar_default(self, value, /):
        if self._is_multi_value:
            raise _mismatch(
                self,
                "cannot set a single default on multi-value argument %r" % self._label,
                "pass a list of defaults instead",
            )
        self._check_value(value)
        self._fallback = value
        return self

    def set_sequence_default(self, values, /):
        if not self._is_multi_value:
            raise _mismatch(
                self,
                "cannot set a list of defaults on single-value argument %r" % self._label,
                "call multi_value() first or pass a single default",
            )
        values = list(values)
        for value in values:
            self._check_value(value)
        self._fallback = values
        return self

    def default(self, value, /):
        """
        Set the fallback used when the argument is never supplied.

        A list/tuple sets a sequence default (multi-value cells only); anything
        else sets a scalar default (single-value cells only).
        """
        if isinstance(value, Sequence) and not isinstance(value, str):
            return self.set_sequence_default(value)
        return self.set_scalar_default(value)

    def enable_sequence(self, minimum=0, /):
        """
        Switch this cell into sequence mode with `minimum` as its arity floor.

        Must be called before any value is supplied and before a scalar default
        or scalar storage is configured. Calling it again on a multi-value cell
        only updates the floor.
        """
        if not isinstance(minimum, int) or isinstance(minimum, bool):
            raise ConfigurationError(
                "minimum count of %r must be an integer" % self._label,
                title="invalid minimum count",
                code=FaultCode.MISMATCHED_MODE,
                hint="pass a non-negative integer, e.g. multi_value(1)",
                label=self._label,
            )
        if minimum < 0:
            raise ConfigurationError(
                "minimum count of %r cannot be negative" % self._label,
                title="invalid minimum count",
                code=FaultCode.MISMATCHED_MODE,
                hint="pass a non-negative integer, e.g. multi_value(1)",
                label=self._label,
            )
        if self._supplied:
            raise ConfigurationError(
                "argument %r already received values" % self._label,
                title="late configuration",
                code=FaultCode.LATE_CONFIGURATION,
                hint="configure multi-value mode before parsing",
                label=self._label,
            )
        if not self._is_multi_value:
            if self._fallback is not Unset:
                raise _mismatch(
                    self,
                    "argument %r already has a single default" % self._label,
                    "call multi_value() before default()",
                )
            if self._storage.external:
                raise _mismatch(
                    self,
                    "argument %r is already bound to single-value storage" % self._label,
                    "call multi_value() before store_values()",
                )
            self._storage = OwnedStorage(True)
            self._is_multi_value = True
        self._minimum = minimum
        return self

    multi_value = enable_sequence

    def bind(self, target, /):
        """
        Redirect the live slot to caller-owned storage.

        - single-value cells take a Reference.
        - multi-value cells take a mutable sequence (appended to in place).

        Precondition (not enforced): the caller keeps `target` alive and does not
        mutate it while a parse is in progress.
        """
        if self._is_multi_value:
            if not isinstance(target, MutableSequence):
                raise _mismatch(
                    self,
                    "multi-value argument %r must be bound to a mutable sequence" % self._label,
                    "pass a list to store_values()",
                )
        elif not isinstance(target, Reference):
            raise _mismatch(
                self,
                "single-value argument %r must be bound to a reference" % self._label,
                "pass a Reference to store_value()",
            )
        self._storage = ExternalStorage(target, self._is_multi_value)
        return self

    def store_value(self, reference, /):
        if self._is_multi_value:
            raise _mismatch(
                self,
                "cannot store a single value of multi-value argument %r" % self._label,
                "use store_values() with a list",
            )
        return self.bind(reference)

    def store_values(self, values, /):
        if not self._is_multi_value:
            raise _mismatch(
                self,
                "cannot store multiple values of single-value argument %r" % self._label,
                "call multi_value() first or use store_value()",
            )
        return self.bind(values)

    def append(self, value, /):
        """
        Record one supplied value (already coerced).

        Sequence mode appends (order kept, duplicates allowed); scalar mode
        overwrites (last write wins).
        """
        self._supplied += 1
        self._storage.put(value)

    def ingest(self, token, /):
        """
        Coerce a raw token with this cell's kind and append it.

        Raises ValueError when the token does not coerce; nothing is recorded then.
        """
        self.append(self._kind.coerce(token))

    def is_satisfied(self):
        return (
            self._supplied >= self._minimum
            or (self._supplied == 0 and self._fallback is not Unset)
        )

    def _source(self):
        # a floor of zero with nothing supplied falls back to the default when there is one
        if self._supplied >= self._minimum and (self._supplied or self._fallback is Unset):
            return self._storage.get()
        if self._fallback is not Unset:
            return self._fallback
        raise ValueUnavailableError(
            "argument %r has no value and no default" % self._label,
            title="value unavailable",
            code=FaultCode.VALUE_UNAVAILABLE,
            hint="supply the argument or configure a default",
            label=self._label,
        )

    def read(self, index=0, /):
        """
        Read the live value (or the default when not enough values were supplied).

        Parameters
        - index: position within a multi-value argument; ignored for single values.

        Raises
        - ValueUnavailableError: nothing supplied and no default, or index out of range.
        """
        source = self._source()
        if not self._is_multi_value:
            if source is Unset:
                raise ValueUnavailableError(
                    "argument %r has no value" % self._label,
                    title="value unavailable",
                    code=FaultCode.VALUE_UNAVAILABLE,
                    hint="supply the argument or configure a default",
                    label=self._label,
                )
            return source
        if not 0 <= index < len(source):
            raise ValueUnavailableError(
                "argument %r has no value at index %d (%d available)" % (self._label, index, len(source)),
                title="value unavailable",
                code=FaultCode.VALUE_UNAVAILABLE,
                hint="read an index below %d" % len(source),
                label=self._label,
                index=index,
            )
        return source[index]

    def read_all(self):
        """
        Return every live (or default) value as a new list.
        """
        source = self._source()
        if not self._is_multi_value:
            return [self.read()]
        return list(source)

    def reset(self):
        """
        Forget supplied values before a new parse (external storage is kept).
        """
        self._supplied = 0
        self._storage.clear()

    def _check_value(self, value):
        if not self._kind.accepts(value):
            raise ConfigurationError(
                "default %r does not match %s argument %r" % (value, self._kind.value, self._label),
                title="invalid default",
                code=FaultCode.MISMATCHED_MODE,
                hint="pass a %s default" % self._kind.value,
                label=self._label,
            )


class FlagCell(metaclass=IntrospectableType):
    """
    Boolean-only cell. Always satisfied; get() answers the supplied state or
    the default (initially False).
    """

    __introspectable__ = (
        "label",
        "fallback",
        "supplied",
    )

    __displayable__ = __introspectable__ + ("is_bound",)

    def __init__(self, label=Unset):
        self._label = coalesce(label, Kind.FLAG.value)
        self._storage = OwnedStorage(False)
        self._fallback = False
        self._supplied = False

    @property
    def is_bound(self):
        return self._storage.external

    def set_default(self, value, /):
        if not isinstance(value, bool):
            raise ConfigurationError(
                "default of flag %r must be a boolean" % self._label,
                title="invalid default",
                code=FaultCode.MISMATCHED_MODE,
                hint="pass True or False",
                label=self._label,
            )
        self._fallback = value
        return self

    default = set_default

    def bind(self, reference, /):
        """
        Redirect the flag's slot to a caller-owned Reference.

        Only set() writes into the reference. A flag that is never supplied
        leaves reference.value as the caller initialized it (a bare Reference()
        holds None); get() still answers the default. Initialize the reference
        with a bool, e.g. Reference(False), to read it directly.
        """
        if not isinstance(reference, Reference):
            raise _mismatch(
                self,
                "flag %r must be bound to a reference" % self._label,
                "pass a Reference to store_value()",
            )
        self._storage = ExternalStorage(reference, False)
        return self

    store_value = bind

    def set(self, value=True, /):
        self._supplied = True
        self._storage.put(bool(value))

    def get(self):
        if self._supplied:
            return self._storage.get()
        return self._fallback

    def is_satisfied(self):
        return True

    def reset(self):
        self._supplied = False
        self._storage.clear()


__all__ = (
    "Kind",
    "Reference",
    "OwnedStorage",
    "ExternalStorage",
    "ValueCell",
    "FlagCell",
)
