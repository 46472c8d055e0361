"""
Value coercion: turn a collected value span into a typed value.

Kinds
- INTEGER    base-10 signed integer ("30", "-4", "+7")
- FLOAT      decimal number ("3.5", "-.5", "1e3")
- TEXT       text verbatim
- TEXT_LIST  text split on the parser delimiter (empty segments preserved)
- PRESENCE   True whenever the flag token was matched; the span is ignored

coerce() is pure: it either returns the value or raises ValueError with a
short, lower-case reason that the parse driver folds into its failure message.
"""
import math
import re
from enum import Enum

_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?", re.ASCII)


class Kind(Enum):
    """
    closed set of value kinds a declaration can expect.

    every member knows its display label (used by the usage renderer) and the
    python type its coerced values have.
    """
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    TEXT_LIST = "text-list"
    PRESENCE = "presence"

    @property
    def label(self):
        """
        short label for help output (presence flags carry no value, hence no label).
        """
        return "" if self is Kind.PRESENCE else self.value

    @property
    def pytype(self):
        return _PYTYPES[self]

    @classmethod
    def resolve(cls, kind, /):
        """
        resolve a kind from a Kind member, its value ("integer", "text-list", ...)
        or the matching python type (int, float, str, list, bool).
        """
        if isinstance(kind, cls):
            return kind
        if isinstance(kind, str):
            try:
                return cls(kind.strip().lower().replace("_", "-"))
            except ValueError:
                raise ValueError(f"unknown kind {kind!r}") from None
        if isinstance(kind, type):
            for member, pytype in _PYTYPES.items():
                if kind is pytype:
                    return member
            raise ValueError(f"no kind matches type {kind.__name__!r}")
        raise TypeError("kind must be a Kind, a string or a type")


_PYTYPES = {
    Kind.INTEGER: int,
    Kind.FLOAT: float,
    Kind.TEXT: str,
    Kind.TEXT_LIST: list,
    Kind.PRESENCE: bool,
}


def _coerce_integer(text, delimiter):
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"{text!r} is not a base-10 integer")
    return int(text)


def _coerce_float(text, delimiter):
    if not _FLOAT.fullmatch(text):
        raise ValueError(f"{text!r} is not a decimal number")
    if not math.isfinite(value := float(text)):
        raise ValueError(f"{text!r} is out of range for a decimal number")
    return value


def _coerce_text(text, delimiter):
    return text


def _coerce_text_list(text, delimiter):
    return text.split(delimiter)


def _coerce_presence(text, delimiter):
    return True


_COERCERS = {
    Kind.INTEGER: _coerce_integer,
    Kind.FLOAT: _coerce_float,
    Kind.TEXT: _coerce_text,
    Kind.TEXT_LIST: _coerce_text_list,
    Kind.PRESENCE: _coerce_presence,
}


def coerce(kind, text, delimiter=" ", /):
    """
    convert `text` into a value of `kind`.

    parameters
    - kind: Kind (or anything Kind.resolve accepts)
    - text: str, the joined value span
    - delimiter: str, non-empty; used to split TEXT_LIST spans

    returns
    - int | float | str | list[str] | bool

    raises
    - ValueError when the text does not fit the kind
    - TypeError on non-string text or delimiter
    """
    if not isinstance(text, str):
        raise TypeError("coerce() text must be a string")
    if not isinstance(delimiter, str):
        raise TypeError("coerce() delimiter must be a string")
    elif not delimiter:
        raise ValueError("coerce() delimiter cannot be empty")
    return _COERCERS[Kind.resolve(kind)](text, delimiter)


__all__ = (
    "Kind",
    "coerce",
)
