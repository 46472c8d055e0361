"""
argspan faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every parse-time issue. Codes are
  grouped by domain (11xxx errors, 12xxx warnings) so logs and searches stay
  predictable.
- ParseFault / ParseWarning: base types carrying a message + options that
  know how to render themselves with rich (header, message, hint).
- DuplicateDeclarationError / LookupMissError: programmer-contract violations,
  raised immediately by the registry; they are not parse outcomes.
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: "unknown flag '-zzz' at first position".
- Short lower-cased titles, one-sentence bodies, a single clear hint.

Integration
- The parse driver builds a fault and returns it inside a failed Outcome; it
  never raises or prints it. Callers render it (console.print(fault)) or raise
  it (outcome.unwrap()).
- Warnings are surfaced through the `warnings` module.
"""
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
    canonical fault codes (stable identifiers).

    grouping
    - flags (1111x/1112x)
      • UNKNOWN_FLAG, DUPLICATE_FLAG, MISSING_VALUE, OUT_OF_ORDER, COERCION_FAILURE
    - leftovers (1114x)
      • UNPARSED_TOKENS
    - warnings (12xxx)
      • STRAY_TOKEN

    normalize() lets the host remap codes to its own labels.
    """
    # --- flag errors (11xxx) ---
    UNKNOWN_FLAG                = 11112
    DUPLICATE_FLAG              = 11115
    MISSING_VALUE               = 11117
    OUT_OF_ORDER                = 11126
    COERCION_FAILURE            = 11127
    UNPARSED_TOKENS             = 11141

    # --- warnings (12xxx) ---
    STRAY_TOKEN                 = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels; otherwise the numeric
        value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, title, body):
    """
    shared rich rendering for faults and warnings.

    options read from fault.options: program, code, title, hint, docs,
    colorful (default False), fancy (default False).
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)

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

    prog = text(getattr(main, "__prog__", options.get("program", "")), styler("prog-name"))

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(options["code"].normalize() if "code" in options else "", styler("code")),
        " | ",
        text(options.get("title", "").title(), styler(title)),
        " ]"
    )
    message = text(fault.message, styler(body))
    parts = [message]
    if options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(options["hint"], styler("hint"))))
    if options.get("docs"):
        parts.append(text(options["docs"], styler("docs")))

    if options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")

    return Group(header, *parts)


class ParseFault(Exception):
    """
    base type of every parse-time failure.

    a fault is a value: the parse driver stores it in the failed Outcome and
    the caller decides whether to print it, raise it, or ignore it.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def hint(self):
        return self.options.get("hint")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
            "docs": "underline #00E5FF dim",
        }, "error-title", "error-message")


class UnknownFlagError(ParseFault): ...
class DuplicateFlagError(ParseFault): ...
class MissingValueError(ParseFault): ...
class OutOfOrderError(ParseFault): ...
class CoercionError(ParseFault): ...
class UnparsedTokensError(ParseFault): ...


class ParseWarning(Warning):
    """
    base type of non-fatal parse conditions, emitted via warnings.warn().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
            "docs": "underline #FFB400 dim",
        }, "warning-title", "warning-message")


class StrayTokenWarning(ParseWarning): ...


class DuplicateDeclarationError(ValueError):
    """
    a declaration name (or flag) was registered twice.
    """


class LookupMissError(KeyError):
    """
    a name was looked up that no declaration carries.
    """

    def __str__(self):
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ keyed by
    FaultCode; returns None when the code is not documented.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParseFault",
    "UnknownFlagError",
    "DuplicateFlagError",
    "MissingValueError",
    "OutOfOrderError",
    "CoercionError",
    "UnparsedTokensError",
    "ParseWarning",
    "StrayTokenWarning",
    "DuplicateDeclarationError",
    "LookupMissError",
    "getdoc",
)
