"""
argspan parsing layer: match flag tokens, collect value spans, drive a parse.

What this module provides
- find_match(declaration, tokens, start): locate the next token naming a
  declaration.
- collect_span(tokens, start, end): fold the run of non-flag tokens after a
  flag into one delimited text.
- Parser: owns a Registry, parses an argument vector with one of two
  strategies and reports the first failure as an Outcome.
- invoke(parser, argv): caller-side runner that prints the failure plus help to
  stderr and exits with status 1.

Strategies
- unordered (default): flags are matched by name wherever they appear.
    Scanning → flag token → (lookup) → Consuming → Scanning ...
  non-flag tokens met while scanning are ignored (StrayTokenWarning).
  values given to a presence flag are ignored the same way, in both strategies.
- ordered: declarations must appear exactly in registration order; the next
  unconsumed token must be the flag of the next declaration. Optional
  declarations whose flag is not next are skipped.

Failure semantics
- fail fast: processing stops at the first fault.
- values stored before the fault stay readable; the Outcome is still a failure.
- faults are returned, never raised or printed by parse().

Quick start
    from argspan import Parser, Kind

    parser = Parser()
    parser.add(Kind.TEXT, "name", "n", "who to greet")
    parser.add(int, "age", help="age in years")
    outcome = parser.parse(["prog", "-name", "John", "Smith", "-age", "30"])
    if outcome:
        parser.get("name")  # 'John Smith'
"""
import difflib
import os.path
import shlex
import sys
import warnings
from collections.abc import Iterable

from rich.console import Console, Group

from .coercion import Kind, coerce
from .declarations import Declaration, Registry
from .faults import *
from .faults import console as stderr
from .rendering import usage_text, details_text, debug_text
from .utils import *


def find_match(declaration, tokens, start=0, /, *, prefix="-", loose=False):
    """
    return the index of the first token at or after `start` that names
    `declaration`, or None.

    a token names a declaration when it starts with `prefix` and the rest
    equals the declaration's name or flag.

    loose=True switches to legacy containment matching (the rest only has to
    contain the name or flag). it lets a short flag such as "n" match inside an
    unrelated token like "-input"; the parse driver never uses it.
    """
    for index in range(start, len(tokens)):
        token = tokens[index]
        if not token.startswith(prefix):
            continue
        remainder = token[len(prefix):]
        if loose:
            if any(part in remainder for part in declaration.tokens):
                return index
        elif remainder in declaration.tokens:
            return index
    return None


def collect_span(tokens, start, end=None, /, *, delimiter=" ", prefix="-"):
    """
    collect the value span that starts at `start`.

    every token from `start` up to (not including) the first `prefix` token or
    `end` (default: len(tokens)) is joined with `delimiter`.

    returns
    - (text, consumed): the joined text and how many tokens were folded into it.
      consumed == 0 means no value was supplied (text is then "").
    """
    end = len(tokens) if end is None else min(end, len(tokens))
    index = start
    while index < end and not tokens[index].startswith(prefix):
        index += 1
    return delimiter.join(tokens[start:index]), index - start


class Outcome:
    """
    result of one parse: success, or failure carrying the first fault.

    truthiness
    - bool(outcome) is True on success, False on failure.

    fields
    - parser: the Parser that produced this outcome.
    - fault: ParseFault | None.
    """
    __slots__ = ("parser", "fault")

    def __init__(self, parser, fault=None, /):
        if fault is not None and not isinstance(fault, ParseFault):
            raise TypeError("outcome fault must be a parse fault")
        self.parser = parser
        self.fault = fault

    @property
    def ok(self):
        return self.fault is None

    @property
    def message(self):
        return None if self.fault is None else self.fault.message

    @property
    def code(self):
        return None if self.fault is None else self.fault.code

    def unwrap(self):
        """
        return the parser on success; raise the carried fault on failure.
        """
        if self.fault is not None:
            raise self.fault
        return self.parser

    def __bool__(self):
        return self.fault is None

    def __repr__(self):
        if self.fault is None:
            return "outcome(success)"
        return "outcome(failure=%s(%r))" % (type(self.fault).__name__, self.fault.message)

    def __rich__(self):
        return self.fault if self.fault is not None else "success"


class Parser:
    """
    Declaration set plus the engine that parses argument vectors against it.

    Parameters
    - ordered: bool
      selects the ordered strategy (flags must follow registration order).
    - delimiter: str
      joins multi-token spans; TEXT_LIST values are split on it. Non-empty.
    - prefix: str
      the flag-prefix marker, a single non-alphanumeric character.
    - colorful, fancy: bool (keyword-only)
      rendering options for faults and help output.
    """

    def __init__(self, ordered=False, delimiter=" ", prefix="-", *, colorful=False, fancy=False):
        if not isinstance(delimiter, str):
            raise TypeError("parser 'delimiter' must be a string")
        elif not delimiter:
            raise ValueError("parser 'delimiter' cannot be empty")
        if not isinstance(prefix, str):
            raise TypeError("parser 'prefix' must be a string")
        elif len(prefix) != 1 or prefix.isalnum() or prefix.isspace() or prefix == "_":
            raise ValueError("parser 'prefix' must be a single punctuation character")

        self._ordered = bool(ordered)
        self._delimiter = delimiter
        self._prefix = prefix
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._registry = Registry()
        self._program = Unset
        self._tokens = ()

    ordered = mirror("ordered")
    delimiter = mirror("delimiter")
    prefix = mirror("prefix")
    colorful = mirror("colorful")
    fancy = mirror("fancy")
    registry = mirror("registry")

    @property
    def program(self):
        """
        program name used in rendering: __prog__ from __main__, else the last
        parsed argv[0] (basename), else the running script's name.
        """
        main = __import__("__main__")
        if hasattr(main, "__prog__"):
            return str(main.__prog__)
        return coalesce(self._program, os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "prog")

    # ── declarations ──────────────────────────────────────────────────────────

    def add(self, kind, name, flag=Unset, help="", optional=False):
        """
        declare a flag and register it; returns the Declaration.

        raises DuplicateDeclarationError when name/flag is taken, and
        TypeError/ValueError for malformed metadata.
        """
        return self._registry.register(Declaration(kind, name, flag, help, optional))

    def get(self, name, /):
        """
        the parsed value for `name` (None when absent, False for an absent
        presence flag). raises LookupMissError for unknown names.
        """
        return self._registry.get(name)

    def lookup(self, name, /):
        return self._registry.lookup(name)

    # ── rendering ─────────────────────────────────────────────────────────────

    def usage(self, program=Unset, /):
        """
        plain-text usage line followed (when declarations exist) by the details.
        """
        usage = usage_text(self._registry, coalesce(program, self.program), prefix=self._prefix).plain
        details = details_text(self._registry, prefix=self._prefix).plain
        return usage + "\n\n" + details if details else usage

    def debug(self):
        return debug_text(self._registry, prefix=self._prefix).plain

    def help(self, console=Unset, /):
        """
        print the styled usage and details to `console` (stdout by default).
        """
        console = coalesce(console, Console())
        renders = [usage_text(self._registry, self.program, prefix=self._prefix, colorful=self._colorful)]
        if details := details_text(self._registry, prefix=self._prefix, colorful=self._colorful):
            renders.extend(("", details))
        console.print(Group(*renders))

    # ── parsing ───────────────────────────────────────────────────────────────

    def parse(self, argv, /):
        """
        parse an argument vector (argv[0] is the program name).

        parameters
        - argv: Iterable[str] | str
          a str is split shell-style with shlex.split.

        returns
        - Outcome: truthy on success; on failure carries the first fault.

        raises
        - TypeError when argv is not a string or an iterable of strings, or is
          empty (the program name is required).
        """
        if isinstance(argv, str):
            argv = shlex.split(argv)
        elif not isinstance(argv, Iterable):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        argv = tuple(argv)
        if not argv:
            raise TypeError("parse() argument must include the program name")
        for token in argv:
            if not isinstance(token, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")

        self._program = os.path.basename(argv[0]) or argv[0]
        self._tokens = argv[1:]
        self._registry._reset()  # NOQA: the parser is the registry's only writer

        try:
            fault = self._parse_ordered() if self._ordered else self._parse_unordered()
        finally:
            self._tokens = ()
        return Outcome(self, fault)

    def _fault(self, cls, message, /, **options):
        return cls(
            message,
            program=self.program,
            colorful=self._colorful,
            fancy=self._fancy,
            docs=getdoc(options["code"]),
            **options
        )

    def _position(self, index):
        # tokens are 0-based, positions are 1-based and skip argv[0]
        return ordinal(index + 1)

    def _consume(self, declaration, index):
        """
        collect, coerce and store the value span following the flag at `index`.

        returns (fault_or_None, consumed).
        """
        token = self._tokens[index]
        text, consumed = collect_span(
            self._tokens, index + 1, delimiter=self._delimiter, prefix=self._prefix
        )

        if declaration.kind is Kind.PRESENCE:
            if consumed:
                self._stray(index + 1, "presence flag %r takes no value" % token, stacklevel=5)
            self._registry._store(declaration, coerce(Kind.PRESENCE, text, self._delimiter))
            return None, consumed

        if not consumed:
            if declaration.optional:
                return None, consumed
            return self._fault(
                MissingValueError,
                "flag %r at %s position requires a %s value" % (
                    token, self._position(index), declaration.kind.label
                ),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                hint="provide a value after it (for example: %s <%s>)" % (token, declaration.name),
                token=token,
                index=index,
                declaration=declaration,
            ), consumed

        try:
            value = coerce(declaration.kind, text, self._delimiter)
        except ValueError as exception:
            return self._fault(
                CoercionError,
                "value of flag %r at %s position is not a valid %s: %s" % (
                    token, self._position(index), declaration.kind.label, exception
                ),
                title="invalid %s" % declaration.kind.label,
                code=FaultCode.COERCION_FAILURE,
                hint="pass a %s value to %s" % (declaration.kind.label, token),
                token=token,
                index=index,
                declaration=declaration,
                text=text,
            ), consumed

        self._registry._store(declaration, value)
        return None, consumed

    def _stray(self, index, hint, /, *, stacklevel):
        token = self._tokens[index]
        warnings.warn(StrayTokenWarning(
            "ignored value %r at %s position" % (token, self._position(index)),
            title="stray value",
            code=FaultCode.STRAY_TOKEN,
            hint=hint,
            token=token,
            index=index,
            program=self.program,
        ), stacklevel=stacklevel)

    def _unknown(self, token, index, expected=Unset):
        key = token[len(self._prefix):]
        choices = [t for declaration in self._registry for t in declaration.tokens]
        suggestions = difflib.get_close_matches(key, choices, 5)
        try:
            hint = "did you mean %r?" % (self._prefix + suggestions[0])
        except IndexError:
            hint = "remove it or declare it with add()"
        return self._fault(
            UnknownFlagError,
            "unknown flag %r at %s position" % (token, self._position(index))
            + ("" if expected is Unset else ", expected %r" % expected),
            title="unknown flag",
            code=FaultCode.UNKNOWN_FLAG,
            hint=hint,
            token=token,
            index=index,
            suggestions=suggestions,
        )

    def _parse_unordered(self):
        seen = set()
        index = 0
        while index < len(self._tokens):
            token = self._tokens[index]

            # scanning: values not attached to a flag are skipped
            if not token.startswith(self._prefix):
                self._stray(index, "values must follow the flag they belong to", stacklevel=4)
                index += 1
                continue

            declaration = self._registry.resolve(token[len(self._prefix):])
            if declaration is None:
                return self._unknown(token, index)

            if declaration in seen:
                return self._fault(
                    DuplicateFlagError,
                    "flag %r at %s position was already provided" % (token, self._position(index)),
                    title="duplicated flag",
                    code=FaultCode.DUPLICATE_FLAG,
                    hint="keep a single %s%s; each flag can be given only once" % (self._prefix, declaration.name),
                    token=token,
                    index=index,
                    declaration=declaration,
                )
            seen.add(declaration)

            # consuming
            fault, consumed = self._consume(declaration, index)
            if fault is not None:
                return fault
            index += 1 + consumed

        for declaration in self._registry:
            if declaration.optional or declaration in seen:
                continue
            token = self._prefix + (declaration.flag or declaration.name)
            return self._fault(
                MissingValueError,
                "required flag %r was not provided" % (self._prefix + declaration.name),
                title="missing flag",
                code=FaultCode.MISSING_VALUE,
                hint="add it (for example: %s <%s>)" % (token, declaration.name),
                token=token,
                index=len(self._tokens),
                declaration=declaration,
            )
        return None

    def _parse_ordered(self):
        index = 0
        for declaration in self._registry:
            expected = self._prefix + declaration.name

            if index >= len(self._tokens):
                if declaration.optional:
                    continue
                return self._fault(
                    MissingValueError,
                    "input ended before required flag %r at %s position" % (expected, self._position(index)),
                    title="missing flag",
                    code=FaultCode.MISSING_VALUE,
                    hint="add %s <%s> after the previous flags" % (expected, declaration.name),
                    token=expected,
                    index=index,
                    declaration=declaration,
                )

            found = find_match(declaration, self._tokens, index, prefix=self._prefix)
            if found != index:
                if declaration.optional:
                    continue
                token = self._tokens[index]
                if not token.startswith(self._prefix):
                    return self._fault(
                        OutOfOrderError,
                        "expected flag %r at %s position, got %r" % (expected, self._position(index), token),
                        title="out of order",
                        code=FaultCode.OUT_OF_ORDER,
                        hint="flags must start with %r and follow the declared order" % self._prefix,
                        token=token,
                        index=index,
                        declaration=declaration,
                    )
                if self._registry.resolve(token[len(self._prefix):]) is None:
                    return self._unknown(token, index, expected)
                if found is None:
                    message = "expected flag %r at %s position, got %r" % (expected, self._position(index), token)
                else:
                    message = "expected flag %r at %s position, got %r (%r comes at %s position)" % (
                        expected, self._position(index), token, self._tokens[found], self._position(found)
                    )
                return self._fault(
                    OutOfOrderError,
                    message,
                    title="out of order",
                    code=FaultCode.OUT_OF_ORDER,
                    hint="give the flags in the declared order: %s" % " ".join(
                        self._prefix + each.name for each in self._registry
                    ),
                    token=token,
                    index=index,
                    declaration=declaration,
                )

            fault, consumed = self._consume(declaration, index)
            if fault is not None:
                return fault
            index += 1 + consumed

        if index < len(self._tokens):
            token = self._tokens[index]
            if token.startswith(self._prefix):
                if (declaration := self._registry.resolve(token[len(self._prefix):])) is None:
                    return self._unknown(token, index)
                return self._fault(
                    OutOfOrderError,
                    "flag %r at %s position comes after its turn" % (token, self._position(index)),
                    title="out of order",
                    code=FaultCode.OUT_OF_ORDER,
                    hint="give the flags in the declared order: %s" % " ".join(
                        self._prefix + each.name for each in self._registry
                    ),
                    token=token,
                    index=index,
                    declaration=declaration,
                )
            return self._fault(
                UnparsedTokensError,
                "unparsed input remains from %s position" % self._position(index),
                title="unparsed input",
                code=FaultCode.UNPARSED_TOKENS,
                hint="remove the extra inputs",
                token=token,
                index=index,
                leftover=list(self._tokens[index:]),
            )
        return None

    def __repr__(self):
        return "parser(ordered=%r, delimiter=%r, prefix=%r, declarations=%r)" % (
            self._ordered, self._delimiter, self._prefix, [d.name for d in self._registry]
        )

    def __rich_repr__(self):
        yield "ordered", self._ordered
        yield "delimiter", self._delimiter
        yield "prefix", self._prefix
        yield "declarations", self._registry.all()


def invoke(parser, argv=Unset, /):
    """
    parse `argv` (default: sys.argv) and terminate on failure.

    on failure the fault and the help are printed to stderr through rich and
    the process exits with status 1. on success the outcome is returned.
    """
    if not isinstance(parser, Parser):
        raise TypeError("invoke() first argument must be a parser")
    outcome = parser.parse(coalesce(argv, sys.argv))
    if not outcome:
        stderr.print(outcome.fault)
        parser.help(stderr)
        sys.exit(1)
    return outcome


__all__ = (
    "find_match",
    "collect_span",
    "Outcome",
    "Parser",
    "invoke",
)
