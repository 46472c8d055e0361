r"""
argspan declarations and the registry that owns them.

Overview
- Declaration: one expected flag — name, optional short flag, help text, value
  kind and optional-ness. Immutable once built; fields are exposed as
  read-only properties.
- Registry: ordered, append-only collection of declarations. It also owns
  the parsed value of every declaration (absent until the parse driver stores
  one).

Validation highlights
- name/flag must match r"[^\W\d_][\w-]*" (letters first; no prefix marker, no
  whitespace).
- help is trimmed; an empty help is allowed.
- presence declarations are always optional.
- a registry rejects a second declaration whose name or flag is already a
  match token of another declaration.

Quick example:
    >>> registry = Registry()
    >>> registry.register(Declaration(Kind.TEXT, "name", "n", "who to greet"))
    >>> registry.lookup("name").flag
    'n'
"""
import functools
import operator
import re
from types import MappingProxyType

from .coercion import Kind
from .faults import DuplicateDeclarationError, LookupMissError
from .utils import *

_IDENTIFIER = re.compile(r"[^\W\d_][\w-]*")


class DeclarationType(type):
    """
    Metaclass giving declarations a stable repr and read-only fields.

    Responsibilities
    - Expose every name listed in __introspectable__ through mirror().
    - Provide __repr__/__rich_repr__ built from those fields.
    - Derive __typename__ from the class name for messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}(%s)" % ", ".join(
                map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_identifier(cls, field, value, /):
    if not isinstance(value, str):
        raise TypeError(f"{cls.__typename__} '{field}' must be a string")
    elif not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} '{field}' cannot be empty")
    elif not _IDENTIFIER.fullmatch(value):
        raise ValueError(
            f"{cls.__typename__} '{field}' must start with a letter and contain only letters, digits, '_' or '-'"
        )
    return value


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate declaration metadata in place.

    - kind: anything Kind.resolve accepts.
    - name: required identifier.
    - flag: Unset or an identifier different from the name; Unset becomes None.
    - help: string (trimmed); may be empty.
    - optional: forced to True for presence declarations.
    """
    metadata["kind"] = Kind.resolve(metadata["kind"])
    metadata["name"] = _sanitize_identifier(cls, "name", metadata["name"])

    if (flag := metadata["flag"]) is not Unset:
        flag = _sanitize_identifier(cls, "flag", flag)
        if flag == metadata["name"]:
            raise ValueError(f"{cls.__typename__} 'flag' must differ from its 'name'")
    metadata["flag"] = coalesce(flag)

    if not isinstance(help := metadata["help"], str):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    metadata["help"] = help.strip()

    metadata["optional"] = bool(metadata["optional"]) or metadata["kind"] is Kind.PRESENCE


class Declaration(metaclass=DeclarationType):
    """
    One flag the caller wants parsed.

    Properties (read-only)
    - kind: Kind of the expected value.
    - name: unique identifier; also the default match token.
    - flag: alternate short match token, or None.
    - help: free-text description ("" when not given).
    - optional: whether absence is acceptable.
    """

    __introspectable__ = (
        "kind",
        "name",
        "flag",
        "help",
        "optional",
    )

    def __init__(self, kind, name, flag=Unset, help="", optional=False):
        metadata = {
            "kind": kind,
            "name": name,
            "flag": flag,
            "help": help,
            "optional": optional,
        }
        _sanitize_metadata(type(self), metadata)

        # Backing fields bypass the read-only __setattr__; mirror() exposes them.
        for field, value in metadata.items():
            object.__setattr__(self, "_" + field, value)

    def __setattr__(self, name, value, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    def __delattr__(self, name, /):
        raise AttributeError(f"{type(self).__typename__} is read-only")

    @property
    def tokens(self):
        """
        every text that names this declaration after the prefix marker
        (flag first, when present).
        """
        return (self._flag, self._name) if self._flag else (self._name,)

    def __eq__(self, other):
        if not isinstance(other, Declaration):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in type(self).__introspectable__)

    def __hash__(self):
        return hash(tuple(getattr(self, name) for name in type(self).__introspectable__))


class Registry:
    """
    Ordered, append-only collection of declarations and their parsed values.

    The registry is the single owner of values: the parse driver writes them
    through _store() and clears them with _reset(); callers read them with
    get()/has()/values().
    """

    def __init__(self):
        self._declarations = {}
        self._aliases = {}
        self._values = {}

    def register(self, declaration, /):
        """
        append a declaration.

        raises
        - TypeError when `declaration` is not a Declaration.
        - DuplicateDeclarationError when its name or flag is already taken by
          another declaration (names and flags share one token space).
        """
        if not isinstance(declaration, Declaration):
            raise TypeError("register() argument must be a declaration")
        for token in declaration.tokens:
            if token in self._aliases:
                owner = self._aliases[token]
                raise DuplicateDeclarationError(
                    f"{token!r} is already declared by {owner.name!r}"
                )
        self._declarations[declaration.name] = declaration
        self._aliases.update(dict.fromkeys(declaration.tokens, declaration))
        return declaration

    def lookup(self, name, /):
        """
        return the declaration registered under `name` (names only, not flags).

        raises LookupMissError for unknown names.
        """
        try:
            return self._declarations[name]
        except (KeyError, TypeError):
            raise LookupMissError(f"no declaration named {name!r}") from None

    def resolve(self, key, /):
        """
        return the declaration matched by `key` (a name or a flag), or None.
        """
        return self._aliases.get(key)

    def all(self):
        """
        every declaration in registration order.
        """
        return tuple(self._declarations.values())

    def get(self, name, /):
        """
        return the parsed value for `name`.

        absent values read as None, except presence declarations which read
        as False. raises LookupMissError for unknown names.
        """
        declaration = self.lookup(name)
        try:
            return self._values[name]
        except KeyError:
            return False if declaration.kind is Kind.PRESENCE else None

    def has(self, name, /):
        """
        whether a value was stored for `name` during the last parse.
        """
        self.lookup(name)
        return name in self._values

    def values(self):
        """
        read-only snapshot of the stored values, keyed by name.
        """
        return MappingProxyType(dict(self._values))

    def _store(self, declaration, value, /):
        assert declaration.name not in self._values, "values are stored once per parse"
        self._values[declaration.name] = value

    def _reset(self):
        self._values.clear()

    def __iter__(self):
        return iter(self._declarations.values())

    def __len__(self):
        return len(self._declarations)

    def __contains__(self, name):
        return name in self._declarations

    def __repr__(self):
        return "registry(%s)" % ", ".join(map(repr, self._declarations))

    def __rich_repr__(self):
        for declaration in self._declarations.values():
            yield declaration


__all__ = (
    "Declaration",
    "Registry",
)

# Keep the metaclass out of the public namespace.
del DeclarationType
