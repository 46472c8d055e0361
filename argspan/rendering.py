"""
Usage/help rendering for a declaration registry.

Everything here is formatting: no parsing decisions are made. Renders are
built as rich Text (styled when colorful=True, palette overridable through
__styles__ in __main__); the render_* functions return the plain string.

Layout
    usage: prog -n <name> -age <age> [-v] [-t <tags> ...]

    options:
      -n, -name     text       who to greet
      -age          integer    age in years
      -v, -verbose             be chatty
      -t, -tags     [text-list]
"""
from collections import defaultdict

from rich.text import Text

from .coercion import Kind


def _styler(colorful):
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "group-label": "bold #FFFFFF",  # Pure white headers
        "flag-name": "bold #22C55E",  # GREEN for presence flags
        "option-name": "bold #00E6FF",  # CYAN for value-bearing flags
        "metavar": "bold #FFD600",  # AMBER for parameters
        "kind": "#36C5F0",
        "argument-description": "#9CA3AF",  # Muted gray
        "null": "dim",
        "value": "bold #FFD600",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    return styler


def _name_style(declaration):
    return "flag-name" if declaration.kind is Kind.PRESENCE else "option-name"


def _entry(declaration, prefix, styler):
    entry = Text()
    entry.append(prefix + (declaration.flag or declaration.name), styler(_name_style(declaration)))
    if declaration.kind is not Kind.PRESENCE:
        entry.append(" ").append(f"<{declaration.name}>", styler("metavar"))
        if declaration.kind is Kind.TEXT_LIST:
            entry.append(" ...")
    if declaration.optional:
        entry = Text.assemble("[", entry, "]")
    return entry


def usage_text(registry, program, /, *, prefix="-", colorful=False):
    """
    build the invocation line: "usage: <program>" plus one entry per declaration.
    """
    styler = _styler(colorful)
    usage = Text()
    usage.append("usage", styler("usage-label")).append(":")
    usage.append(" ")
    usage.append(str(program), styler("program-name"))
    for declaration in registry:
        usage.append(" ").append(_entry(declaration, prefix, styler))
    return usage


def details_text(registry, /, *, prefix="-", colorful=False):
    """
    build the aligned per-declaration listing (empty Text for an empty registry).
    """
    styler = _styler(colorful)
    details = Text()
    declarations = registry.all()
    if not declarations:
        return details

    names = {
        declaration: ", ".join(prefix + token for token in declaration.tokens)
        for declaration in declarations
    }
    labels = {
        declaration: (f"[{declaration.kind.label}]" if declaration.optional else declaration.kind.label)
        if declaration.kind.label else ""
        for declaration in declarations
    }
    names_width = max(map(len, names.values()))
    labels_width = max(map(len, labels.values()))

    details.append("options", styler("group-label")).append(":")
    for declaration in declarations:
        line = Text("  ")
        line.append(names[declaration].ljust(names_width), styler(_name_style(declaration)))
        if labels_width:
            line.append("  ").append(labels[declaration].ljust(labels_width), styler("kind"))
        if declaration.help:
            line.append("  ").append(declaration.help, styler("argument-description"))
        line.rstrip()
        details.append("\n").append(line)
    return details


def debug_text(registry, /, *, prefix="-", colorful=False):
    """
    build a dump of every declaration with its kind and current value.
    """
    styler = _styler(colorful)
    debug = Text()
    debug.append("registry (debug):", styler("group-label"))
    for declaration in registry:
        debug.append("\n  ").append(prefix + declaration.name, styler(_name_style(declaration)))
        debug.append("\n    kind: ").append(declaration.kind.value, styler("kind"))
        debug.append("\n    value: ")
        if registry.has(declaration.name):
            debug.append(repr(registry.get(declaration.name)), styler("value"))
        else:
            debug.append("null", styler("null"))
    return debug


def render_usage(registry, program, /, *, prefix="-"):
    """
    plain-text invocation line; "usage: <program>" alone for an empty registry.
    """
    return usage_text(registry, program, prefix=prefix).plain


def render_details(registry, /, *, prefix="-"):
    """
    plain-text aligned listing of every declaration ("" for an empty registry).
    """
    return details_text(registry, prefix=prefix).plain


def render_debug(registry, /, *, prefix="-"):
    return debug_text(registry, prefix=prefix).plain


__all__ = (
    "usage_text",
    "details_text",
    "debug_text",
    "render_usage",
    "render_details",
    "render_debug",
)
