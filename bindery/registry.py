"""
Bindery registry: describe the expected options, then bind an argument vector.

What this module provides
- Descriptor: one registered option (kind, destination, phrase, help text,
  arity, required flag, string-encoded default) plus its per-parse 'bound' state.
- Registry: the caller-owned table of descriptors keyed by long phrase, with
  • register(...): add or replace a descriptor and seed its destination;
  • parse(words): re-tokenize argv, bind values, validate required options;
  • render_help(): plain-text help block, one entry per option;
  • print_help(): the same content styled with rich.
- parse(registry, words) / render_help(registry): module-level conveniences.

Quick start
    from bindery import Registry, Kind, Cell

    iterations, seeds, name, help = Cell(), [], Cell(), Cell()

    registry = Registry("simulate")
    registry.register(Kind.INT, iterations, "--iterations", "number of iterations")
    registry.register(Kind.FLOAT, seeds, "--seeds", "initial seeds", nargs=3, required=False)
    registry.register(Kind.STRING, name, "--name", "name of the run", default="simulation")
    registry.register(Kind.BOOL, help, "--help", "show this help message")
    registry.parse(["--iterations", "5", "--seeds", "1.0", "2.0", "3.0"])

Parsing model
- The vector is re-joined and re-scanned (see bindery.tokens), so '--opt=value'
  and '--opt value' are identical and double-quoted words may contain spaces.
- Words alternate between option names and the values of the last option.
  A bool option takes no value; '--help' stops parsing and skips validation.
- An option registered with nargs=... (unbounded) absorbs every remaining word,
  so it must be the last option of an invocation.
- Calling parse() more than once on the same registry is unsupported: sequence
  destinations keep the values appended by earlier passes.
"""
import copy
import functools
import logging
import operator
import os.path
import re
import sys
from collections.abc import Iterable
from collections import defaultdict
from types import EllipsisType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from . import tokens
from .cells import _check_destination
from .faults import *
from .kinds import Kind
from .utils import *

logger = logging.getLogger(__name__)

# Phrase of the help flag: matching it ends parsing without validation.
HELP = "--help"


class BinderyType(type):
    """
    Metaclass that gives descriptors and registries a stable, introspectable shape.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide readable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata of one option.

    Responsibilities
    - kind: resolved through Kind.resolve (member, type name or builtin).
    - phrase: a single non-empty word without '=' or a leading quote, since the
      tokenizer could never produce such a word.
    - descr: non-empty help text (trimmed); every option must explain itself.
    - nargs: positive int or Ellipsis (the literal "..." is accepted too).
      Bool options are forced to 1.
    - default: Unset or a string-encoded value.
    - required: Unset or bool; defaults to "no default was given". Bool options
      are never required and default to "false".

    Raises
    - TypeError/ValueError on API misuse (these are programming errors, not faults).
    """
    metadata["kind"] = kind = Kind.resolve(metadata["kind"])

    if not isinstance(phrase := metadata["phrase"], str):
        raise TypeError(f"{cls.__typename__} 'phrase' must be a string")
    elif not re.fullmatch(r'[^\s="][^\s=]*', phrase):
        raise ValueError(f"{cls.__typename__} 'phrase' must be a single word without '=' or quotes")

    if not isinstance(descr := metadata["descr"], str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = descr

    if (nargs := metadata["nargs"]) == "...":
        nargs = Ellipsis
    if isinstance(nargs, bool) or not isinstance(nargs, int | EllipsisType):
        raise TypeError(f"{cls.__typename__} 'nargs' must be an integer or ellipsis")
    if isinstance(nargs, int) and nargs < 1:
        raise ValueError(f"{cls.__typename__} 'nargs' must be a positive integer")

    if not isinstance(default := metadata["default"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")
    if not isinstance(required := metadata["required"], bool | Unset):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")

    if kind is Kind.BOOL:
        # presence-only: no value token, never required, always initialized
        metadata["nargs"] = 1
        metadata["required"] = False
        metadata["default"] = coalesce(default, "false")
    else:
        metadata["nargs"] = nargs
        metadata["required"] = coalesce(required, default is Unset)
        metadata["default"] = coalesce(default, "")


class Descriptor(metaclass=BinderyType):
    """
    One registered option.

    Properties listed in __introspectable__ are read-only mirrors of the
    sanitized metadata; 'bound' reports whether the current parse completed
    this option (every declared value received, or the first value of an
    unbounded option).
    """

    __introspectable__ = (
        "kind",
        "phrase",
        "descr",
        "nargs",
        "required",
        "default",
        "bound",
    )

    def __init__(self, kind, destination, phrase, descr, /, nargs=1, default=Unset, required=Unset):
        metadata = {
            "kind": kind,
            "phrase": phrase,
            "descr": descr,
            "nargs": nargs,
            "default": default,
            "required": required,
        }
        _sanitize_metadata(type(self), metadata)
        _check_destination(destination, metadata["nargs"])

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._destination = destination
        self._bound = False

    @property
    def destination(self):
        """
        The caller-owned write target (a Cell, or a mutable sequence).
        """
        return self._destination

    @property
    def unbounded(self):
        return self._nargs is Ellipsis

    def _write(self, value):
        # arity 1 overwrites the cell, any other arity appends
        if self._nargs == 1:
            self._destination.set(value)
        else:
            self._destination.append(value)


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based word position.
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


def _sanitized(words):
    """
    Normalize a parse() input into a list of strings.

    - Unset: the process arguments (sys.argv[1:]).
    - str: one pre-joined word (it is scanned like any joined vector).
    - Iterable[str]: used as-is, in order.
    """
    if words is Unset:
        return sys.argv[1:]
    if isinstance(words, str):
        return [words]
    if not isinstance(words, Iterable):
        raise TypeError("parse() argument must be a string or an iterable of strings")
    words = list(words)
    for word in words:
        if not isinstance(word, str):
            raise TypeError("parse() argument must be a string or an iterable of strings")
    return words


class Registry(metaclass=BinderyType):
    """
    Caller-owned table of option descriptors.

    Lifecycle
    - configuration: register() any number of options; re-registering a phrase
      replaces the earlier descriptor (a RedefinedOptionWarning is emitted).
    - parsing: parse() once; destinations are written in place.
    - afterwards: destinations are read by the host; render_help()/print_help()
      may be called at any time and never mutate the table.

    Runtime flags
    - shell: print faults to stderr and exit(1) instead of raising.
    - fancy: render faults and help inside rich panels.
    - colorful: apply the palette (overridable via __styles__ in __main__).
    """

    __introspectable__ = (
        "prog",
        "descriptors",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "prog",
        "shell",
        "fancy",
        "colorful",
    )

    def __init__(self, prog=Unset, /, *, shell=False, fancy=False, colorful=False):
        if not isinstance(prog := coalesce(prog, os.path.basename(sys.argv[0])), str):
            raise TypeError(f"{type(self).__typename__} 'prog' must be a string")
        self._prog = prog
        self._shell = bool(shell)
        self._fancy = bool(fancy)
        self._colorful = bool(colorful)
        self._descriptors = {}
        self._stderr = False

    def __contains__(self, phrase):
        return phrase in self._descriptors

    def __getitem__(self, phrase):
        return self._descriptors[phrase]

    def __iter__(self):
        # ascending lexicographic order of the long phrases
        return iter(sorted(self._descriptors))

    def __len__(self):
        return len(self._descriptors)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this registry's runtime flags merged in.

        In shell mode a parse error is preceded by the help text on stderr.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)
        if self.shell and isinstance(fault, BindingException) and not isinstance(fault, InvalidDefaultError):
            self._stderr = True
            self.print_help()
            self._stderr = False
        trigger(fault)

    def register(self, kind, destination, phrase=Unset, descr=Unset, /, nargs=1, default=Unset, required=Unset):
        """
        Add (or replace) an option and seed its destination.

        Forms
        - register(kind, destination)
          the '--help' flag; kind must be bool.
        - register(kind, destination, phrase, descr, nargs=1, default=Unset, required=Unset)
          any option. Without a default the option is required; with one it is
          not, unless required= says otherwise.

        Seeding
        - bool: the cell is set right away to the default ("true"/"false",
          case-insensitive; false when omitted).
        - arity 1 with a non-empty default: the cell is set to the converted default.

        Faults
        - InvalidDefaultError when the default does not convert (the option is
          not registered).

        Returns the stored Descriptor.
        """
        if phrase is Unset and descr is Unset:
            if Kind.resolve(kind) is not Kind.BOOL:
                raise TypeError("register() without a phrase declares the help flag and requires a bool kind")
            phrase, descr = HELP, "Prints this help message."
        elif phrase is Unset or descr is Unset:
            raise TypeError("register() requires both a phrase and a help text")

        descriptor = Descriptor(kind, destination, phrase, descr, nargs=nargs, default=default, required=required)

        if descriptor.kind is Kind.BOOL or descriptor.nargs == 1 and descriptor.default:
            try:
                value = descriptor.kind.convert(descriptor.default)
            except ValueError:
                return self.trigger(InvalidDefaultError(
                    "unrecognized default value %r for %s option %r" % (
                        descriptor.default, descriptor.kind.label, descriptor.phrase
                    ),
                    title="invalid default value",
                    code=FaultCode.INVALID_DEFAULT,
                    phrase=descriptor.phrase,
                    default=descriptor.default,
                    expected=descriptor.kind.label,
                    hint="use a literal of type %s as the default%s" % (
                        descriptor.kind.label, " ('true' or 'false')" if descriptor.kind is Kind.BOOL else ""
                    ),
                    docs=getdoc(FaultCode.INVALID_DEFAULT)
                ))
            descriptor._write(value)
            # bool options always hold a legal value, so they count as bound
            descriptor._bound = descriptor.kind is Kind.BOOL

        if descriptor.phrase in self._descriptors:
            logger.debug("option %r redefined", descriptor.phrase)
            self.trigger(RedefinedOptionWarning(
                "option %r was already registered and is replaced" % descriptor.phrase,
                title="redefined option",
                code=FaultCode.REDEFINED_OPTION,
                phrase=descriptor.phrase,
                previous=self._descriptors[descriptor.phrase],
                hint="register each long phrase once",
                docs=getdoc(FaultCode.REDEFINED_OPTION)
            ))

        self._descriptors[descriptor.phrase] = descriptor
        logger.debug("registered %r", descriptor)
        return descriptor

    def _bind(self, descriptor, word, index):
        """
        convert one word for 'descriptor' and write it to the destination.
        """
        try:
            value = descriptor.kind.convert(word)
        except ValueError:
            return self.trigger(ConversionError(
                "error in argument for %r at %s position (expected type %s): %r" % (
                    descriptor.phrase, _ordinal(index), descriptor.kind.label, word
                ),
                title="uncastable value",
                code=FaultCode.UNCASTABLE_VALUE,
                phrase=descriptor.phrase,
                expected=descriptor.kind.label,
                text=word,
                index=index,
                hint="options which expect unbounded arguments should be last",
                docs=getdoc(FaultCode.UNCASTABLE_VALUE)
            ))
        descriptor._write(value)
        logger.debug("bound %r to %r", value, descriptor.phrase)

    def parse(self, words=Unset, /):
        """
        Bind an argument vector (program name excluded) into the destinations.

        phases
        - tokenize: join, rewrite '=', scan words (see bindery.tokens).
        - interpret: alternate between reading an option name and reading
          the value(s) of the last matched option.
          • unknown word in name position → UnknownOptionError.
          • bool option → destination set to True; '--help' returns at once.
          • other option → consume exactly nargs words (or every remaining
            word when unbounded), converting each by kind.
        - validate: the first required option (by phrase) that was not bound
          raises MissingRequiredError. A fixed-arity option cut short by the
          end of input is never bound, so it is reported here as well.
        """
        text = tokens.join(_sanitized(words))
        spans = tokens.scan(text)
        logger.debug("parsing %d word(s) from %r", len(spans), text)

        for descriptor in self._descriptors.values():
            if descriptor.kind is not Kind.BOOL:
                descriptor._bound = False

        descriptor = None  # option whose values are being read
        remaining = 0
        for index, span in enumerate(spans, 1):
            word = tokens.extract(text, span)

            if descriptor is None:
                try:
                    matched = self._descriptors[word]
                except KeyError:
                    return self.trigger(UnknownOptionError(
                        "unrecognized option %r at %s position" % (word, _ordinal(index)),
                        title="unknown option",
                        code=FaultCode.UNKNOWN_OPTION,
                        input=word,
                        index=index,
                        hint="run '%s %s' to see all available options" % (self.prog, HELP),
                        docs=getdoc(FaultCode.UNKNOWN_OPTION)
                    ))
                if matched.kind is Kind.BOOL:
                    matched._write(True)
                    if word == HELP:
                        logger.debug("help requested, skipping validation")
                        return
                    continue
                descriptor, remaining = matched, matched.nargs
                continue

            if descriptor.unbounded and word in self._descriptors:
                self.trigger(SwallowedOptionWarning(
                    "option %r at %s position is read as a value of %r" % (word, _ordinal(index), descriptor.phrase),
                    title="swallowed option",
                    code=FaultCode.SWALLOWED_OPTION,
                    input=word,
                    index=index,
                    phrase=descriptor.phrase,
                    hint="move %r after every other option" % descriptor.phrase,
                    docs=getdoc(FaultCode.SWALLOWED_OPTION)
                ))

            self._bind(descriptor, word, index)

            if descriptor.unbounded:
                # never complete: every further word belongs to this option
                descriptor._bound = True
                continue
            remaining -= 1
            if remaining == 0:
                descriptor._bound = True
                descriptor = None

        self._validate()

    def _validate(self):
        for phrase in self:
            descriptor = self._descriptors[phrase]
            if descriptor.required and not descriptor.bound:
                return self.trigger(MissingRequiredError(
                    "option %r required, and not found, or incomplete" % phrase,
                    title="missing required option",
                    code=FaultCode.MISSING_REQUIRED,
                    phrase=phrase,
                    hint="provide %s" % " ".join([phrase] + ["<%s>" % descriptor.kind.label] * (
                        1 if descriptor.unbounded else descriptor.nargs
                    )),
                    docs=getdoc(FaultCode.MISSING_REQUIRED)
                ))

    def _arity(self, descriptor):
        """
        help line describing how many values an option takes.

        None for bools and for unbounded options (no fixed count to show).
        """
        if descriptor.kind is Kind.BOOL or descriptor.unbounded:
            return None
        return "%d %s of type %s." % (
            descriptor.nargs,
            "argument" if descriptor.nargs == 1 else "arguments",
            descriptor.kind.label,
        )

    def render_help(self):
        """
        Return the help block: one entry per option, in phrase order.

            <phrase>
                <help text>
                <N> argument(s) of type <type>.     (not for bool or unbounded options)
                default: '<default>'                (only when not required)
        """
        details = ""
        for phrase in self:
            descriptor = self._descriptors[phrase]
            details += phrase
            details += "\n    " + descriptor.descr
            if arity := self._arity(descriptor):
                details += "\n    " + arity
            if not descriptor.required:
                details += "\n    default: '%s'" % descriptor.default
            details += "\n"
        return details

    def print_help(self):
        """
        Print the help block with rich, preceded by a synthesized usage line.

        Palette keys
        - usage-label, program-name, option-name, flag-name, metavar,
          argument-description, arity, default, panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any entry.
        - When colorful is False, styling is suppressed.
        """
        console = Console(stderr=self._stderr)
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "option-name": "bold #00E6FF",  # CYAN for options
            "flag-name": "bold #22C55E",  # GREEN for flags
            "metavar": "bold #FFD600",  # AMBER for parameters
            "argument-description": "#9CA3AF",  # Muted gray
            "arity": "italic #A3A3A3",
            "default": "#737373",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__('__main__'), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        usage = Text()
        usage.append("usage", styler("usage-label")).append(": ")
        usage.append(self.prog, styler("program-name"))
        for phrase in self:
            descriptor = self._descriptors[phrase]
            name = Text(phrase, styler("flag-name" if descriptor.kind is Kind.BOOL else "option-name"))
            if descriptor.kind is not Kind.BOOL:
                metavar = Text("<%s>" % descriptor.kind.label, styler("metavar"))
                if descriptor.unbounded:
                    name = Text.assemble(name, " ", metavar, " ...")
                else:
                    name = Text.assemble(name, *((" ", metavar) * descriptor.nargs))
            usage.append(" ").append(name if descriptor.required else Text.assemble("[", name, "]"))

        entries = Text()
        for phrase in self:
            descriptor = self._descriptors[phrase]
            entries.append("\n")
            entries.append(phrase, styler("flag-name" if descriptor.kind is Kind.BOOL else "option-name"))
            entries.append("\n    ").append(descriptor.descr, styler("argument-description"))
            if arity := self._arity(descriptor):
                entries.append("\n    ").append(arity, styler("arity"))
            if not descriptor.required:
                entries.append("\n    ").append("default: '%s'" % descriptor.default, styler("default"))

        renderable = Group(usage, entries)

        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self.prog} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )

        console.print(renderable)


def parse(registry, words=Unset, /):
    """
    Parse 'words' (default: sys.argv[1:]) with the given registry.
    """
    if not isinstance(registry, Registry):
        raise TypeError("parse() first argument must be a registry")
    registry.parse(words)


def render_help(registry, /):
    """
    Return the plain-text help block of the given registry.
    """
    if not isinstance(registry, Registry):
        raise TypeError("render_help() argument must be a registry")
    return registry.render_help()


__all__ = (
    "HELP",
    "Descriptor",
    "Registry",
    "parse",
    "render_help",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports.
del BinderyType
