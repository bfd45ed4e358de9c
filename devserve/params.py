"""Declarative command line parameters for the development server.

``PARAMS`` is the single source for both parsing and the generated help text.
"""
from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from devserve.cli_help import (
    HelpArgument,
    HelpExample,
    HelpFlag,
    HelpPositional,
    HelpSections,
    build_help_message,
    format_error,
)
from devserve.errors import ConfigurationError, HelpRequested

PROGRAM = "devserve"

STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
KINDS = (STRING, NUMBER, BOOLEAN)

HELP_PATTERN = re.compile(r"^--?h(e(lp?)?)?$", re.IGNORECASE)
FLAG_PATTERN = re.compile(r"^--?(?P<name>[^-].*)$")
TRUTHY_PATTERN = re.compile(r"^(tr?u?e?|ye?s?|1|on)$", re.IGNORECASE)

Validator = Callable[[object], bool]


@dataclass(frozen=True)
class ParamDefinition:
    key: str
    kind: str
    description: str
    default: object = None
    aliases: Tuple[str, ...] = ()
    position: Optional[int] = None
    validate: Optional[Validator] = None

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"Unknown parameter kind for '{self.key}': {self.kind}")
        if bool(self.aliases) == (self.position is not None):
            raise ValueError(f"Parameter '{self.key}' needs either aliases or a position")

    @property
    def is_positional(self) -> bool:
        return self.position is not None

    def matches(self, name: str) -> bool:
        return name.lower() in (alias.lower() for alias in self.aliases)


def is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_port(value: object) -> bool:
    return is_integer(value) and 0 < value < 65536


def is_non_empty(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


PARAMS: Tuple[ParamDefinition, ...] = (
    ParamDefinition(
        key="port",
        kind=NUMBER,
        aliases=("port", "p"),
        default=8080,
        validate=is_port,
        description="Port number to listen at",
    ),
    ParamDefinition(
        key="host",
        kind=STRING,
        aliases=("host",),
        default="127.0.0.1",
        validate=is_non_empty,
        description="Interface to bind",
    ),
    ParamDefinition(
        key="verbose",
        kind=BOOLEAN,
        aliases=("verbose", "v"),
        default=False,
        description="Print debug messages",
    ),
    ParamDefinition(
        key="watch",
        kind=BOOLEAN,
        aliases=("watch", "w"),
        default=False,
        description="Reload page on source file change",
    ),
    ParamDefinition(
        key="spa",
        kind=BOOLEAN,
        aliases=("spa", "s"),
        default=False,
        description="Serve index.html for paths that do not exist",
    ),
    ParamDefinition(
        key="open",
        kind=BOOLEAN,
        aliases=("open", "o"),
        default=False,
        description="Open the served page in a browser",
    ),
    ParamDefinition(
        key="dirpath",
        kind=STRING,
        position=0,
        default=".",
        description="Path to the directory to serve",
    ),
)

DESCRIPTION = "A static server with development functionality"

EXAMPLES = [
    HelpExample("Serve the directory the script is called from"),
    HelpExample("Serve www/ on port 3000 and reload on change", "-p 3000 www -watch"),
]


@dataclass(frozen=True)
class Configuration:
    dirpath: str = "."
    port: int = 8080
    verbose: bool = False
    watch: bool = False
    host: str = "127.0.0.1"
    spa: bool = False
    open: bool = False

    @classmethod
    def from_values(cls, values: Dict[str, object]) -> "Configuration":
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in values.items() if key in names})


def _to_number(raw: str) -> float | int:
    try:
        value = float(raw)
    except ValueError:
        return math.nan
    if value.is_integer():
        return int(value)
    return value


def convert_value(definition: ParamDefinition, raw: str) -> object:
    if definition.kind == NUMBER:
        return _to_number(raw)
    if definition.kind == BOOLEAN:
        return bool(TRUTHY_PATTERN.match(raw))
    return raw


def parse_args(argv: Sequence[str], definitions: Sequence[ParamDefinition] = PARAMS) -> Dict[str, object]:
    """Turn ``argv`` into a mapping of parameter key to value.

    Raises HelpRequested for a help flag and ConfigurationError for anything
    unknown, incomplete or rejected by a validator.
    """
    values: Dict[str, object] = {d.key: d.default for d in definitions}
    position = 0
    index = 0
    while index < len(argv):
        token = argv[index]
        if HELP_PATTERN.match(token):
            raise HelpRequested()

        definition = None
        flag = FLAG_PATTERN.match(token)
        if flag:
            name = flag.group("name")
            definition = next((d for d in definitions if d.aliases and d.matches(name)), None)
            if definition is None:
                raise ConfigurationError(f"Unknown argument: '{token}'")
            if definition.kind == BOOLEAN:
                raw = token
                value: object = True
            else:
                index += 1
                if index >= len(argv):
                    raise ConfigurationError(
                        f"Missing value for argument '{definition.key}'", definition.key
                    )
                raw = argv[index]
                value = convert_value(definition, raw)
        else:
            definition = next((d for d in definitions if d.position == position), None)
            if definition is None:
                raise ConfigurationError(f"Unknown argument: '{token}'")
            raw = token
            value = convert_value(definition, raw)
            position += 1

        if definition.validate is not None and not definition.validate(value):
            raise ConfigurationError(
                f"Invalid value for argument '{definition.key}': '{raw}'", definition.key
            )
        values[definition.key] = value
        index += 1
    return values


def build_help_sections(definitions: Sequence[ParamDefinition] = PARAMS) -> HelpSections:
    sections = HelpSections(description=DESCRIPTION, examples=list(EXAMPLES))
    for definition in definitions:
        if definition.is_positional:
            sections.positional.append(
                HelpPositional(
                    name=definition.key.upper(),
                    position=definition.position,
                    type=definition.kind,
                    description=definition.description,
                    default=str(definition.default),
                )
            )
        elif definition.kind == BOOLEAN:
            sections.flags.append(HelpFlag(definition.aliases[0], definition.description))
        else:
            sections.arguments.append(
                HelpArgument(
                    name=definition.aliases[0],
                    type=definition.kind,
                    description=definition.description,
                    default=str(definition.default),
                )
            )
    sections.positional.sort(key=lambda item: item.position)
    return sections


def help_text(definitions: Sequence[ParamDefinition] = PARAMS, program: str = PROGRAM) -> str:
    return build_help_message(program, build_help_sections(definitions))


def print_help(error: Optional[str] = None, definitions: Sequence[ParamDefinition] = PARAMS, stream=None) -> None:
    stream = stream or sys.stderr
    if error:
        stream.write(format_error(error))
    stream.write(help_text(definitions))


def parse_or_exit(argv: Optional[List[str]] = None, definitions: Sequence[ParamDefinition] = PARAMS) -> Configuration:
    if argv is None:
        argv = sys.argv[1:]
    try:
        values = parse_args(argv, definitions)
    except HelpRequested:
        print_help(definitions=definitions)
        raise SystemExit(0)
    except ConfigurationError as exc:
        print_help(str(exc), definitions)
        raise SystemExit(1)
    return Configuration.from_values(values)
