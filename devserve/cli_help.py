"""Renders usage text from structured help sections."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from devserve.log import BLUE, BOLD, CYAN, DIM, GREEN, MAGENTA, RED, RESET, paint

PAD = "  "
PAD_OPTION = " "


@dataclass
class HelpFlag:
    name: str
    description: str


@dataclass
class HelpArgument:
    name: str
    type: str
    description: str
    default: str


@dataclass
class HelpPositional:
    name: str
    position: int
    type: str
    description: str
    default: str


@dataclass
class HelpExample:
    description: str
    options: Optional[str] = None


@dataclass
class HelpSections:
    description: str = ""
    positional: List[HelpPositional] = field(default_factory=list)
    arguments: List[HelpArgument] = field(default_factory=list)
    flags: List[HelpFlag] = field(default_factory=list)
    examples: List[HelpExample] = field(default_factory=list)


def header(title: str, colour: str = "") -> str:
    return colour + BOLD + title + ":" + RESET + "\n"


def build_usage(program: str, sections: HelpSections) -> str:
    usage = BOLD + "Usage: " + RESET + program
    for pos in sections.positional:
        usage += " [" + paint(pos.name, CYAN) + "]"
    if sections.flags:
        usage += " [" + paint("Flags...", GREEN) + "]"
    if sections.arguments:
        usage += " [" + paint("Arguments...", MAGENTA) + "]"
    return usage


def _build_valued(title: str, colour: str, items) -> str:
    if not items:
        return ""
    width = max(len(item.name) + len(item.type) + 3 for item in items)
    lines = []
    for item in items:
        name_arg = f"{item.name} <{item.type}>"
        line = colour + PAD_OPTION + "-" + name_arg.ljust(width) + RESET
        line += PAD + item.description + paint(f" (default: {item.default})", DIM)
        lines.append(line)
    return header(title, colour) + "\n".join(lines)


def build_positional(items: List[HelpPositional]) -> str:
    return _build_valued("Positional", CYAN, items)


def build_arguments(items: List[HelpArgument]) -> str:
    return _build_valued("Arguments", MAGENTA, items)


def build_flags(items: List[HelpFlag]) -> str:
    flags = list(items)
    if not any(flag.name == "help" for flag in flags):
        flags.append(HelpFlag("help", "Prints this message"))
    width = max(len(flag.name) for flag in flags)
    lines = [
        GREEN + PAD_OPTION + "-" + flag.name.ljust(width) + RESET + PAD + flag.description
        for flag in flags
    ]
    return header("Flags", GREEN) + "\n".join(lines)


def build_examples(items: List[HelpExample], program: str) -> str:
    if not items:
        return ""
    blocks = []
    for example in items:
        command = f"$ {program} {example.options}" if example.options else f"$ {program}"
        blocks.append(PAD + example.description + "\n" + PAD + paint(command, DIM))
    return header("Examples", BLUE) + "\n\n".join(blocks)


def build_help_message(program: str, sections: HelpSections) -> str:
    parts = [
        build_usage(program, sections),
        sections.description.strip(),
        build_positional(sections.positional),
        build_arguments(sections.arguments),
        build_flags(sections.flags),
        build_examples(sections.examples, program),
    ]
    return "\n\n".join(part for part in parts if part) + "\n"


def format_error(message: str) -> str:
    return paint("Error:", RED, BOLD) + " " + paint(message, RED) + "\n\n"
