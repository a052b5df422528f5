from __future__ import annotations

"""
Line-oriented placement descriptor.

Grammar (one command per line, comma separated, whitespace trimmed):

    ShowInfo
    DEL,<tag>
    ABS,<tag>,<name>,<lat>,<lon>,<alt>
    REL,<tag>,<name>,<xOffset>,<zOffset>,<alt>

Blank lines and lines starting with '#' or '//' are ignored. Parsing stops at
the first bad line (DescriptorSyntaxError); there is no recovery.
"""

import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple, Union

from common.errors import DescriptorSyntaxError


SHOW_INFO = "ShowInfo"
DEL = "DEL"
ABS = "ABS"
REL = "REL"

_FIELD_COUNTS = {SHOW_INFO: 1, DEL: 2, ABS: 6, REL: 6}
_COMMENT_PREFIXES = ("#", "//")


@dataclass(frozen=True, slots=True)
class RemoveCommand:
    tag: str
    line: str = ""


@dataclass(frozen=True, slots=True)
class AbsoluteCommand:
    tag: str
    name: str
    lat: float
    lon: float
    alt: float
    line: str = ""


@dataclass(frozen=True, slots=True)
class RelativeCommand:
    tag: str
    name: str
    x: float
    z: float
    alt: float
    line: str = ""


Command = Union[RemoveCommand, AbsoluteCommand, RelativeCommand]


@dataclass
class Descriptor:
    commands: List[Command] = field(default_factory=list)
    show_info: bool = False


def _number(parts: Sequence[str], idx: int, name: str, line: str, line_no: int) -> float:
    token = parts[idx]
    try:
        v = float(token)
    except ValueError:
        raise DescriptorSyntaxError(line, token, field=name, line_no=line_no) from None
    if not math.isfinite(v) or "_" in token:
        raise DescriptorSyntaxError(line, token, field=name, line_no=line_no)
    return v


def _names(parts: Sequence[str], line: str, line_no: int) -> Tuple[str, str]:
    tag, name = parts[1], parts[2]
    if not tag:
        raise DescriptorSyntaxError(line, tag, field="tag", line_no=line_no)
    return tag, name


def parse_line(line: str, line_no: int = 0) -> Union[Command, str, None]:
    """
    Parse one trimmed line. Returns a command, SHOW_INFO for the flag line,
    or None for blank/comment lines.
    """
    if not line or line.startswith(_COMMENT_PREFIXES):
        return None
    parts = [p.strip() for p in line.split(",")]
    cmd = parts[0]
    expected = _FIELD_COUNTS.get(cmd)
    if expected is None:
        raise DescriptorSyntaxError(line, cmd, line_no=line_no)
    if len(parts) != expected:
        raise DescriptorSyntaxError(
            line, f"{cmd} expects {expected} fields, got {len(parts)}", line_no=line_no
        )

    if cmd == SHOW_INFO:
        return SHOW_INFO
    if cmd == DEL:
        if not parts[1]:
            raise DescriptorSyntaxError(line, parts[1], field="tag", line_no=line_no)
        return RemoveCommand(tag=parts[1], line=line)

    tag, name = _names(parts, line, line_no)
    if cmd == ABS:
        return AbsoluteCommand(
            tag=tag,
            name=name,
            lat=_number(parts, 3, "lat", line, line_no),
            lon=_number(parts, 4, "lon", line, line_no),
            alt=_number(parts, 5, "alt", line, line_no),
            line=line,
        )
    return RelativeCommand(
        tag=tag,
        name=name,
        x=_number(parts, 3, "x", line, line_no),
        z=_number(parts, 4, "z", line, line_no),
        alt=_number(parts, 5, "alt", line, line_no),
        line=line,
    )


def parse_descriptor(text: str) -> Descriptor:
    """Parse descriptor text into ordered commands plus the ShowInfo flag."""
    out = Descriptor()
    for line_no, raw in enumerate(text.splitlines(), start=1):
        item = parse_line(raw.strip(), line_no)
        if item is None:
            continue
        if isinstance(item, str):
            out.show_info = True
        else:
            out.commands.append(item)  # type: ignore[arg-type]
    return out
