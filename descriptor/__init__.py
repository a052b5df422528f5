"""
Descriptor — which objects to place, and where

- parser.py: line protocol (ShowInfo / DEL / ABS / REL) -> commands
- client.py: HTTP fetch of the descriptor text for the device's location
"""
from .parser import (
    AbsoluteCommand,
    Descriptor,
    RelativeCommand,
    RemoveCommand,
    parse_descriptor,
)

__all__ = [
    "AbsoluteCommand",
    "Descriptor",
    "RelativeCommand",
    "RemoveCommand",
    "parse_descriptor",
]
