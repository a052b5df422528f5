"""
Rendering collaborator protocol.

The engine only holds opaque handles and issues explicit commands; node
lifetime and drawing stay with the renderer.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import numpy as np

Handle = Any


class SceneGraph(ABC):

    @abstractmethod
    def find_template_by_tag(self, tag: str) -> Optional[Handle]:
        """Return a live node carrying `tag`, or None."""

    @abstractmethod
    def instantiate(self, template: Handle) -> Optional[Handle]:
        """Clone `template`; None when the renderer cannot create the node."""

    @abstractmethod
    def set_parent(self, child: Handle, parent: Handle) -> None:
        ...

    @abstractmethod
    def set_name(self, node: Handle, name: str) -> None:
        ...

    @abstractmethod
    def destroy(self, node: Handle, after_delay: float = 0.0) -> None:
        ...

    @abstractmethod
    def set_position(self, node: Handle, position: np.ndarray) -> None:
        ...

    @abstractmethod
    def set_euler_angles(self, node: Handle, angles: np.ndarray) -> None:
        ...

    @abstractmethod
    def get_position(self, node: Handle) -> np.ndarray:
        ...


class StatusSink(ABC):

    @abstractmethod
    def set_status_text(self, text: str) -> None:
        ...
