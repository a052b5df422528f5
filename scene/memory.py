from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from common.types import vec3
from scene.base import SceneGraph, StatusSink


log = logging.getLogger(__name__)


@dataclass(eq=False)
class SceneNode:
    id: int
    tag: str
    name: str
    is_template: bool = False
    parent: Optional["SceneNode"] = field(default=None, repr=False)
    position: np.ndarray = field(default_factory=vec3)
    euler: np.ndarray = field(default_factory=vec3)
    destroyed: bool = False
    destroy_delay: Optional[float] = None


class InMemoryScene(SceneGraph):
    """
    Headless scene graph.

    Templates are registered up front with add_template(); instantiate() clones
    a node (keeping its tag). Tags listed in `fail_instantiate` make
    instantiate() return None to emulate renderer failures.
    """

    def __init__(self, tags: Optional[List[str]] = None, fail_instantiate: Optional[Set[str]] = None):
        self._ids = itertools.count(1)
        self.nodes: Dict[int, SceneNode] = {}
        self.fail_instantiate: Set[str] = set(fail_instantiate or ())
        self.destroyed: List[Tuple[SceneNode, float]] = []
        for t in tags or ():
            self.add_template(t)

    def add_template(self, tag: str, name: Optional[str] = None) -> SceneNode:
        node = SceneNode(id=next(self._ids), tag=tag, name=name or tag, is_template=True)
        self.nodes[node.id] = node
        return node

    # ----------------------------
    # SceneGraph
    # ----------------------------
    def find_template_by_tag(self, tag: str) -> Optional[SceneNode]:
        live = [n for n in self.nodes.values() if n.tag == tag and not n.destroyed]
        # prefer the authored template over clones
        live.sort(key=lambda n: (not n.is_template, n.id))
        return live[0] if live else None

    def instantiate(self, template: SceneNode) -> Optional[SceneNode]:
        if template.tag in self.fail_instantiate:
            return None
        node = SceneNode(
            id=next(self._ids),
            tag=template.tag,
            name=f"{template.name}(Clone)",
            position=template.position.copy(),
            euler=template.euler.copy(),
        )
        self.nodes[node.id] = node
        return node

    def set_parent(self, child: SceneNode, parent: SceneNode) -> None:
        child.parent = parent

    def set_name(self, node: SceneNode, name: str) -> None:
        node.name = name

    def destroy(self, node: SceneNode, after_delay: float = 0.0) -> None:
        """Destroy `node` and its whole subtree; only `node` is recorded in `destroyed`."""
        pending = [node]
        while pending:
            n = pending.pop()
            pending.extend(self.children_of(n))
            n.destroyed = True
            n.destroy_delay = after_delay
        self.destroyed.append((node, after_delay))
        log.debug("destroy node %s (%s) after %.2fs", node.id, node.name, after_delay)

    def set_position(self, node: SceneNode, position: np.ndarray) -> None:
        node.position = np.asarray(position, dtype=float).copy()

    def set_euler_angles(self, node: SceneNode, angles: np.ndarray) -> None:
        node.euler = np.asarray(angles, dtype=float).copy()

    def get_position(self, node: SceneNode) -> np.ndarray:
        return node.position.copy()

    # ----------------------------
    # Inspection helpers
    # ----------------------------
    def children_of(self, parent: SceneNode) -> List[SceneNode]:
        return [n for n in self.nodes.values() if n.parent is parent and not n.destroyed]

    def find_by_name(self, name: str) -> Optional[SceneNode]:
        for n in self.nodes.values():
            if n.name == name and not n.destroyed:
                return n
        return None


class RecordingStatusSink(StatusSink):
    """Keeps the latest status text plus the history of distinct values."""

    def __init__(self) -> None:
        self.text = ""
        self.history: List[str] = []

    def set_status_text(self, text: str) -> None:
        if text != self.text:
            self.history.append(text)
        self.text = text
