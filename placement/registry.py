from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from common.errors import InstantiationError, UnresolvedTagError
from common.geo import distance_m
from common.types import (
    AbsolutePlacement,
    GeoCoordinate,
    Handle,
    PlacedObject,
    Placement,
    RelativePlacement,
    SessionState,
    vec3,
)
from descriptor.parser import AbsoluteCommand, Command, RelativeCommand, RemoveCommand
from placement.updater import absolute_target
from scene.base import SceneGraph


log = logging.getLogger(__name__)


class ObjectRegistry:
    """
    Owns the live placed objects of a session.

    Each object is a wrapper node (parented under the scene anchor, positioned
    and oriented by the engine) holding a clone of the tagged template.
    Absolute objects farther than `inclusion_radius_m` from the session's
    original coordinate are dropped at placement time and never reconsidered.
    """

    def __init__(
        self,
        scene: SceneGraph,
        state: SessionState,
        *,
        anchor: Handle,
        wrapper_template: Handle,
        inclusion_radius_m: float = 250.0,
        remove_delay_s: float = 0.1,
    ):
        self.scene = scene
        self.state = state
        self.anchor = anchor
        self.wrapper_template = wrapper_template
        self.inclusion_radius_m = float(inclusion_radius_m)
        self.remove_delay_s = float(remove_delay_s)
        self._objects: List[PlacedObject] = []

    # ----------------------------
    # Collection access
    # ----------------------------
    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[PlacedObject]:
        return iter(self._objects)

    @property
    def objects(self) -> List[PlacedObject]:
        return list(self._objects)

    def absolute_objects(self) -> List[PlacedObject]:
        return [o for o in self._objects if o.is_absolute]

    @property
    def last(self) -> Optional[PlacedObject]:
        return self._objects[-1] if self._objects else None

    # ----------------------------
    # Commands
    # ----------------------------
    def _origin(self) -> GeoCoordinate:
        if self.state.original_coordinate is None:
            raise RuntimeError("original coordinate not captured yet")
        return self.state.original_coordinate

    def _template(self, tag: str, line: str) -> Handle:
        template = self.scene.find_template_by_tag(tag)
        if template is None:
            raise UnresolvedTagError(tag, line)
        return template

    def _instantiate(self, tag: str, name: str, template: Handle, placement: Placement, line: str) -> PlacedObject:
        wrapper = self.scene.instantiate(self.wrapper_template)
        if wrapper is None:
            raise InstantiationError("Instantiate(wrapper) failed")
        self.scene.set_parent(wrapper, self.anchor)

        node = self.scene.instantiate(template)
        if node is None:
            raise InstantiationError(f"Instantiate({tag}) failed")
        self.scene.set_parent(node, wrapper)
        self.scene.set_name(node, name)

        obj = PlacedObject(
            tag=tag,
            name=name,
            scene_handle=wrapper,
            content_handle=node,
            placement=placement,
            raw_text=line,
        )
        self._objects.append(obj)
        return obj

    def apply_absolute(
        self, tag: str, name: str, lat: float, lon: float, alt: float, line: str = ""
    ) -> Optional[PlacedObject]:
        """
        Place an object at a geo-coordinate. A zero lat or lon means "the
        device's coordinate at session start" for that axis. Returns None when
        the object lies outside the inclusion radius.
        """
        template = self._template(tag, line)
        origin = self._origin()
        geo = GeoCoordinate(
            origin.latitude if lat == 0.0 else lat,
            origin.longitude if lon == 0.0 else lon,
        )
        d = distance_m(geo.latitude, geo.longitude, origin.latitude, origin.longitude)
        if d > self.inclusion_radius_m:
            log.info(
                "Skipping %s: %.1f m from origin exceeds %.0f m",
                name, d, self.inclusion_radius_m,
                extra={"tag": tag},
            )
            return None

        placement = AbsolutePlacement(geo=geo, altitude=float(alt))
        obj = self._instantiate(tag, name, template, placement, line)
        # start at the target seen from the origin rather than sweeping in from (0,0,0)
        obj.target_position = absolute_target(placement, self.state.current_coordinate or origin)
        self.scene.set_position(obj.scene_handle, obj.target_position)
        log.info("Placed absolute %s at %.1f m", name, d, extra={"tag": tag})
        return obj

    def apply_relative(self, tag: str, name: str, x: float, z: float, alt: float, line: str = "") -> PlacedObject:
        """Place an object at a fixed offset from the scene origin; it never moves afterwards."""
        template = self._template(tag, line)
        placement = RelativePlacement(x=float(x), z=float(z), altitude=float(alt))
        obj = self._instantiate(tag, name, template, placement, line)
        obj.target_position = vec3(placement.x, placement.altitude, placement.z)
        self.scene.set_position(obj.scene_handle, obj.target_position)
        log.info("Placed relative %s", name, extra={"tag": tag})
        return obj

    def remove_by_tag(self, tag: str, line: str = "") -> int:
        """
        Destroy every placed object carrying `tag`; if none is placed, destroy
        the scene node found by that tag. Returns the number of nodes destroyed.
        """
        placed = [o for o in self._objects if o.tag == tag]
        if placed:
            for o in placed:
                self.scene.destroy(o.scene_handle, self.remove_delay_s)
            self._objects = [o for o in self._objects if o.tag != tag]
            log.info("Removed %d placed object(s)", len(placed), extra={"tag": tag})
            return len(placed)

        node = self.scene.find_template_by_tag(tag)
        if node is None:
            raise UnresolvedTagError(tag, line)
        self.scene.destroy(node, self.remove_delay_s)
        log.info("Removed scene node", extra={"tag": tag})
        return 1

    def apply(self, commands: Iterable[Command]) -> int:
        """
        Apply commands in order. The first failure propagates and the
        remaining commands are not applied. Returns the number of live objects.
        """
        for cmd in commands:
            if isinstance(cmd, AbsoluteCommand):
                self.apply_absolute(cmd.tag, cmd.name, cmd.lat, cmd.lon, cmd.alt, cmd.line)
            elif isinstance(cmd, RelativeCommand):
                self.apply_relative(cmd.tag, cmd.name, cmd.x, cmd.z, cmd.alt, cmd.line)
            elif isinstance(cmd, RemoveCommand):
                self.remove_by_tag(cmd.tag, cmd.line)
            else:
                raise TypeError(f"unknown command {cmd!r}")
        return len(self._objects)
