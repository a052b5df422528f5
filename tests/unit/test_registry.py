"""
Unit tests for ObjectRegistry
"""

import pytest
import os
import sys

import numpy as np

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import InstantiationError, UnresolvedTagError
from common.geo import distance_m
from common.types import GeoCoordinate, PlacementKind, SessionState
from descriptor.parser import parse_descriptor
from placement.registry import ObjectRegistry
from scene.memory import InMemoryScene
from sensors.sim import offset_coordinate

ORIGIN = GeoCoordinate(10.0, 20.0)

@pytest.fixture
def scene():
    return InMemoryScene(["SceneAnchor", "Wrapper", "Target", "Foo"])

@pytest.fixture
def registry(scene):
    state = SessionState(original_coordinate=ORIGIN, current_coordinate=ORIGIN)
    return ObjectRegistry(
        scene,
        state,
        anchor=scene.find_template_by_tag("SceneAnchor"),
        wrapper_template=scene.find_template_by_tag("Wrapper"),
    )

class TestApplyAbsolute:
    """Test cases for absolute placement"""

    def test_places_wrapper_and_object(self, registry, scene):
        obj = registry.apply_absolute("Target", "Obj1", 10.0005, 20.0, 2.0, "ABS,Target,Obj1,10.0005,20,2")

        assert obj is not None
        assert obj.kind is PlacementKind.ABSOLUTE
        assert obj.scene_handle.parent is registry.anchor
        assert obj.content_handle.parent is obj.scene_handle
        assert obj.content_handle.name == "Obj1"
        assert obj.raw_text.startswith("ABS")
        assert len(registry) == 1
        # initial position is the target seen from the origin
        assert obj.target_position[1] == 2.0
        assert obj.target_position[2] == pytest.approx(distance_m(10.0005, 20.0, 10.0, 20.0))
        np.testing.assert_allclose(scene.get_position(obj.scene_handle), obj.target_position)

    def test_zero_fields_use_original_coordinate(self, registry):
        obj = registry.apply_absolute("Target", "Here", 0.0, 0.0, 0.0)
        assert obj.placement.geo == ORIGIN
        np.testing.assert_allclose(obj.target_position, [0.0, 0.0, 0.0])

    def test_zero_latitude_only(self, registry):
        obj = registry.apply_absolute("Target", "East", 0.0, 20.001, 0.0)
        assert obj.placement.geo.latitude == ORIGIN.latitude
        assert obj.placement.geo.longitude == 20.001
        assert obj.target_position[0] > 0
        assert obj.target_position[2] == 0.0

    @pytest.mark.parametrize("meters,kept", [(0.0, True), (249.0, True), (251.0, False), (5000.0, False)])
    def test_inclusion_radius(self, registry, meters, kept):
        geo = offset_coordinate(ORIGIN, 0.0, meters)
        obj = registry.apply_absolute("Target", "T", geo.latitude, geo.longitude, 0.0)
        assert (obj is not None) == kept
        assert len(registry) == (1 if kept else 0)

    def test_excluded_object_creates_no_nodes(self, registry, scene):
        before = len(scene.nodes)
        registry.apply_absolute("Target", "Far", 11.0, 21.0, 0.0)
        assert len(scene.nodes) == before

    def test_unknown_tag(self, registry):
        with pytest.raises(UnresolvedTagError) as ei:
            registry.apply_absolute("Nope", "X", 0.0, 0.0, 0.0, "ABS,Nope,X,0,0,0")
        assert ei.value.tag == "Nope"
        assert "Nope" in str(ei.value)

    def test_unknown_tag_checked_before_distance(self, registry):
        with pytest.raises(UnresolvedTagError):
            registry.apply_absolute("Nope", "X", 50.0, 50.0, 0.0)

    def test_instantiation_failure(self, scene, registry):
        scene.fail_instantiate.add("Target")
        with pytest.raises(InstantiationError):
            registry.apply_absolute("Target", "X", 0.0, 0.0, 0.0)

    def test_wrapper_instantiation_failure(self, scene, registry):
        scene.fail_instantiate.add("Wrapper")
        with pytest.raises(InstantiationError, match="wrapper"):
            registry.apply_relative("Target", "X", 1.0, 1.0, 0.0)

class TestApplyRelative:
    """Test cases for relative placement"""

    def test_fixed_target(self, registry, scene):
        obj = registry.apply_relative("Foo", "Bar", 1.0, 2.0, 3.0)
        assert obj.kind is PlacementKind.RELATIVE
        np.testing.assert_allclose(obj.target_position, [1.0, 3.0, 2.0])
        np.testing.assert_allclose(scene.get_position(obj.scene_handle), [1.0, 3.0, 2.0])

    def test_no_distance_filter(self, registry):
        obj = registry.apply_relative("Foo", "Far", 10000.0, 10000.0, 0.0)
        assert obj is not None
        assert registry.absolute_objects() == []

class TestRemoveByTag:
    """Test cases for remove_by_tag"""

    def test_removes_placed_objects(self, registry, scene):
        a = registry.apply_relative("Foo", "A", 1.0, 1.0, 0.0)
        registry.apply_relative("Target", "B", 1.0, 1.0, 0.0)
        assert registry.remove_by_tag("Foo") == 1
        assert [o.name for o in registry] == ["B"]
        assert a.scene_handle.destroyed
        node, delay = scene.destroyed[-1]
        assert node is a.scene_handle
        assert delay == 0.1

    def test_removal_destroys_content_node(self, registry, scene):
        a = registry.apply_relative("Foo", "A", 1.0, 1.0, 0.0)
        registry.remove_by_tag("Foo")
        assert a.content_handle.destroyed
        assert scene.find_by_name("A") is None
        assert scene.find_template_by_tag("Foo").is_template

    def test_tag_unresolved_after_template_removed(self, registry):
        cmds = parse_descriptor("REL,Foo,A,1,1,0\nDEL,Foo\nDEL,Foo\nREL,Foo,B,1,1,0").commands
        with pytest.raises(UnresolvedTagError):
            registry.apply(cmds)
        assert len(registry) == 0

    def test_removes_template_when_nothing_placed(self, registry, scene):
        template = scene.find_template_by_tag("Foo")
        assert registry.remove_by_tag("Foo") == 1
        assert template.destroyed
        assert scene.find_template_by_tag("Foo") is None

    def test_unknown_tag(self, registry):
        with pytest.raises(UnresolvedTagError):
            registry.remove_by_tag("Missing", "DEL,Missing")

class TestApplyCommands:
    """Test cases for ObjectRegistry.apply"""

    def test_applies_in_order(self, registry):
        d = parse_descriptor("REL,Foo,A,1,1,0\nABS,Target,B,0,0,0\nABS,Target,Far,45,45,0")
        assert registry.apply(d.commands) == 2
        assert [o.name for o in registry] == ["A", "B"]
        assert registry.last.name == "B"

    def test_remove_failure_halts_processing(self, registry):
        d = parse_descriptor("REL,Foo,A,1,1,0\nDEL,Missing\nREL,Foo,C,1,1,0")
        with pytest.raises(UnresolvedTagError):
            registry.apply(d.commands)
        assert [o.name for o in registry] == ["A"]

    def test_requires_original_coordinate(self, scene):
        reg = ObjectRegistry(
            scene,
            SessionState(),
            anchor=scene.find_template_by_tag("SceneAnchor"),
            wrapper_template=scene.find_template_by_tag("Wrapper"),
        )
        with pytest.raises(RuntimeError):
            reg.apply_absolute("Target", "X", 0.0, 0.0, 0.0)
