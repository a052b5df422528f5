from __future__ import annotations

"""
Engine configuration.

Loaded from a YAML file shaped like config/params.yaml. Every key is optional;
unknown keys are ignored so one params file can carry other tools' settings.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from common.utils import clamp


def _default_device_id() -> str:
    return f"{uuid.getnode():012x}"


@dataclass
class DescriptorConfig:
    base_url: str = "http://www.mission-base.com/arvos/ArvosVun.txt"
    channel: str = "arvosvun"
    device_id: str = field(default_factory=_default_device_id)
    timeout_s: float = 10.0
    version: int = 1


@dataclass
class SensorConfig:
    desired_accuracy_m: float = 1.0
    update_distance_m: float = 0.1
    poll_interval_s: float = 1.0
    max_poll_attempts: int = 30


@dataclass
class PlacementConfig:
    inclusion_radius_m: float = 250.0
    remove_delay_s: float = 0.1
    anchor_tag: str = "SceneAnchor"
    wrapper_tag: str = "Wrapper"


@dataclass
class OrientationConfig:
    smoothing_divisor: float = 20.0
    smoothing_fps_fraction: Optional[float] = None
    camera_init_s: float = 3.0

    def __post_init__(self) -> None:
        # lock-in window is kept inside the 2..5 s range
        self.camera_init_s = clamp(float(self.camera_init_s), 2.0, 5.0)
        if self.smoothing_divisor < 1.0:
            raise ValueError("orientation.smoothing_divisor must be >= 1")


@dataclass
class FrameConfig:
    lerp_rate: float = 0.5
    default_fps: float = 30.0
    fps_window: int = 30


@dataclass
class EngineConfig:
    descriptor: DescriptorConfig = field(default_factory=DescriptorConfig)
    sensor: SensorConfig = field(default_factory=SensorConfig)
    placement: PlacementConfig = field(default_factory=PlacementConfig)
    orientation: OrientationConfig = field(default_factory=OrientationConfig)
    frame: FrameConfig = field(default_factory=FrameConfig)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, P: Optional[Dict[str, Any]]) -> "EngineConfig":
        P = P or {}

        def section(name: str, klass):
            raw = P.get(name) or {}
            known = {k: v for k, v in raw.items() if k in klass.__dataclass_fields__}
            return klass(**known)

        return cls(
            descriptor=section("descriptor", DescriptorConfig),
            sensor=section("sensor", SensorConfig),
            placement=section("placement", PlacementConfig),
            orientation=section("orientation", OrientationConfig),
            frame=section("frame", FrameConfig),
            log_level=str((P.get("logging") or {}).get("level", "INFO")),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "EngineConfig":
        with open(path, "r") as f:
            return cls.from_dict(yaml.safe_load(f))
