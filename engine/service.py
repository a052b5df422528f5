from __future__ import annotations

"""
Headless simulation of a positioning session.

Runs the acquisition state machine and frame driver against a simulated
device and an in-memory scene, logging every status text change.

Examples:
  # Local descriptor file, device walking north-east at 1 m/s, 20 s at 30 FPS
  python -m engine.service --descriptor-file data/demo.txt --lat 48.137 --lon 11.575 \
      --walk 0.7,0.7 --heading 90 --duration 20

  # Remote descriptor (base_url from config), replayed track
  python -m engine.service --config config/params.yaml --csv data/track.csv --duration 60
"""

import argparse
import threading
from typing import List, Optional, Tuple

from common.config import EngineConfig
from common.logging_setup import get_logger, setup_logging
from common.types import GeoCoordinate
from descriptor.client import DescriptorClient, FileDescriptorSource
from engine.runner import build_session, run_session
from scene.memory import InMemoryScene, RecordingStatusSink
from sensors.base import LocationProvider
from sensors.sim import CSVLocationReplay, SimulatedLocationProvider


log = get_logger("engine.service")


class LoggingStatusSink(RecordingStatusSink):
    def set_status_text(self, text: str) -> None:
        if text != self.text:
            log.info("status", extra={"status": text})
        super().set_status_text(text)


def parse_pair(s: Optional[str]) -> Tuple[float, float]:
    if not s:
        return (0.0, 0.0)
    parts = s.split(",")
    if len(parts) != 2:
        raise ValueError("Expected two comma separated numbers, e.g. 0.5,1.0")
    return (float(parts[0]), float(parts[1]))


def parse_tags(s: str) -> List[str]:
    return [t.strip() for t in s.split(",") if t.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Geo-anchored scene engine — headless simulation")
    ap.add_argument("--config", default=None, help="YAML params file (see config/params.yaml)")

    gsrc = ap.add_mutually_exclusive_group()
    gsrc.add_argument("--url", default=None, help="Descriptor base URL (overrides config)")
    gsrc.add_argument("--descriptor-file", default=None, help="Read the descriptor from a local file")

    gdev = ap.add_mutually_exclusive_group()
    gdev.add_argument("--csv", default=None, help="Replay device track from CSV (lat,lon,heading)")
    gdev.add_argument("--lat", type=float, default=48.137154, help="Synthetic device start latitude")
    ap.add_argument("--lon", type=float, default=11.576124, help="Synthetic device start longitude")
    ap.add_argument("--heading", type=float, default=0.0, help="Synthetic compass heading (deg)")
    ap.add_argument("--heading-rate", type=float, default=0.0, help="Heading drift (deg/s)")
    ap.add_argument("--walk", type=str, default="0,0", help="Synthetic velocity east,north (m/s)")
    ap.add_argument("--jitter", type=str, default="0,0", help="Noise std position_m,heading_deg")
    ap.add_argument("--init-polls", type=int, default=2, help="Status polls before the fix is ready")
    ap.add_argument("--location-disabled", action="store_true", help="Simulate missing permission")

    ap.add_argument("--tags", type=str, default="Target,SpinX,SpinY,SpinZ",
                    help="Template tags present in the simulated scene")
    ap.add_argument("--fps", type=float, default=30.0, help="Frame rate (Hz)")
    ap.add_argument("--duration", type=float, default=10.0, help="Stop after N seconds")
    ap.add_argument("--log-level", default=None)
    ap.add_argument("--log-file", default=None)
    args = ap.parse_args(argv)

    cfg = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()
    setup_logging(args.log_level or cfg.log_level, log_file=args.log_file)
    if args.url:
        cfg.descriptor.base_url = args.url

    sensor: LocationProvider
    if args.csv:
        sensor = CSVLocationReplay(args.csv, rate_hz=1.0)
    else:
        pos_noise, hdg_noise = parse_pair(args.jitter)
        sensor = SimulatedLocationProvider(
            origin=GeoCoordinate(args.lat, args.lon),
            enabled=not args.location_disabled,
            init_polls=args.init_polls,
            velocity_mps=parse_pair(args.walk),
            heading_deg=args.heading,
            heading_rate_dps=args.heading_rate,
            position_noise_m=pos_noise,
            heading_noise_deg=hdg_noise,
        )

    pc = cfg.placement
    scene = InMemoryScene([pc.anchor_tag, pc.wrapper_tag] + parse_tags(args.tags))
    status = LoggingStatusSink()
    fetcher = (
        FileDescriptorSource(args.descriptor_file)
        if args.descriptor_file
        else DescriptorClient.from_config(cfg.descriptor)
    )

    machine, driver = build_session(cfg, sensor, scene, status, fetcher=fetcher)
    stop = threading.Event()
    try:
        state = run_session(machine, driver, frame_hz=args.fps, duration_s=args.duration, stop_event=stop)
    except KeyboardInterrupt:
        stop.set()
        state = machine.state

    if state.failed:
        log.error("Session ended with error: %s", state.fatal_error)
        return 1
    for obj in machine.registry or ():
        x, y, z = (float(v) for v in scene.get_position(obj.scene_handle))
        log.info("object", extra={"object": obj.name, "kind": obj.kind.value, "pos": [x, y, z]})
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
