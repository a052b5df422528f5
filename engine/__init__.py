"""
Engine — session control and per-frame positioning

- AcquisitionStateMachine: permission -> sensor init -> descriptor fetch ->
  placement -> steady-state ticks (Failed is terminal)
- OrientationSmoother: compass low-pass filter and heading lock-in
- FrameDriver: per-frame interpolation, orientation and status text
- run_session / build_session: cooperative scheduler and wiring

Entry point:
    python -m engine.service --descriptor-file data/demo.txt --duration 20
"""
from .acquisition import AcquisitionStateMachine, Phase
from .frame import FrameDriver
from .orientation import OrientationSmoother

__all__ = ["AcquisitionStateMachine", "FrameDriver", "OrientationSmoother", "Phase"]
