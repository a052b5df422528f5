"""
Deterministic stand-ins for time and the fetch executor.
"""

from concurrent.futures import Executor, Future

from common.types import GeoCoordinate


ORIGIN = GeoCoordinate(10.0, 20.0)


class FakeClock:
    def __init__(self, t: float = 1000.0):
        self.t = t

    def __call__(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


class ImmediateExecutor(Executor):
    """Runs submitted work inline and hands back an already-finished future."""

    def submit(self, fn, *args, **kwargs):
        fut = Future()
        try:
            fut.set_result(fn(*args, **kwargs))
        except Exception as e:  # delivered through fut.result()
            fut.set_exception(e)
        return fut


class PendingExecutor(Executor):
    """Keeps futures pending until the test calls finish()."""

    def __init__(self):
        self.calls = []

    def submit(self, fn, *args, **kwargs):
        fut = Future()
        self.calls.append((fn, args, fut))
        return fut

    def finish(self):
        for fn, args, fut in self.calls:
            if fut.cancelled():
                continue
            try:
                fut.set_result(fn(*args))
            except Exception as e:
                fut.set_exception(e)
        self.calls = []
