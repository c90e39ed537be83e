"""Runtime services shared by every layer of the engine."""

from . import telemetry

__all__ = ["telemetry"]
