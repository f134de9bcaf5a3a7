"""Runtime services (telemetry) shared by the state containers."""

from . import telemetry

__all__ = ["telemetry"]
