"""Trajectory output utilities."""

from .readwrite import (
    TrajectoryWriter,
    TrajectoryRecorder,
    format_row,
    read_trajectory,
    save_trajectory,
    load_trajectory,
)

__all__ = [
    # Sinks
    "TrajectoryWriter",
    "TrajectoryRecorder",
    "format_row",

    # File I/O
    "read_trajectory",
    "save_trajectory",
    "load_trajectory",
]
