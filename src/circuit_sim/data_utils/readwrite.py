"""
Trajectory sinks and file utilities.
"""

import logging
import os
from typing import List, Optional, Sequence, TextIO, Tuple

import numpy as np
import jax.numpy as jnp
from jax import Array

logger = logging.getLogger(__name__)

ROW_FORMAT = "%13.6e"


def format_row(t: float, y: Array) -> str:
    """Format one sample as fixed-width scientific columns: t, then y."""
    values = [float(t)] + [float(v) for v in np.ravel(np.asarray(y))]
    return " ".join(ROW_FORMAT % v for v in values)


class TrajectoryWriter:
    """
    Write (t, y) samples to a whitespace-separated text file.

    The first line is a `#` header naming the columns; every sample becomes
    one row formatted with `%13.6e`. Rows are flushed as they are written so
    that the file stays valid if the run aborts part way through.

    Usable as a sink: `writer(t, y)`.

    Example:
        ```python
        with TrajectoryWriter("rc-be.dat", columns=("v1", "v2")) as writer:
            solve_ivp(problem, (0.0, 1.5e-2), y0, method, 1e-5, sink=writer)
        ```
    """

    def __init__(self, path: str, columns: Sequence[str] = ("x",)):
        self.path = path
        self.columns = tuple(columns)
        self.rows_written = 0
        self._file: Optional[TextIO] = None

    def open(self) -> "TrajectoryWriter":
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._file = open(self.path, "w", encoding="utf-8")
        self._file.write("# t  " + "  ".join(self.columns) + "\n")
        logger.debug(f"Opened trajectory file: {self.path}")
        return self

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.info(f"Wrote {self.rows_written} samples to: {self.path}")

    def __enter__(self) -> "TrajectoryWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __call__(self, t: float, y: Array):
        if self._file is None:
            raise RuntimeError("TrajectoryWriter is not open")
        y = np.atleast_1d(np.asarray(y))
        if y.size != len(self.columns):
            raise ValueError(
                f"Expected {len(self.columns)} state components, got {y.size}"
            )
        self._file.write(format_row(t, y) + "\n")
        self._file.flush()
        self.rows_written += 1


class TrajectoryRecorder:
    """In-memory sink keeping every (t, y) sample."""

    def __init__(self):
        self.times: List[float] = []
        self.states: List[Array] = []

    def __call__(self, t: float, y: Array):
        self.times.append(float(t))
        self.states.append(y)

    def __len__(self) -> int:
        return len(self.times)

    def as_arrays(self) -> Tuple[Array, Array]:
        """Return (t, y) with shapes (n,) and (n, dim)."""
        return jnp.asarray(self.times), jnp.stack(self.states, axis=0)


def read_trajectory(path: str) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read a file written by TrajectoryWriter.

    Returns:
        t: Times, shape (n,)
        y: States, shape (n, dim)
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Trajectory file not found: {path}")
    data = np.loadtxt(path, comments="#", ndmin=2)
    return data[:, 0], data[:, 1:]


def save_trajectory(
    save_path: str,
    t: Array,
    y: Array,
    metadata: Optional[dict] = None
):
    """
    Save a trajectory to an NPZ file with metadata.

    Args:
        save_path: Path to save the NPZ file
        t: Times, shape (n,)
        y: States, shape (n, dim)
        metadata: Additional metadata (run configuration, problem parameters)
    """
    directory = os.path.dirname(save_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    # Convert JAX arrays to NumPy
    save_data = {"t": np.asarray(t), "y": np.asarray(y)}

    if metadata:
        for key, value in metadata.items():
            save_data[f"meta_{key}"] = value

    np.savez_compressed(save_path, **save_data)
    logger.info(f"Trajectory saved to: {save_path}")


def load_trajectory(
    file_path: str, convert_to_jax: bool = True
) -> Tuple[Array, Array, dict]:
    """
    Load a trajectory from an NPZ file.

    Args:
        file_path: Path to the NPZ file
        convert_to_jax: Whether to convert arrays to JAX arrays (default: True)

    Returns:
        Tuple of (t, y, metadata); metadata has the 'meta_' prefix removed
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Trajectory file not found: {file_path}")

    metadata = {}
    with np.load(file_path) as data:
        t = data["t"]
        y = data["y"]
        for key in data.files:
            if key.startswith("meta_"):
                value = data[key]
                metadata[key[5:]] = value.item() if value.ndim == 0 else value

    if convert_to_jax:
        t, y = jnp.asarray(t), jnp.asarray(y)

    logger.info(f"Trajectory loaded from: {file_path} ({t.shape[0]} samples)")
    return t, y, metadata
