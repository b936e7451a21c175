"""Workload simulations exercised by the benchmark harness.

A workload artifact is a Python module file that defines ``WORKLOAD``, a
:class:`Simulation` subclass.  The bundled ones live next to this file.
"""

from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

from framebench.workloads.base import Simulation, Sprite

__all__ = ["BUNDLED_WORKLOADS", "Simulation", "Sprite", "bundled_path", "load_workload"]

BUNDLED_WORKLOADS = ("asteroids", "breakout")

_HERE = Path(__file__).resolve().parent


def bundled_path(name: str) -> Path | None:
    """Source file of a bundled workload, or None if there is no such workload."""
    if name not in BUNDLED_WORKLOADS:
        return None
    return _HERE / f"{name}.py"


def load_workload(path: Path, name: str) -> type[Simulation]:
    """Import the workload module at *path* and return its ``WORKLOAD`` class.

    Raises:
        ImportError: If the module cannot be loaded.
        TypeError: If it has no ``WORKLOAD`` or it is not a Simulation.
    """
    spec = importlib.util.spec_from_file_location(f"framebench_workload_{name}", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load workload module from {path}")
    module = importlib.util.module_from_spec(spec)
    # dataclasses resolve annotations through sys.modules while the body runs.
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(spec.name, None)
        raise

    workload = getattr(module, "WORKLOAD", None)
    if not (isinstance(workload, type) and issubclass(workload, Simulation)):
        raise TypeError(f"{path} does not define WORKLOAD as a Simulation subclass")
    return workload
