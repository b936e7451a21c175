"""Error kinds raised by the benchmark pipeline.

Every error carries the benchmark it concerns (when known) and the phase it
was raised in, so a fatal diagnostic can be understood without re-running::

    [asteroids] build: Could not compile workload (exit 2)

    Stdout:
    ...

    Stderr:
    ...

Build, execution, counter and persistence failures are fatal to the whole
invocation.  ``UndefinedStatistic`` is recovered per report panel.
``RenderFailure`` is fatal once rendering has begun.
"""

from __future__ import annotations


class BenchError(Exception):
    """Base class for all framebench failures."""

    phase = "bench"

    def __init__(self, message: str, *, benchmark: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.benchmark = benchmark

    def __str__(self) -> str:
        where = f"[{self.benchmark}] " if self.benchmark else ""
        return f"{where}{self.phase}: {self.message}"


class BuildFailure(BenchError):
    """The workload artifact could not be produced."""

    phase = "build"

    def __init__(
        self,
        message: str,
        *,
        benchmark: str | None = None,
        stdout: str = "",
        stderr: str = "",
        returncode: int | None = None,
    ) -> None:
        super().__init__(message, benchmark=benchmark)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode

    def __str__(self) -> str:
        text = super().__str__()
        if self.returncode is not None:
            text += f" (exit {self.returncode})"
        for header, body in (("Stdout:", self.stdout), ("Stderr:", self.stderr)):
            if body.strip():
                text += f"\n\n{header}\n{body.strip()}"
        return text


class ExecutionFailure(BenchError):
    """The workload could not be loaded, started or driven to completion."""

    phase = "execute"


class CounterFailure(BenchError):
    """Hardware counters could not be enabled, disabled or read."""

    phase = "counters"


class PersistenceFailure(BenchError):
    """A metrics record could not be read, parsed or written."""

    phase = "persist"


class RenderFailure(BenchError):
    """The report image could not be laid out or written."""

    phase = "render"


class UndefinedStatistic(BenchError, ArithmeticError):
    """A statistic has no defined value, e.g. a delta against a zero mean."""

    phase = "stats"
