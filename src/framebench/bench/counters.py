"""Hardware performance counters around a bounded execution window.

``PerfStatCounters`` attaches ``perf stat`` to the harness process with its
events disabled, then switches them on and off through perf's control pipe
so that only the frames of one iteration are counted::

    perf stat -x, -e cycles,instructions -p <pid> -o <file> \
        --delay=-1 --control=fd:<ctl>,<ack>

Each ``enable``/``disable`` waits for perf's ``ack``.  ``read`` stops the
session and parses the CSV output file; ``reset`` discards it so the next
``enable`` starts counting from zero.

There is no fallback: if perf is missing or cannot count an event,
:class:`~framebench.errors.CounterFailure` is raised rather than reporting
made-up numbers.
"""

from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from framebench.errors import CounterFailure

log = logging.getLogger("framebench")


@dataclass(frozen=True)
class CounterReading:
    """Counts accumulated while the counters were enabled."""

    cycles: int
    instructions: int


class CounterGroup:
    """Interface of an exclusive cycles + instructions counter group."""

    def enable(self) -> None:
        raise NotImplementedError

    def disable(self) -> None:
        raise NotImplementedError

    def read(self) -> CounterReading:
        raise NotImplementedError

    def reset(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Release any resources held by the group."""

    def __enter__(self) -> CounterGroup:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# ---------------------------------------------------------------------------
# perf stat output parsing
# ---------------------------------------------------------------------------


def _event_base(event: str) -> str:
    """Reduce ``cpu_core/instructions/`` or ``cycles:u`` to the bare event name."""
    name = event.strip()
    if "/" in name:
        parts = [p for p in name.split("/") if p]
        name = parts[1] if len(parts) > 1 else parts[0]
    return name.split(":")[0]


def parse_perf_csv(text: str, events: tuple[str, ...]) -> dict[str, int]:
    """Parse ``perf stat -x,`` output into ``{event: count}``.

    Lines look like ``123456,,instructions:u,1000,100.00,,``.  Comment and
    blank lines are skipped.  Configured events and output lines are matched
    on their bare event name, so ``cycles:u`` or ``cpu_core/cycles/`` find
    their lines.  Counts for the same event on different PMUs (hybrid CPUs)
    are summed.  The result is keyed by the configured event names.

    Raises:
        CounterFailure: If an event is missing, not supported or not counted.
    """
    targets = {_event_base(e): e for e in events}
    counts = {e: 0 for e in events}
    seen: set[str] = set()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split(",")
        if len(fields) < 3:
            continue
        value = fields[0].strip()
        event = targets.get(_event_base(fields[2]))
        if event is None:
            continue
        if value.startswith("<"):
            raise CounterFailure(f"perf could not count '{fields[2]}': {value}")
        try:
            counts[event] += int(value)
        except ValueError:
            try:
                counts[event] += int(float(value))
            except ValueError as exc:
                raise CounterFailure(f"Unparseable perf count for '{event}': {value!r}") from exc
        seen.add(event)

    missing = [e for e in events if e not in seen]
    if missing:
        raise CounterFailure(f"perf output has no count for: {', '.join(missing)}")
    return counts


# ---------------------------------------------------------------------------
# PerfStatCounters
# ---------------------------------------------------------------------------


class PerfStatCounters(CounterGroup):
    """Counter group backed by a ``perf stat`` session on this process."""

    def __init__(
        self,
        *,
        perf: str = "perf",
        cycles_event: str = "cycles",
        instructions_event: str = "instructions",
        pid: int | None = None,
    ) -> None:
        self.perf = perf
        self.events = (cycles_event, instructions_event)
        self.pid = pid if pid is not None else os.getpid()
        self._proc: subprocess.Popen[str] | None = None
        self._ctl_fd: int | None = None
        self._ack_fd: int | None = None
        self._output: Path | None = None
        self._reading: CounterReading | None = None

    # -- session lifecycle --------------------------------------------------

    def _start(self) -> None:
        binary = shutil.which(self.perf)
        if binary is None:
            raise CounterFailure(
                f"'{self.perf}' not found on PATH; hardware counters are unavailable"
            )

        fd, output = tempfile.mkstemp(prefix="framebench-perf-", suffix=".csv")
        os.close(fd)
        self._output = Path(output)

        ctl_r, ctl_w = os.pipe()
        ack_r, ack_w = os.pipe()
        command = [
            binary,
            "stat",
            "-x,",
            "-e",
            ",".join(self.events),
            "-p",
            str(self.pid),
            "-o",
            output,
            "--delay=-1",
            f"--control=fd:{ctl_r},{ack_w}",
        ]
        log.debug("Starting counter session: %s", " ".join(command))
        try:
            self._proc = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                pass_fds=(ctl_r, ack_w),
            )
        except OSError as exc:
            os.close(ctl_w)
            os.close(ack_r)
            self._discard()
            raise CounterFailure(f"Could not start {binary}: {exc}") from exc
        finally:
            # The child owns these ends now.
            os.close(ctl_r)
            os.close(ack_w)

        self._ctl_fd = ctl_w
        self._ack_fd = ack_r

    def _command(self, command: str) -> None:
        if self._ctl_fd is None or self._ack_fd is None:
            raise CounterFailure(f"No counter session to {command}")
        try:
            os.write(self._ctl_fd, f"{command}\n".encode())
        except OSError as exc:
            raise self._abort(f"perf stat did not accept '{command}': {exc}") from exc

        received = b""
        while b"ack" not in received:
            chunk = os.read(self._ack_fd, 64)
            if not chunk:
                raise self._abort(f"perf stat exited before acknowledging '{command}'")
            received += chunk

    def _stop(self) -> str:
        """Stop perf so it writes its totals; return its stderr."""
        assert self._proc is not None
        if self._proc.poll() is None:
            self._proc.send_signal(signal.SIGINT)
        _, stderr = self._proc.communicate()
        self._close_pipes()
        return stderr or ""

    def _abort(self, message: str) -> CounterFailure:
        stderr = ""
        if self._proc is not None:
            if self._proc.poll() is None:
                self._proc.kill()
            _, stderr = self._proc.communicate()
        self._discard()
        if stderr and stderr.strip():
            message = f"{message}\n\nStderr:\n{stderr.strip()}"
        return CounterFailure(message)

    def _close_pipes(self) -> None:
        for fd in (self._ctl_fd, self._ack_fd):
            if fd is not None:
                try:
                    os.close(fd)
                except OSError:
                    pass
        self._ctl_fd = None
        self._ack_fd = None

    def _discard(self) -> None:
        if self._proc is not None and self._proc.poll() is None:
            self._proc.kill()
            self._proc.communicate()
        self._proc = None
        self._close_pipes()
        if self._output is not None:
            self._output.unlink(missing_ok=True)
            self._output = None

    # -- CounterGroup -------------------------------------------------------

    def enable(self) -> None:
        if self._reading is not None:
            raise CounterFailure("Counters were read; reset() before enabling again")
        if self._proc is None:
            self._start()
        self._command("enable")

    def disable(self) -> None:
        self._command("disable")

    def read(self) -> CounterReading:
        if self._reading is not None:
            return self._reading
        if self._proc is None or self._output is None:
            raise CounterFailure("Counters were never enabled")

        stderr = self._stop()
        try:
            text = self._output.read_text()
        except OSError as exc:
            raise CounterFailure(f"Could not read perf output {self._output}: {exc}") from exc

        try:
            counts = parse_perf_csv(text, self.events)
        except CounterFailure as exc:
            if stderr.strip():
                exc.message = f"{exc.message}\n\nStderr:\n{stderr.strip()}"
            raise
        self._reading = CounterReading(
            cycles=counts[self.events[0]],
            instructions=counts[self.events[1]],
        )
        return self._reading

    def reset(self) -> None:
        self._discard()
        self._reading = None

    def close(self) -> None:
        self.reset()
