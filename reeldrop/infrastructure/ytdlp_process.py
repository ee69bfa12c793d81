"""
yt-dlp Process Handle

Owned handle on one running extraction tool process: stdout is consumed as
an ordered line iterator by the caller, stderr is drained by a background
thread, and wait() resolves with the exit code.
"""

import logging
import os
import subprocess
import threading
from collections import deque
from typing import Callable, Iterator, List, Optional, Sequence

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 20


class ToolProcess:
    """
    Child process wrapper exposing two line streams and an exit status.

    Lines are decoded as UTF-8 with replacement; universal newlines turn the
    tool's carriage-return progress updates into separate lines.
    """

    def __init__(self, popen: subprocess.Popen):
        self._popen = popen
        self._stderr_tail: deque = deque(maxlen=STDERR_TAIL_LINES)
        self._stderr_thread: Optional[threading.Thread] = None
        self._timer: Optional[threading.Timer] = None
        self.timed_out = False

    @classmethod
    def spawn(cls, argv: Sequence[str]) -> "ToolProcess":
        """
        Start the tool.

        Raises:
            OSError: If the executable cannot be started
        """
        env = dict(os.environ)
        env.setdefault("PYTHONIOENCODING", "utf-8")
        popen = subprocess.Popen(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            env=env,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )
        logger.debug(f"Spawned pid {popen.pid}: {' '.join(argv)}")
        return cls(popen)

    @property
    def pid(self) -> int:
        return self._popen.pid

    @property
    def stderr_tail(self) -> List[str]:
        return list(self._stderr_tail)

    @property
    def last_stderr_line(self) -> Optional[str]:
        return self._stderr_tail[-1] if self._stderr_tail else None

    def stdout_lines(self) -> Iterator[str]:
        """Yield stdout lines in emission order until the stream closes."""
        stream = self._popen.stdout
        if stream is None:
            return
        for raw_line in iter(stream.readline, ""):
            line = raw_line.rstrip("\r\n")
            if line:
                yield line

    def start_stderr_drain(self, handler: Callable[[str], None]) -> None:
        """Forward every stderr line to handler from a daemon thread."""

        def _drain():
            stream = self._popen.stderr
            if stream is None:
                return
            for raw_line in iter(stream.readline, ""):
                line = raw_line.rstrip("\r\n")
                if not line:
                    continue
                self._stderr_tail.append(line)
                try:
                    handler(line)
                except Exception:
                    logger.exception("stderr handler failed")

        self._stderr_thread = threading.Thread(
            target=_drain, name=f"yt-dlp-stderr-{self.pid}", daemon=True
        )
        self._stderr_thread.start()

    def kill_after(self, timeout: float) -> None:
        """Kill the process if it is still running after timeout seconds."""

        def _expire():
            if self._popen.poll() is None:
                self.timed_out = True
                logger.warning(f"yt-dlp pid {self.pid} exceeded {timeout:g}s, killing")
                self.kill()

        self._timer = threading.Timer(timeout, _expire)
        self._timer.daemon = True
        self._timer.start()

    def kill(self) -> None:
        if self._popen.poll() is None:
            self._popen.kill()

    def wait(self) -> int:
        """Reap the process, join the stderr reader and close the pipes."""
        try:
            code = self._popen.wait()
        finally:
            if self._timer is not None:
                self._timer.cancel()
        if self._stderr_thread is not None:
            self._stderr_thread.join(timeout=5)
        for stream in (self._popen.stdout, self._popen.stderr):
            if stream is not None:
                stream.close()
        return code
