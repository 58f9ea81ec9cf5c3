"""
File line source for the tlm2api daemon.

Tails a telemetry log file (``log.txt`` by default) and hands every complete
line to the line processor. The file is read in binary mode so that partial
lines and multi-byte characters split across writes are buffered until their
newline arrives. Each line has a trailing ``\\n`` and then a trailing ``\\r``
removed before decoding; undecodable bytes are replaced.

The source survives the usual life of a log file: it waits for a missing file
to appear, starts over when the file is truncated, and reopens it when it is
replaced (log rotation).
"""

import asyncio
import functools
import logging
import os
from typing import BinaryIO, Callable, List, Optional

from tlm_daemon.feature_base import DISABLED, HEALTHY, Feature
from tlm_daemon.line_processing import process_line
from tlm_daemon.metrics import SOURCE_ERRORS

logger = logging.getLogger(__name__)

WAITING = "waiting"
ERROR = "error"


class LineSourceFeature(Feature):
    """
    Feature that tails a file and feeds its lines to process_line.

    Config keys (see tlm_daemon.config.get_line_source_config):
        path, poll_interval, from_start, encoding
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handler: Optional[Callable[[str], object]] = None
        self._file: Optional[BinaryIO] = None
        self._inode: Optional[int] = None
        self._partial = b""
        self._skip_existing = not self.config.get("from_start", False)
        self._last_status = WAITING
        self.last_error: Optional[str] = None
        self.lines_read = 0

    @property
    def path(self) -> str:
        return self.config["path"]

    @property
    def health(self) -> str:
        if not self.enabled:
            return DISABLED
        return self._last_status

    async def startup(self):
        if not self.enabled:
            return
        self._loop = asyncio.get_running_loop()
        self._handler = functools.partial(process_line, source=self.path, loop=self._loop)
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(f"Line source started tailing {self.path}")

    async def shutdown(self):
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._close()
        logger.info(f"Line source stopped tailing {self.path}")

    async def _poll_loop(self):
        interval = self.config.get("poll_interval", 0.1)
        while True:
            try:
                for line in self.read_new_lines():
                    self._handler(line)
            except Exception as e:
                SOURCE_ERRORS.inc()
                logger.error(f"Error processing telemetry source {self.path}: {e}")
                self._set_status(ERROR, str(e))
            else:
                if self._file is not None:
                    self._set_status(HEALTHY)
            await asyncio.sleep(interval)

    def _set_status(self, status: str, error: Optional[str] = None):
        self.last_error = error
        if status == self._last_status:
            return
        self._last_status = status
        logger.info(f"Line source {self.path} is now {status}")
        if self._loop and self._loop.is_running():
            from tlm_daemon.websocket import broadcast_features_status

            self._loop.create_task(broadcast_features_status())

    def _open(self) -> bool:
        try:
            f = open(self.path, "rb")
        except FileNotFoundError:
            # A file that appears later is read from its beginning.
            self._skip_existing = False
            self._set_status(WAITING)
            return False
        except OSError as e:
            SOURCE_ERRORS.inc()
            logger.error(f"Cannot open telemetry source {self.path}: {e}")
            self._set_status(ERROR, str(e))
            return False

        if self._skip_existing:
            f.seek(0, os.SEEK_END)
            self._skip_existing = False
        self._file = f
        self._inode = os.fstat(f.fileno()).st_ino
        self._partial = b""
        self._set_status(HEALTHY)
        return True

    def _close(self):
        if self._file is not None:
            self._file.close()
        self._file = None
        self._inode = None
        self._partial = b""

    def _replaced(self) -> bool:
        try:
            return os.stat(self.path).st_ino != self._inode
        except FileNotFoundError:
            # Rotated away and not recreated yet; keep draining the old file.
            return False

    def _decode(self, raw: bytes) -> str:
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode(self.config.get("encoding", "utf-8"), errors="replace")

    def _split_lines(self, chunk: bytes) -> List[str]:
        parts = (self._partial + chunk).split(b"\n")
        self._partial = parts.pop()
        return [self._decode(raw) for raw in parts]

    def read_new_lines(self) -> List[str]:
        """
        Reads whatever was appended since the last call.

        Returns:
            Complete lines with their terminators removed. A trailing partial
            line is kept back until its newline is written, or until the file
            is replaced, in which case it is returned as the last line.
        """
        if self._file is None and not self._open():
            return []

        try:
            if os.fstat(self._file.fileno()).st_size < self._file.tell():
                logger.warning(f"Telemetry source {self.path} was truncated; reading from start.")
                self._file.seek(0)
                self._partial = b""
            chunk = self._file.read()
            lines = self._split_lines(chunk) if chunk else []
            if not chunk and self._replaced():
                logger.info(f"Telemetry source {self.path} was replaced; reopening.")
                # The old file will not grow any more; its unterminated tail is a line.
                if self._partial:
                    lines.append(self._decode(self._partial))
                self._close()
        except OSError as e:
            SOURCE_ERRORS.inc()
            logger.error(f"Error reading telemetry source {self.path}: {e}")
            self._close()
            self._set_status(ERROR, str(e))
            return []

        self.lines_read += len(lines)
        return lines
