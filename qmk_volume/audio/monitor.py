"""
PipeWire monitor running the audio event loop
"""

import codecs
import os
import shlex
import signal
import subprocess
from typing import List, Optional, Sequence, Union

from gi.repository import GLib
from loguru import logger

from .bus import EventBus
from .dump import DumpDecoder

DEFAULT_COMMAND = ["pw-dump", "--monitor", "--no-colors"]
READ_SIZE = 65536


class PipeWireMonitor:
    """Feeds pw-dump --monitor output into an EventBus from a GLib main loop

    Everything dispatched from here runs on the thread calling run().
    """

    def __init__(self, bus: EventBus, command: Union[str, Sequence[str], None] = None):
        self.bus = bus
        if command is None:
            command = DEFAULT_COMMAND
        elif isinstance(command, str):
            command = shlex.split(command)
        self.command: List[str] = list(command)

        self.mainloop = GLib.MainLoop()
        self.process: Optional[subprocess.Popen] = None
        self._decoder = DumpDecoder()
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._sources: List[int] = []
        self._watch: Optional[int] = None

    def _setup_signal_handlers(self):
        """Quit the loop on SIGINT and SIGTERM"""
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._sources.append(
                GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signum, self._on_signal, signum)
            )

    def _on_signal(self, signum) -> bool:
        logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        self.quit()
        return GLib.SOURCE_CONTINUE

    def _spawn(self) -> None:
        logger.debug(f"Starting {' '.join(self.command)}")
        try:
            self.process = subprocess.Popen(
                self.command,
                stdout=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise Exception(f"{self.command[0]} not found in PATH") from e
        os.set_blocking(self.process.stdout.fileno(), False)
        self._watch = GLib.io_add_watch(
            self.process.stdout.fileno(),
            GLib.PRIORITY_DEFAULT,
            GLib.IOCondition.IN | GLib.IOCondition.HUP | GLib.IOCondition.ERR,
            self._on_output,
        )
        self._sources.append(self._watch)

    def _on_output(self, fd, condition) -> bool:
        if condition & GLib.IOCondition.IN:
            try:
                chunk = os.read(fd, READ_SIZE)
            except BlockingIOError:
                return GLib.SOURCE_CONTINUE
            if chunk:
                self.feed(self._utf8.decode(chunk))
                return GLib.SOURCE_CONTINUE

        logger.error(f"{self.command[0]} exited, stopping")
        self._sources.remove(self._watch)
        self._watch = None
        self.quit()
        return GLib.SOURCE_REMOVE

    def feed(self, text: str) -> None:
        """Decode dump output and dispatch every complete object"""
        for obj in self._decoder.feed(text):
            self.bus.dispatch(obj)

    def run(self) -> None:
        """Run until a termination signal arrives or pw-dump goes away"""
        self._setup_signal_handlers()
        try:
            self._spawn()
            logger.info("Listening for PipeWire volume changes")
            self.mainloop.run()
        finally:
            self._cleanup()

    def quit(self) -> None:
        if self.mainloop.is_running():
            self.mainloop.quit()

    def _cleanup(self) -> None:
        for source_id in self._sources:
            GLib.source_remove(source_id)
        self._sources.clear()

        if self.process and self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self.process.kill()
        if self.process and self.process.stdout:
            self.process.stdout.close()
        logger.info("PipeWire monitor stopped")
