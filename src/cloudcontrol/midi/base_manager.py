"""Base MIDI port manager with hot-plug support."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, TypeVar

import mido

logger = logging.getLogger(__name__)

PortType = TypeVar('PortType', bound=mido.ports.BasePort)

ConnectionCallback = Callable[[bool, Optional[str]], None]


class BaseMidiManager(ABC, Generic[PortType]):
    """
    Keeps one MIDI port open for a device that may come and go.

    A daemon thread polls the available port names, opens the first one
    accepted by the device filter and closes it again when it disappears.
    Subclasses provide the direction-specific port operations.
    """

    def __init__(self, device_filter: Callable[[str], bool], poll_interval: float = 2.0):
        """
        Initialize MIDI manager.

        Args:
            device_filter: Returns True if a port name belongs to the device
            poll_interval: How often to check for device changes (seconds)
        """
        self._device_filter = device_filter
        self._poll_interval = poll_interval
        self._stop_event = threading.Event()
        self._monitor_thread: Optional[threading.Thread] = None
        self._port: Optional[PortType] = None
        self._port_lock = threading.Lock()
        self._no_device_warned = False
        self._on_connection_changed: Optional[ConnectionCallback] = None

    @property
    @abstractmethod
    def direction(self) -> str:
        """'input' or 'output', used in log messages."""

    @abstractmethod
    def _get_available_ports(self) -> list[str]:
        """List the port names currently offered by the MIDI backend."""

    @abstractmethod
    def _open_port(self, port_name: str) -> PortType:
        """Open the named port."""

    def on_connection_changed(self, callback: ConnectionCallback) -> None:
        """
        Register callback for connection state changes.

        Args:
            callback: Receives (is_connected, port_name)
        """
        self._on_connection_changed = callback

    def start(self) -> None:
        """Start monitoring for the device."""
        if self._monitor_thread and self._monitor_thread.is_alive():
            logger.warning(f"MIDI {self.direction} manager is already running")
            return

        self._stop_event.clear()
        self._monitor_thread = threading.Thread(
            target=self._monitor_devices, name=f"midi-{self.direction}", daemon=True
        )
        self._monitor_thread.start()
        logger.debug(f"MIDI {self.direction} manager started")

    def stop(self) -> None:
        """Stop monitoring and close the port."""
        self._stop_event.set()

        with self._port_lock:
            self._close_port()

        if self._monitor_thread and self._monitor_thread.is_alive():
            self._monitor_thread.join(timeout=1.0)

        logger.debug(f"MIDI {self.direction} manager stopped")

    def poll(self) -> None:
        """
        Run a single device check (what the monitor thread does each interval).

        Connection callbacks run on the calling thread, in order, after the
        port lock is released.
        """
        changes: list[tuple[bool, Optional[str]]] = []
        try:
            self._check_port(changes)
        finally:
            for connected, port_name in changes:
                self._fire_connection_changed(connected, port_name)

    def _check_port(self, changes: list[tuple[bool, Optional[str]]]) -> None:
        available_ports = set(self._get_available_ports())

        with self._port_lock:
            if self._port and self._port.name not in available_ports:
                logger.warning(f"MIDI {self.direction} disconnected: {self._port.name}")
                self._close_port()
                self._no_device_warned = False
                changes.append((False, None))

            if self._port:
                return

            matching = sorted(p for p in available_ports if self._device_filter(p))
            if not matching:
                if not self._no_device_warned:
                    logger.warning(f"No matching MIDI {self.direction} device found")
                    self._no_device_warned = True
                return

            port_name = matching[0]
            try:
                self._port = self._open_port(port_name)
            except Exception as e:
                logger.error(f"Failed to open MIDI {self.direction} {port_name}: {e}")
                self._port = None
                return

            logger.info(f"Connected to MIDI {self.direction}: {port_name}")
            changes.append((True, port_name))

    def _monitor_devices(self) -> None:
        """Poll until stopped."""
        logger.debug(f"Starting MIDI {self.direction} device monitoring")

        while not self._stop_event.is_set():
            try:
                self.poll()
            except Exception as e:
                logger.error(f"Error in MIDI {self.direction} monitoring: {e}")
            self._stop_event.wait(self._poll_interval)

    def _close_port(self) -> None:
        """Close the current port. Call with _port_lock held."""
        if not self._port:
            return
        try:
            self._port.close()
        except Exception as e:
            logger.error(f"Error closing MIDI {self.direction} port: {e}")
        self._port = None

    def _fire_connection_changed(self, connected: bool, port_name: Optional[str]) -> None:
        """Run the connection callback. Call without _port_lock held."""
        callback = self._on_connection_changed
        if not callback:
            return
        try:
            callback(connected, port_name)
        except Exception as e:
            logger.error(f"Error in MIDI connection callback: {e}")

    @property
    def is_connected(self) -> bool:
        """Check if the device port is currently open."""
        with self._port_lock:
            return self._port is not None

    @property
    def current_port(self) -> Optional[str]:
        """Get currently connected port name."""
        with self._port_lock:
            return self._port.name if self._port else None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
