"""
Top-level Cloud Control application.

Builds the bridge once at startup and owns every component:

::

    cluster watch ──► WatchReconciler ──► SlotRegistry ◄── CommandDispatcher ◄── knobs
                              │                                    │
                              ↓                                    ↓
                        LedProjector ──► LaunchControl LEDs   orchestrator.scale()

The registry is the only state the two threads share.
"""

import logging
import threading
from typing import Optional

from cloudcontrol.cluster import ClusterOrchestrator, create_orchestrator
from cloudcontrol.core import CommandDispatcher, SlotRegistry, WatchReconciler
from cloudcontrol.devices.launchcontrol import Channel, LaunchControlController
from cloudcontrol.exceptions import ErrorContext
from cloudcontrol.led import LedProjector
from cloudcontrol.models import AppConfig, ChannelName

logger = logging.getLogger(__name__)


def device_channel(name: ChannelName) -> Channel:
    """Map a configured channel name to the device channel."""
    return Channel.FACTORY if name == ChannelName.FACTORY else Channel.USER


class CloudControlApp:
    """
    Bridges one Launch Control to one cluster namespace.

    Components are created in dependency order in the constructor, started
    by start() and torn down by shutdown(): LEDs off first, then the watch,
    the scale worker and the MIDI ports.
    """

    def __init__(
        self,
        config: AppConfig,
        orchestrator: Optional[ClusterOrchestrator] = None,
        controller: Optional[LaunchControlController] = None,
    ):
        """
        Initialize the application.

        Args:
            config: Application configuration
            orchestrator: Cluster to drive (default: built from config.cluster)
            controller: Device controller (default: built from config.midi)
        """
        self.config = config
        primary = device_channel(config.primary_channel)

        self.orchestrator = orchestrator or create_orchestrator(config.cluster)
        self.registry = SlotRegistry()
        self.controller = controller or LaunchControlController.for_pattern(
            config.midi.device_pattern, config.midi.poll_interval
        )
        self.projector = LedProjector(self.controller.output, primary)
        self.reconciler = WatchReconciler(
            self.orchestrator,
            self.registry,
            self.projector,
            reconnect_interval=config.cluster.reconnect_interval,
        )
        self.dispatcher = CommandDispatcher(
            self.registry,
            self.orchestrator,
            primary_channel=primary,
            scale_factor=config.scale_factor,
        )

        # Handlers run in registration order
        self.controller.add_input_handler(self.projector.on_input)
        self.controller.add_input_handler(self.dispatcher.dispatch)
        self.controller.add_connection_handler(self._on_device_connection)

        self._stop_event = threading.Event()
        self._started = False

    def start(self) -> None:
        """Start the device, the scale worker and the cluster watch."""
        if self._started:
            return

        logger.info(
            f"Starting Cloud Control: {self.orchestrator.name} namespace "
            f"{self.orchestrator.namespace}, primary channel {self.config.primary_channel.value}"
        )
        self.controller.start()
        self.dispatcher.start()
        self.reconciler.start()
        self._started = True

    def run_forever(self) -> None:
        """Start and block until request_stop() or Ctrl+C, then shut down."""
        self.start()
        try:
            while not self._stop_event.wait(0.5):
                pass
        finally:
            self.shutdown()

    def request_stop(self) -> None:
        self._stop_event.set()

    def shutdown(self) -> None:
        """Turn the LEDs off, then stop listening."""
        if not self._started:
            return
        self._started = False
        logger.info("Shutting down Cloud Control")

        with ErrorContext("reset LEDs", logger, re_raise=False):
            self.projector.shutdown()
        with ErrorContext("stop cluster watch", logger, re_raise=False):
            self.reconciler.stop()
        with ErrorContext("stop scale worker", logger, re_raise=False):
            self.dispatcher.stop()
        with ErrorContext("stop MIDI", logger, re_raise=False):
            self.controller.stop()
        with ErrorContext("close cluster client", logger, re_raise=False):
            self.orchestrator.close()

    def _on_device_connection(self, connected: bool) -> None:
        """Repaint everything when the device (re)appears."""
        if not connected:
            return
        with self.projector.paint_lock:
            self.projector.initialize()
            self.projector.refresh_all(self.registry)
