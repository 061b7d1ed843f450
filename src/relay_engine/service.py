"""Relay service

Wires settings into clients, the training pipeline, the dispatcher and one
poller per tracked event type, then runs until SIGINT/SIGTERM.
"""

import logging
import signal
import threading
from typing import List, Optional

from . import db
from .compute import ComputeClient
from .config import Settings
from .handlers import JOB_CREATED, JobCreatedHandler
from .health import HealthServer, HealthState
from .ledger import CompletionSubmitter, Ed25519Signer, Registry, fullnode_client
from .pipeline import TrainingPipeline, create_dispatcher
from .poller import EventPoller, EventTracker, module_filter

logger = logging.getLogger(__name__)


class RelayService:
    """Polling loops, pipeline and health endpoint of one relay process"""

    def __init__(self, settings: Settings, health: Optional[HealthState] = None):
        self.settings = settings
        self.health = health or HealthState()
        self.stop_event = threading.Event()
        self.pollers: List[EventPoller] = []
        self.health_server: Optional[HealthServer] = None

        ledger = settings.LEDGER
        if not ledger.admin_private_key:
            raise ValueError("Operator private key is not configured (LEDGER.admin_private_key)")

        self.client = fullnode_client(ledger)
        self.compute = ComputeClient(settings.COMPUTE.url, timeout=settings.COMPUTE.timeout)
        signer = Ed25519Signer.from_base64(ledger.admin_private_key)
        logger.info(f"Operator address {signer.address}")

        self.pipeline = TrainingPipeline(
            Registry.from_settings(self.client, ledger),
            self.compute,
            CompletionSubmitter.from_settings(self.client, signer, ledger),
        )
        self.dispatcher = create_dispatcher(self.pipeline, settings.DISPATCHER.workers)

    def trackers(self) -> List[EventTracker]:
        ledger = self.settings.LEDGER
        return [
            EventTracker(
                type=JOB_CREATED,
                filter=module_filter(ledger.package_id, ledger.module),
                callback=JobCreatedHandler(self.dispatcher),
            ),
        ]

    def start(self) -> None:
        if self.settings.HEALTH.enabled:
            self.health_server = HealthServer(
                self.health, self.settings.HEALTH.host, self.settings.HEALTH.port,
            )
            self.health_server.start()

        try:
            self.dispatcher.start()
            for tracker in self.trackers():
                poller = EventPoller(
                    self.client,
                    tracker,
                    interval=self.settings.POLLER.interval,
                    page_size=self.settings.POLLER.page_size,
                    stop_event=self.stop_event,
                )
                poller.start()
                self.pollers.append(poller)
            self.health.mark_healthy()
            logger.info(f"Started {len(self.pollers)} event listeners")
        except Exception as e:
            logger.exception("Failed to start listeners")
            self.health.mark_failed(str(e))

    def stop(self) -> None:
        self.stop_event.set()
        for poller in self.pollers:
            poller.stop(timeout=self.settings.POLLER.interval + 1)
        self.dispatcher.stop(timeout=self.settings.DISPATCHER.shutdown_timeout)
        if self.health_server is not None:
            self.health_server.stop()
        self.compute.close()
        self.client.close()

    def run_forever(self) -> None:
        """Start, then block until SIGINT or SIGTERM"""
        def _shutdown(signum, frame):
            logger.info(f"{signal.Signals(signum).name} received, shutting down")
            self.stop_event.set()

        signal.signal(signal.SIGINT, _shutdown)
        signal.signal(signal.SIGTERM, _shutdown)

        self.start()
        while not self.stop_event.wait(1.0):
            pass
        self.stop()
        logger.info("Relay engine stopped")


def run(settings: Settings) -> None:
    db.init_db(**settings.DATABASE.bind_kwargs())
    logger.info("Relay Engine started")
    RelayService(settings).run_forever()
