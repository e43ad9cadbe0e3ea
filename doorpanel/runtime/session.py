# doorpanel/runtime/session.py
from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Optional

from doorpanel.app.config import DoorPanelConfig
from doorpanel.core.errors import HandshakeError, SimulatorConnectError, SimulatorDisconnectedError
from doorpanel.panel.layout import PanelLayout
from doorpanel.panel.translator import Translator
from doorpanel.protocol._internal.rx_worker import RxWorker
from doorpanel.protocol.core import Node, NodeReader
from doorpanel.protocol.errors import ProtocolError
from doorpanel.protocol.handshake import perform_handshake
from doorpanel.transport.base import Transport
from doorpanel.transport.errors import TransportError, TransportOpenError


@dataclass
class PanelSession:
    """
    One connection to the simulator running the panel.

    Responsibilities:
      - open/close the transport
      - HELLO / NEEDED_DATA handshake
      - hand the read side to the RX thread and the write side to the translator
      - translate low-level failures into operator-safe errors
    """

    config: DoorPanelConfig
    layout: PanelLayout
    transport: Transport
    logger: Optional[logging.Logger] = None

    def __post_init__(self) -> None:
        self._log = self.logger or logging.getLogger(__name__)
        self._inbox: "queue.Queue[Optional[Node]]" = queue.Queue()
        self._rx: Optional[RxWorker] = None
        self._translator: Optional[Translator] = None
        self.sim_version: Optional[str] = None

    @property
    def is_started(self) -> bool:
        return self._rx is not None and self._translator is not None

    @property
    def translator(self) -> Translator:
        if self._translator is None:
            raise RuntimeError("PanelSession not started (translator is None)")
        return self._translator

    def start(self) -> None:
        if self.is_started:
            return

        try:
            self.transport.open()
        except TransportOpenError as e:
            self._log.error("TRANSPORT_OPEN_FAILED url=%s error=%s", self.config.url, e)
            raise SimulatorConnectError(
                f"Could not connect to the simulator at {self.config.endpoint}.",
                hint=str(e),
                details={"url": self.config.url},
            ) from None

        reader = NodeReader(self.transport.reader().read)
        writer = self.transport.writer()

        try:
            self.sim_version = perform_handshake(
                reader,
                writer,
                client_name=self.config.client_name,
                client_version=self.config.client_version,
                logger=self._log,
            )
        except (TransportError, ProtocolError) as e:
            self._log.error("HANDSHAKE_FAILED error=%s", e)
            self._close_transport()
            raise HandshakeError(
                "Simulator handshake failed.",
                hint=str(e),
                details={"url": self.config.url},
            ) from None

        self._translator = Translator(self.layout, writer, self._inbox, logger=self._log)
        self._rx = RxWorker(reader, self._inbox, logger=self._log)
        self._rx.start()
        self._log.info("RX_THREAD_STARTED url=%s", self.config.url)

    def run(self) -> None:
        """Translate until the simulator goes away."""
        translator = self.translator
        try:
            translator.run()
        except TransportError as e:
            self._log.error("INPUT_SEND_FAILED error=%s", e)
            raise SimulatorDisconnectedError(
                "Sending inputs to the simulator failed.",
                hint=str(e),
                details={"batches_sent": translator.batches_sent},
            ) from None

        rx_error = self._rx.error if self._rx is not None else None
        if rx_error is not None:
            raise SimulatorDisconnectedError(
                "Connection to the simulator was lost.",
                hint=str(rx_error),
                details={"received": self._rx.received, "batches_sent": translator.batches_sent},
            )

    def stop(self) -> None:
        if self._rx is not None:
            self._rx.stop()
        self._close_transport()
        if self._rx is not None:
            self._rx.join(timeout=1.0)
            self._log.info("RX_THREAD_STOPPED")
            self._rx = None
        self._translator = None

    def _close_transport(self) -> None:
        try:
            self.transport.close()
        except Exception:
            self._log.exception("Failed to close transport")

    def __enter__(self) -> "PanelSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
