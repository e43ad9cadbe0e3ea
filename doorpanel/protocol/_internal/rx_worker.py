# doorpanel/protocol/_internal/rx_worker.py
from __future__ import annotations

import logging
import queue
import threading
from typing import Optional

from doorpanel.protocol.core import Node, NodeReader
from doorpanel.protocol.errors import ProtocolError
from doorpanel.transport.errors import TransportError

# Put on the inbox once the receiver is done; nothing follows it.
END_OF_INPUT = None


class RxWorker(threading.Thread):
    """
    Thread that reads simulator nodes and queues them in arrival order.

    Ends on the first receive failure without retrying and closes the inbox
    with END_OF_INPUT.
    """

    def __init__(
        self,
        reader: NodeReader,
        inbox: "queue.Queue[Optional[Node]]",
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(name="doorpanel-rx", daemon=True)
        self.reader = reader
        self.inbox = inbox
        self.error: Optional[BaseException] = None
        self.received = 0
        self._log = logger or logging.getLogger(__name__)
        self._stop_event = threading.Event()

    def run(self) -> None:
        try:
            while not self._stop_event.is_set():
                node = self.reader.read_node()
                self.inbox.put(node)
                self.received += 1
        except (TransportError, ProtocolError) as e:
            self._finish(e)
        except Exception as e:
            if self._stop_event.is_set():
                self._finish(e)
            else:
                self._log.exception("RX_WORKER_EXCEPTION received=%d", self.received)
                self.error = e
        finally:
            self.inbox.put(END_OF_INPUT)

    def _finish(self, e: BaseException) -> None:
        if self._stop_event.is_set():
            # connection closed under us on purpose
            self._log.debug("RX_STOPPED received=%d reason=%s", self.received, e)
            return
        self.error = e
        self._log.error("RX_FAILED received=%d error=%s", self.received, e)

    def stop(self) -> None:
        """Mark the coming read failure as requested. The caller closes the connection."""
        self._stop_event.set()
