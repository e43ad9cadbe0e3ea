# doorpanel/panel/translator.py
from __future__ import annotations

import logging
import queue
from typing import List, Optional, Protocol as TypingProtocol

from doorpanel.protocol._internal.rx_worker import END_OF_INPUT
from doorpanel.protocol.commands import input_batch
from doorpanel.protocol.core import Node, encode_node

from .layout import PanelLayout
from .state import PanelState
from .transition import transition


class Writer(TypingProtocol):
    def write(self, data: bytes) -> int: ...


class Translator:
    """
    Consumes simulator messages in order and answers each with at most one input batch.

    Sole owner of the panel state and of the connection's write side.
    """

    def __init__(
        self,
        layout: PanelLayout,
        writer: Writer,
        inbox: "queue.Queue[Optional[Node]]",
        logger: Optional[logging.Logger] = None,
    ):
        self.layout = layout
        self.state: Optional[PanelState] = None
        self.batches_sent = 0
        self._writer = writer
        self._inbox = inbox
        self._log = logger or logging.getLogger(__name__)

    def run(self) -> None:
        """Process messages until the receiver closes the inbox. Write errors propagate."""
        while True:
            node = self._inbox.get()
            if node is END_OF_INPUT:
                self._log.info("TRANSLATOR_INPUT_CLOSED batches_sent=%d", self.batches_sent)
                return
            self.handle(node)

    def handle(self, node: Node) -> List[Node]:
        self.state, inputs = transition(self.state, node, self.layout)
        if inputs:
            raw = encode_node(input_batch(inputs))
            self._writer.write(raw)
            self.batches_sent += 1
            self._log.debug("INPUT_BATCH_SENT count=%d len=%d", len(inputs), len(raw))
        return inputs
