# doorpanel/protocol/errors.py

class ProtocolError(Exception):
    """Base for protocol-level failures (framing/decode/handshake semantics)."""

class DecodeError(ProtocolError):
    pass

class UnexpectedNode(ProtocolError):
    def __init__(self, expected: str, got: str):
        super().__init__(f"expected {expected}, got {got}")
        self.expected = expected
        self.got = got
