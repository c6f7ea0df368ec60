"""
Application errors for clean transport and protocol error handling.

TransportError subclasses map to an HTTP status on the submission endpoint.
ProtocolError subclasses carry a JSON-RPC error code and are written onto the
session's event stream. RetrievalError is raised by the web collaborators and
never leaves the search service: it is turned into a user-facing string there.
"""


class TransportError(Exception):
    """Raised when a submission cannot be routed to a session."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingSessionError(TransportError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Missing sessionId")


class SessionNotFoundError(TransportError):
    status_code = 404

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Session not found or expired")


class UnsupportedMethodError(TransportError):
    status_code = 501

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__("Method not supported in bridge mode")


class ProtocolError(Exception):
    """JSON-RPC level error, delivered as an error object on the stream."""

    code: int = -32000

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ToolNotFoundError(ProtocolError):
    code = -32601

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__("Tool not found")


class InvalidParamsError(ProtocolError):
    code = -32602


class RetrievalError(Exception):
    """Raised when a search or page-read provider is misconfigured or returns an error."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
