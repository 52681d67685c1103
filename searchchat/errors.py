"""
searchchat Errors - Exception taxonomy shared by server and client

Every error a route can raise derives from ChatError and carries the HTTP
status it maps to. The server converts them to ``{"error": message}``
bodies in one exception handler.
"""


class ChatError(Exception):
    """Base class for all searchchat errors"""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str = ""):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(ChatError):
    """Raised when the request body is missing or malformed"""

    status_code = 400
    default_message = "message is required"


class MethodNotAllowedError(ChatError):
    """Raised for any non-POST request to the agent endpoint"""

    status_code = 405
    default_message = "Method not allowed"


class ServiceUnavailableError(ChatError):
    """Raised when no agent context is configured"""

    status_code = 503
    default_message = "Not configured"


class AgentError(ChatError):
    """Raised when the agent (model or tool loop) fails"""

    status_code = 500


class SearchError(Exception):
    """Raised when the web search API call fails"""
    pass


class TransportError(Exception):
    """Raised on the client when the network read or write fails"""
    pass


class FrameDecodeError(ValueError):
    """Raised when an SSE payload cannot be decoded"""
    pass
