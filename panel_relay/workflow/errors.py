"""Error kinds raised inside the relay and turned into responses at its boundary."""

from typing import Optional

PROHIBITED_CONTENT = "PROHIBITED_CONTENT"

class RelayError(Exception):
    """Base class for failures that map onto a fixed HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

class MethodNotAllowed(RelayError):
    status_code = 405

    def __init__(self, method: Optional[str] = None):
        super().__init__("Method Not Allowed")
        self.method = method

class MissingCredential(RelayError):
    status_code = 500

    def __init__(self):
        super().__init__("API key is not configured on the server.")

class InvalidTarget(RelayError):
    status_code = 400

    def __init__(self, target: Optional[str] = None):
        super().__init__("Invalid API target specified.")
        self.target = target

class InvalidRequest(RelayError):
    status_code = 400

class MalformedRequestBody(RelayError):
    status_code = 500

class UpstreamFailure(RelayError):
    """The generate-content call failed; carries the upstream status when known."""
    status_code = 500

class ContentProhibited(RelayError):
    """The image model answered without an image, usually a policy refusal."""
    status_code = 500

    def __init__(self):
        super().__init__(PROHIBITED_CONTENT)
