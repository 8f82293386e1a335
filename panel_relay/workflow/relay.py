import base64
import binascii
import json
from typing import Any, Dict, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..api.gemini_client import GeminiClient
from ..utils.config import Settings
from ..utils.logger import logger
from .errors import (
    ContentProhibited,
    InvalidTarget,
    MalformedRequestBody,
    MethodNotAllowed,
    MissingCredential,
    RelayError,
    UpstreamFailure,
)
from .payloads import build_payload, find_inline_image, first_candidate_parts
from .schemas import ImageRequest, InboundRequest, PassthroughRequest, ScriptRequest, parse_request, resolve_target

JSON_HEADERS = {"Content-Type": "application/json"}

class RelayResult(BaseModel):
    """Terminal status/body pair handed back to the hosting platform."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status_code: int = Field(alias="statusCode")
    headers: Optional[Dict[str, str]] = None
    body: str

    @classmethod
    def json_body(cls, status_code: int, content: Any) -> "RelayResult":
        return cls(status_code=status_code, headers=dict(JSON_HEADERS), body=json.dumps(content))

    @classmethod
    def error(cls, status_code: int, message: str) -> "RelayResult":
        return cls.json_body(status_code, {"error": message})

    def as_response(self) -> Dict[str, Any]:
        """Render the serverless response mapping."""
        return self.model_dump(by_alias=True, exclude_none=True)

class Relay:
    """Translates one inbound request into one Gemini call and back."""

    def __init__(self, settings: Settings, client: Optional[GeminiClient] = None):
        self.settings = settings
        self.client = client or GeminiClient(settings)

    def handle(self, event: Mapping[str, Any]) -> RelayResult:
        """
        Relay a serverless event. Never raises.

        Args:
            event: Mapping with httpMethod, body and optionally isBase64Encoded

        Returns:
            RelayResult: The response for the caller
        """
        try:
            return self._handle(event)
        except MethodNotAllowed as e:
            logger.warning(f"Rejected {e.method or 'empty'} method")
            return RelayResult(status_code=e.status_code, body=e.message)
        except InvalidTarget as e:
            logger.warning(f"Rejected request with target {e.target!r}")
            return RelayResult.error(e.status_code, e.message)
        except ContentProhibited as e:
            logger.warning("Image model returned no image; treating the request as prohibited content")
            return RelayResult.error(e.status_code, e.message)
        except RelayError as e:
            logger.warning(f"Relay request failed with {e.status_code}: {e.message}")
            return RelayResult.error(e.status_code, e.message)
        except Exception as e:
            logger.exception("Unexpected relay error: {}", e)
            return RelayResult.error(500, str(e))

    def _handle(self, event: Mapping[str, Any]) -> RelayResult:
        method = str(event.get("httpMethod") or "").upper()
        if method != "POST":
            raise MethodNotAllowed(method)

        body = self.decode_body(event)
        target = resolve_target(body)
        if not self.settings.api_key:
            logger.error("API key is missing from environment variables.")
            raise MissingCredential()

        request = parse_request(target, body)
        payload = build_payload(request)
        model = self.settings.model_for(target)
        logger.info(f"Relaying {target} request ({type(request).__name__}) to {model}")

        data = self.client.generate_content(model, payload)
        return self.translate(request, data)

    @staticmethod
    def decode_body(event: Mapping[str, Any]) -> Dict[str, Any]:
        """Decode the event body into a JSON object."""
        raw = event.get("body")
        try:
            if raw is None:
                raw = ""
            if event.get("isBase64Encoded"):
                raw = base64.b64decode(raw).decode("utf-8")
            elif isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            body = json.loads(raw)
        except (ValueError, TypeError, binascii.Error) as e:
            raise MalformedRequestBody(str(e))
        if not isinstance(body, dict):
            raise MalformedRequestBody("Request body must be a JSON object")
        return body

    def translate(self, request: InboundRequest, data: Dict[str, Any]) -> RelayResult:
        """Turn a successful generate-content response into the caller's result."""
        if isinstance(request, PassthroughRequest):
            return RelayResult.json_body(200, data)

        if isinstance(request, ScriptRequest):
            parts = first_candidate_parts(data)
            text = parts[0].get("text") if parts else None
            if text is None:
                raise UpstreamFailure("No script returned by the model.")
            return RelayResult(status_code=200, headers=dict(JSON_HEADERS), body=text)

        if isinstance(request, ImageRequest):
            image_data = find_inline_image(data)
            if not image_data:
                raise ContentProhibited()
            return RelayResult.json_body(200, {"imageUrl": f"data:image/png;base64,{image_data}"})

        raise TypeError(f"Unsupported request type: {type(request).__name__}")
