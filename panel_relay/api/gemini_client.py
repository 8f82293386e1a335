import requests
from typing import Any, Dict, Optional

from ..utils.config import Settings
from ..utils.logger import logger
from ..workflow.errors import MissingCredential, UpstreamFailure

GENERIC_UPSTREAM_ERROR = "Google API request failed"

class GeminiClient:
    """Client for the Gemini generate-content REST endpoint."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        """
        Args:
            settings: Relay settings holding the credential and model ids
            session: Optional session; module-level requests is used when omitted
        """
        self.api_key = settings.api_key
        self.api_base = settings.gemini_api_base
        self.timeout = settings.request_timeout
        self.http = session or requests

    def endpoint(self, model: str) -> str:
        # Credential goes in the query params, never in this string.
        return f"{self.api_base}/models/{model}:generateContent"

    def generate_content(self, model: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a generate-content payload and return the decoded response.

        Args:
            model: Model id, e.g. "gemini-2.5-flash-image-preview"
            payload: Request body conforming to the generate-content contract

        Returns:
            Dict[str, Any]: The decoded JSON response

        Raises:
            MissingCredential: If no API key is configured
            UpstreamFailure: If the call fails or the response carries an error
        """
        if not self.api_key:
            raise MissingCredential()

        logger.info(f"Calling Gemini model {model}")
        try:
            response = self.http.post(
                self.endpoint(model),
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini request to {model} failed: {type(e).__name__}")
            raise UpstreamFailure(f"Error calling Google API: {type(e).__name__}")

        if not response.ok:
            message = self._error_message(response)
            logger.error(f"Google API error {response.status_code} from {model}: {message}")
            raise UpstreamFailure(message, status_code=response.status_code)

        data = response.json()
        if isinstance(data, dict) and data.get("error"):
            message = self._extract_message(data) or GENERIC_UPSTREAM_ERROR
            logger.error(f"Google API returned an error from {model}: {message}")
            raise UpstreamFailure(message)
        if not isinstance(data, dict):
            raise UpstreamFailure("Unexpected response from Google API")
        return data

    def _error_message(self, response: requests.Response) -> str:
        try:
            message = self._extract_message(response.json())
        except ValueError:
            message = None
        if message:
            return message
        text = (response.text or "").strip()
        return text or GENERIC_UPSTREAM_ERROR

    @staticmethod
    def _extract_message(data: Any) -> Optional[str]:
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("message") or None
        if isinstance(error, str):
            return error or None
        return None
