"""
Client asking the model provider for a function call.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import requests
from pydantic import ValidationError

from .config import DEFAULT_GEMINI_BASE_URL, DEFAULT_GEMINI_MODEL, Settings
from .exceptions import (
    InvalidCredentialError,
    MalformedInputError,
    MalformedResponseError,
    UpstreamError,
)
from .models import FunctionCall, GenerateContentResponse, Tool

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEYS = frozenset({"YOUR_API_KEY"})

ToolsSchema = Union[str, Sequence[Tool], Sequence[Mapping[str, Any]]]


class FunctionCallClient:
    """Sends a query and tool declarations to Gemini and returns the suggested call."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            api_key: The model provider API key
            model: The model name
            base_url: The model provider API base URL
            timeout: Timeout in seconds for the model call
            session: Optional requests session

        Raises:
            InvalidCredentialError: If the API key is empty or a placeholder
        """
        if api_key is None or not api_key.strip() or api_key.strip() in PLACEHOLDER_API_KEYS:
            raise InvalidCredentialError("API key is not set")

        self._api_key = api_key.strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[requests.Session] = None
    ) -> "FunctionCallClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.request_timeout,
            session=session,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    @staticmethod
    def _normalize_tools(tools_schema: ToolsSchema) -> List[Dict[str, Any]]:
        if isinstance(tools_schema, str):
            try:
                tools = json.loads(tools_schema)
            except json.JSONDecodeError as e:
                raise MalformedInputError(f"Tools schema is not valid JSON: {e}") from e
        else:
            tools = [t.to_wire() if isinstance(t, Tool) else dict(t) for t in tools_schema]

        if not isinstance(tools, list):
            raise MalformedInputError("Tools schema must be a JSON array")
        return tools

    def build_request(self, query: str, tools_schema: ToolsSchema) -> Dict[str, Any]:
        """Build the generateContent request body.

        Args:
            query: The natural language query, sent verbatim
            tools_schema: The tool declarations as JSON text, Tool models or dicts

        Returns:
            The request body
        """
        return {
            "contents": [{"parts": [{"text": query}]}],
            "tools": self._normalize_tools(tools_schema),
        }

    def get_function_call(self, query: str, tools_schema: ToolsSchema) -> Optional[FunctionCall]:
        """Ask the model which function to call for a query.

        Args:
            query: The natural language query
            tools_schema: The tool declarations as JSON text, Tool models or dicts

        Returns:
            The suggested function call, or None if the model answered
            without calling a function

        Raises:
            UpstreamError: If the provider is unreachable or answers with a non-2xx status
            MalformedResponseError: If the response lacks the expected structure
        """
        payload = self.build_request(query, tools_schema)
        logger.info("Requesting function call from %s", self.model)

        try:
            response = self.session.post(
                self.endpoint,
                params={"key": self._api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            # Exception messages may contain the request URL and with it the key
            message = str(e).replace(self._api_key, "***")
            raise UpstreamError(f"Failed to call model provider: {message}") from None

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"Failed to call model provider: HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        return self.parse_response(response.text)

    @staticmethod
    def parse_response(body: str) -> Optional[FunctionCall]:
        """Extract the function call from a generateContent response.

        Only the first part of the first candidate is considered.

        Args:
            body: The raw response body

        Returns:
            The function call, or None if that part is plain text

        Raises:
            MalformedResponseError: If the response lacks the expected structure
        """
        try:
            reply = GenerateContentResponse.model_validate_json(body)
        except ValidationError as e:
            raise MalformedResponseError(f"Unexpected model response: {e}", body=body) from e

        if not reply.candidates:
            raise MalformedResponseError("Model response contains no candidates", body=body)

        content = reply.candidates[0].content
        if content is None or not content.parts:
            raise MalformedResponseError("Model response candidate has no content parts", body=body)

        part = content.parts[0]
        if part.function_call is None:
            if part.text is None:
                raise MalformedResponseError(
                    "Model response part holds neither a function call nor text", body=body
                )
            logger.info("Model answered without suggesting a function call")
            return None

        logger.info("Model suggested function call %s", part.function_call.name)
        return part.function_call
