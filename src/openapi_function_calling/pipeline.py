"""
End-to-end flow from a natural language query to an API response.
"""

import logging
from typing import Any, List, Mapping, Optional, Union

import requests
from pydantic import BaseModel

from .client import FunctionCallClient
from .config import Settings
from .converter import ToolSchemaConverter
from .dispatcher import CallDispatcher
from .models import ApiDescription, FunctionCall, Tool

logger = logging.getLogger(__name__)


class PipelineResult(BaseModel):
    query: str
    function_call: Optional[FunctionCall] = None
    result: Optional[str] = None


class FunctionCallingPipeline:
    """Converts an API description once, then answers queries against it.

    Each query runs convert -> request -> parse -> dispatch in that order.
    """

    def __init__(
        self,
        description: Union[ApiDescription, Mapping[str, Any]],
        client: FunctionCallClient,
        dispatcher: Optional[CallDispatcher] = None,
        converter: Optional[ToolSchemaConverter] = None,
    ):
        if not isinstance(description, ApiDescription):
            description = ApiDescription.from_dict(description)

        self.description = description
        self.client = client
        self.dispatcher = dispatcher
        self.converter = converter or ToolSchemaConverter()
        self.tools: List[Tool] = self.converter.convert(description)
        logger.info("Prepared %d tool declarations", len(self.tools))

    @classmethod
    def from_settings(
        cls,
        description: Union[ApiDescription, Mapping[str, Any]],
        settings: Optional[Settings] = None,
        execute: bool = True,
        session: Optional[requests.Session] = None,
    ) -> "FunctionCallingPipeline":
        """Build a pipeline from settings.

        Args:
            description: The API description
            settings: Optional settings, loaded from the environment if not provided
            execute: Whether suggested calls are dispatched to the API
            session: Optional requests session shared by client and dispatcher

        Returns:
            A configured pipeline
        """
        if settings is None:
            settings = Settings()
        if not isinstance(description, ApiDescription):
            description = ApiDescription.from_dict(description)

        client = FunctionCallClient.from_settings(settings, session=session)
        dispatcher = None
        if execute:
            dispatcher = CallDispatcher.from_settings(description, settings, session=session)
        return cls(description, client, dispatcher=dispatcher)

    def run(self, query: str) -> PipelineResult:
        """Answer a query by calling the operation the model suggests.

        Args:
            query: The natural language query

        Returns:
            The suggested call and, when it was dispatched, the raw API response
        """
        function_call = self.client.get_function_call(query, self.tools)
        if function_call is None:
            return PipelineResult(query=query)

        if self.dispatcher is None:
            return PipelineResult(query=query, function_call=function_call)

        result = self.dispatcher.dispatch(function_call)
        return PipelineResult(query=query, function_call=function_call, result=result)
