"""
Execution of model-issued function calls against the described API.
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

import requests
from pydantic import BaseModel, Field

from .config import Settings
from .exceptions import (
    ConfigurationError,
    DispatchError,
    DuplicateOperationError,
    MissingArgumentError,
)
from .models import ApiDescription, FunctionCall, ParameterSpec

logger = logging.getLogger(__name__)


class OperationRoute(BaseModel):
    """Where and how to invoke one operation."""

    name: str
    method: str
    path: str
    parameters: List[ParameterSpec] = Field(default_factory=list)
    accepts_body: bool = False


def _format_value(param: ParameterSpec, value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    # NUMBER arguments come back from the model as floats, e.g. 1.0 for an id
    if param.schema_type == "integer" and isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class CallDispatcher:
    """Maps function calls to operations and executes them over HTTP."""

    def __init__(
        self,
        description: Union[ApiDescription, Mapping[str, Any]],
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the dispatcher.

        Args:
            description: The API description the tool declarations were built from
            base_url: Base URL of the target API. Defaults to the first server
                declared in the description.
            timeout: Timeout in seconds for each dispatched request
            session: Optional requests session

        Raises:
            DuplicateOperationError: If two operations share an operationId
            ConfigurationError: If no base URL is available
        """
        if not isinstance(description, ApiDescription):
            description = ApiDescription.from_dict(description)

        base_url = base_url or description.default_server_url
        if not base_url:
            raise ConfigurationError(
                "No base URL given and the API description declares no servers"
            )

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._routes = MappingProxyType(self._build_routes(description))

    @classmethod
    def from_settings(
        cls,
        description: Union[ApiDescription, Mapping[str, Any]],
        settings: Settings,
        session: Optional[requests.Session] = None,
    ) -> "CallDispatcher":
        return cls(
            description,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
            session=session,
        )

    @staticmethod
    def _build_routes(description: ApiDescription) -> Dict[str, OperationRoute]:
        routes: Dict[str, OperationRoute] = {}
        for path, method, operation in description.operations():
            if not operation.operation_id:
                continue

            existing = routes.get(operation.operation_id)
            if existing is not None:
                raise DuplicateOperationError(
                    f"Operation {operation.operation_id} is declared by both "
                    f"{existing.method.upper()} {existing.path} and {method.upper()} {path}"
                )

            routes[operation.operation_id] = OperationRoute(
                name=operation.operation_id,
                method=method,
                path=path,
                parameters=operation.parameters or [],
                accepts_body=operation.request_body is not None,
            )
        return routes

    @property
    def operation_names(self) -> List[str]:
        return list(self._routes)

    def route(self, name: str) -> OperationRoute:
        """Look up the route for an operation name.

        Raises:
            DispatchError: If no operation has that name
        """
        try:
            return self._routes[name]
        except KeyError:
            raise DispatchError(f"Unknown operation: {name}", operation=name) from None

    def _build_request(
        self, route: OperationRoute, arguments: Mapping[str, Any]
    ) -> Tuple[str, Dict[str, Any]]:
        path = route.path
        params: Dict[str, Any] = {}
        headers: Dict[str, str] = {}
        cookies: Dict[str, str] = {}

        for param in route.parameters:
            value = arguments.get(param.name)
            if value is None:
                if param.required or param.location == "path":
                    raise MissingArgumentError(route.name, param.name)
                continue

            value = _format_value(param, value)
            if param.location == "path":
                path = path.replace(f"{{{param.name}}}", quote(str(value), safe=""))
            elif param.location == "header":
                headers[param.name] = str(value)
            elif param.location == "cookie":
                cookies[param.name] = str(value)
            else:
                params[param.name] = value

        declared = {param.name for param in route.parameters}
        undeclared = {k: v for k, v in arguments.items() if k not in declared}

        body = None
        if undeclared and route.accepts_body:
            body = undeclared
        elif undeclared:
            logger.warning(
                "Dropping undeclared arguments %s for operation %s", sorted(undeclared), route.name
            )

        return path, {"params": params, "headers": headers, "cookies": cookies, "json": body}

    def dispatch(self, call: FunctionCall) -> str:
        """Execute a function call against the target API.

        Args:
            call: The function call suggested by the model

        Returns:
            The raw response body

        Raises:
            MissingArgumentError: If a required argument is absent
            DispatchError: If the operation is unknown, unreachable or
                answers with a non-2xx status
        """
        route = self.route(call.name)
        path, request_kwargs = self._build_request(route, call.arguments)
        url = f"{self.base_url}{path}"

        logger.info("Dispatching %s as %s %s", route.name, route.method.upper(), url)
        try:
            response = self.session.request(
                route.method.upper(), url, timeout=self.timeout, **request_kwargs
            )
        except requests.RequestException as e:
            raise DispatchError(
                f"Failed to call operation {route.name}: {e}", operation=route.name
            ) from e

        if not 200 <= response.status_code < 300:
            raise DispatchError(
                f"Operation {route.name} failed with HTTP {response.status_code}",
                operation=route.name,
                status_code=response.status_code,
                body=response.text,
            )

        return response.text
