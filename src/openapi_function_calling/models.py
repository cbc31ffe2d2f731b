"""
Data models for converting OpenAPI operations to tool declarations and back.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import MalformedInputError

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def _resolve_ref(document: Dict[str, Any], ref: str) -> Any:
    """Resolve a local reference such as "#/components/parameters/Limit".

    Args:
        document: The whole API description
        ref: The reference string

    Returns:
        The referenced value

    Raises:
        ValueError: If the reference is not local or cannot be resolved
    """
    if not ref.startswith("#/"):
        raise ValueError(f"Only local references are supported: {ref}")

    current: Any = document
    for part in ref[2:].split("/"):
        # Unescape JSON pointer encoding
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(current, dict) or part not in current:
            raise ValueError(f"Could not resolve reference: {ref}")
        current = current[part]
    return current


def _resolve_parameter(document: Dict[str, Any], param: Any) -> Any:
    seen = set()
    while isinstance(param, dict) and "$ref" in param:
        ref = param["$ref"]
        if ref in seen:
            raise ValueError(f"Circular reference to {ref}")
        seen.add(ref)
        param = _resolve_ref(document, ref)
    return param


def _parameter_key(param: Any) -> Tuple[Any, Any]:
    if not isinstance(param, dict):
        return None, None
    return param.get("name"), param.get("in", "query")


def _merge_parameters(
    document: Dict[str, Any], path_item: Dict[str, Any], operation: Any
) -> Any:
    """Resolve parameter references and add the path item's shared parameters.

    An operation parameter overrides a shared one with the same name and location.
    """
    if not isinstance(operation, dict):
        return operation

    shared = [_resolve_parameter(document, p) for p in path_item.get("parameters") or []]
    own = [_resolve_parameter(document, p) for p in operation.get("parameters") or []]
    if not shared and "parameters" not in operation:
        return operation

    overridden = {_parameter_key(p) for p in own}
    operation = dict(operation)
    operation["parameters"] = [p for p in shared if _parameter_key(p) not in overridden] + own
    return operation


class ParameterSpec(BaseModel):
    """Represents an operation parameter in the API description."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: Optional[str] = None
    required: bool = False
    location: str = Field("query", alias="in")
    schema_type: str = ""

    @model_validator(mode="before")
    @classmethod
    def _lift_schema_type(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "schema_type" in data:
            return data
        data = dict(data)
        schema = data.pop("schema", None)
        schema_type = schema.get("type", "") if isinstance(schema, dict) else ""
        # OpenAPI 3.1 allows a list of types, e.g. ["integer", "null"]
        if isinstance(schema_type, list):
            schema_type = next((t for t in schema_type if t != "null"), "")
        data["schema_type"] = schema_type or ""
        return data

    @field_validator("required", mode="before")
    @classmethod
    def _required_defaults_to_false(cls, value: Any) -> Any:
        return False if value is None else value


class OperationSpec(BaseModel):
    """Represents one HTTP method on one path."""

    model_config = ConfigDict(populate_by_name=True)

    operation_id: Optional[str] = Field(None, alias="operationId")
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: Optional[List[ParameterSpec]] = None
    request_body: Optional[Dict[str, Any]] = Field(None, alias="requestBody")


class Server(BaseModel):
    url: str


class ApiDescription(BaseModel):
    """Represents the paths -> methods -> operations document of an API."""

    paths: Dict[str, Dict[str, OperationSpec]]
    servers: List[Server] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _collect_operations(cls, data: Any) -> Any:
        # Path items may also carry shared parameters, summaries or servers
        if not isinstance(data, dict) or not isinstance(data.get("paths"), dict):
            return data
        paths = {}
        for path, path_item in data["paths"].items():
            if not isinstance(path_item, dict):
                paths[path] = path_item
                continue
            paths[path] = {
                method.lower(): _merge_parameters(data, path_item, operation)
                for method, operation in path_item.items()
                if method.lower() in HTTP_METHODS
            }
        return {**data, "paths": paths}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiDescription":
        """Validate a raw API description document.

        Args:
            data: The parsed OpenAPI document

        Returns:
            The validated API description

        Raises:
            MalformedInputError: If the document has no paths or is malformed
        """
        if not isinstance(data, Mapping):
            raise MalformedInputError("API description must be a mapping")
        if "paths" not in data:
            raise MalformedInputError("Missing required field: paths")
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise MalformedInputError(f"Invalid API description: {e}") from e

    def operations(self) -> Iterator[Tuple[str, str, OperationSpec]]:
        """Yield (path, method, operation) in document order."""
        for path, methods in self.paths.items():
            for method, operation in methods.items():
                yield path, method, operation

    @property
    def default_server_url(self) -> Optional[str]:
        if self.servers:
            return self.servers[0].url
        return None


class PropertySchema(BaseModel):
    type: str
    description: str


class FunctionParameters(BaseModel):
    type: str = "OBJECT"
    properties: Dict[str, PropertySchema] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)


class FunctionDeclaration(BaseModel):
    """Represents a function the model may call."""

    name: str
    description: str = ""
    parameters: FunctionParameters = Field(default_factory=FunctionParameters)


class Tool(BaseModel):
    """A tool wrapper holding function declarations, as sent to the model."""

    model_config = ConfigDict(populate_by_name=True)

    function_declarations: List[FunctionDeclaration] = Field(alias="functionDeclarations")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class FunctionCall(BaseModel):
    """A function call suggested by the model."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict, alias="args")

    @field_validator("arguments", mode="before")
    @classmethod
    def _missing_args_are_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class Part(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    function_call: Optional[FunctionCall] = Field(None, alias="functionCall")


class Content(BaseModel):
    parts: List[Part] = Field(default_factory=list)


class Candidate(BaseModel):
    content: Optional[Content] = None


class GenerateContentResponse(BaseModel):
    candidates: List[Candidate] = Field(default_factory=list)


class SkipReason(str, Enum):
    MISSING_OPERATION_ID = "missing_operation_id"
    NO_PARAMETERS = "no_parameters"
    UNDESCRIBED_PARAMETER = "undescribed_parameter"
    TRUNCATED_BY_SIBLING = "truncated_by_sibling"


class ConversionSkip(BaseModel):
    """Records an operation left out of the tool declarations and why."""

    path: str
    method: str
    operation_id: Optional[str] = None
    reason: SkipReason
    parameter: Optional[str] = None
