"""
Core functionality for converting API descriptions to tool declarations.
"""

import json
import logging
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from .models import (
    ApiDescription,
    ConversionSkip,
    FunctionDeclaration,
    FunctionParameters,
    OperationSpec,
    PropertySchema,
    SkipReason,
    Tool,
)
from .type_mapper import map_type

logger = logging.getLogger(__name__)


class ConversionResult(BaseModel):
    """Tool declarations together with the operations left out of them."""

    tools: List[Tool] = Field(default_factory=list)
    skipped: List[ConversionSkip] = Field(default_factory=list)


class ToolSchemaConverter:
    """Converts API descriptions to tool declarations for function calling.

    An operation becomes a tool only if it has an operationId, at least one
    parameter, and a description on every parameter. Anything else is left
    out as a whole and recorded as a ConversionSkip.
    """

    def __init__(self, stop_path_on_parameterless: bool = False):
        """Initialize the converter.

        Args:
            stop_path_on_parameterless: Reproduce the legacy behaviour where an
                operation without parameters also drops every later operation
                of the same path. Off by default, so siblings are still converted.
        """
        self.stop_path_on_parameterless = stop_path_on_parameterless

    def convert(self, description: Union[ApiDescription, Mapping[str, Any]]) -> List[Tool]:
        """Convert an API description to tool declarations.

        Args:
            description: The API description, validated or as a raw mapping

        Returns:
            One tool wrapper per convertible operation, in document order

        Raises:
            MalformedInputError: If a raw description is structurally invalid
        """
        return self.convert_with_report(description).tools

    def convert_with_report(
        self, description: Union[ApiDescription, Mapping[str, Any]]
    ) -> ConversionResult:
        """Convert an API description and report the skipped operations.

        Args:
            description: The API description, validated or as a raw mapping

        Returns:
            A ConversionResult with the tools and the skip records

        Raises:
            MalformedInputError: If a raw description is structurally invalid
        """
        if not isinstance(description, ApiDescription):
            description = ApiDescription.from_dict(description)

        result = ConversionResult()
        for path, methods in description.paths.items():
            truncated = False
            for method, operation in methods.items():
                if truncated:
                    self._skip(result, path, method, operation, SkipReason.TRUNCATED_BY_SIBLING)
                    continue

                if not operation.operation_id:
                    self._skip(result, path, method, operation, SkipReason.MISSING_OPERATION_ID)
                    continue

                if not operation.parameters:
                    self._skip(result, path, method, operation, SkipReason.NO_PARAMETERS)
                    truncated = self.stop_path_on_parameterless
                    continue

                undescribed = next(
                    (p.name for p in operation.parameters if p.description is None), None
                )
                if undescribed is not None:
                    self._skip(
                        result,
                        path,
                        method,
                        operation,
                        SkipReason.UNDESCRIBED_PARAMETER,
                        parameter=undescribed,
                    )
                    continue

                declaration = self._build_declaration(operation)
                result.tools.append(Tool(function_declarations=[declaration]))

        return result

    def _build_declaration(self, operation: OperationSpec) -> FunctionDeclaration:
        parameters = FunctionParameters()
        for param in operation.parameters or []:
            parameters.properties[param.name] = PropertySchema(
                type=map_type(param.schema_type),
                description=param.description,
            )
            if param.required and param.name not in parameters.required:
                parameters.required.append(param.name)

        return FunctionDeclaration(
            name=operation.operation_id,
            description=operation.summary or "",
            parameters=parameters,
        )

    def _skip(
        self,
        result: ConversionResult,
        path: str,
        method: str,
        operation: OperationSpec,
        reason: SkipReason,
        parameter: Optional[str] = None,
    ) -> None:
        logger.debug(
            "Skipping %s %s (%s): %s", method.upper(), path, operation.operation_id, reason.value
        )
        result.skipped.append(
            ConversionSkip(
                path=path,
                method=method,
                operation_id=operation.operation_id,
                reason=reason,
                parameter=parameter,
            )
        )

    @staticmethod
    def to_json(tools: Iterable[Tool], indent: Optional[int] = 2) -> str:
        """Serialize tools to the wire format sent to the model.

        Args:
            tools: The tool wrappers
            indent: JSON indentation, None for compact output

        Returns:
            A JSON array of {"functionDeclarations": [...]} objects
        """
        return json.dumps([tool.to_wire() for tool in tools], indent=indent)

    @staticmethod
    def from_json(content: str) -> List[Tool]:
        """Parse tools from their wire format.

        Args:
            content: A JSON array as produced by to_json

        Returns:
            The tool wrappers
        """
        return [Tool.model_validate(item) for item in json.loads(content)]
