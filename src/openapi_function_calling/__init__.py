"""OpenAPI function calling package."""

from .client import FunctionCallClient
from .converter import ConversionResult, ToolSchemaConverter
from .dispatcher import CallDispatcher
from .loader import load_api_description
from .models import ApiDescription, ConversionSkip, FunctionCall, SkipReason, Tool
from .pipeline import FunctionCallingPipeline, PipelineResult
from .type_mapper import map_type

__version__ = "0.1.0"
__all__ = [
    "ApiDescription",
    "CallDispatcher",
    "ConversionResult",
    "ConversionSkip",
    "FunctionCall",
    "FunctionCallClient",
    "FunctionCallingPipeline",
    "PipelineResult",
    "SkipReason",
    "Tool",
    "ToolSchemaConverter",
    "load_api_description",
    "map_type",
]
