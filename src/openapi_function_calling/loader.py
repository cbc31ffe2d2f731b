"""
Loading of API descriptions from dictionaries, JSON/YAML text, files or URLs.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests
import yaml

from .exceptions import MalformedInputError
from .models import ApiDescription

logger = logging.getLogger(__name__)

DescriptionSource = Union[ApiDescription, Dict[str, Any], Path, str]


def _parse_text(content: str) -> Any:
    """Parse JSON or YAML text.

    Args:
        content: The raw document

    Returns:
        The parsed document

    Raises:
        MalformedInputError: If the text is neither JSON nor YAML
    """
    try:
        # Try JSON first
        return json.loads(content)
    except json.JSONDecodeError:
        try:
            # Try YAML if JSON fails
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise MalformedInputError(f"Failed to parse API description: {e}")


def _fetch(url: str, timeout: float, session: Optional[requests.Session]) -> str:
    http = session or requests
    logger.info("Fetching API description from %s", url)
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise MalformedInputError(f"Failed to fetch API description from {url}: {e}") from e
    if not 200 <= response.status_code < 300:
        raise MalformedInputError(
            f"Failed to fetch API description from {url}: HTTP {response.status_code}"
        )
    return response.text


def load_api_description(
    source: DescriptionSource,
    timeout: float = 30.0,
    session: Optional[requests.Session] = None,
) -> ApiDescription:
    """Load and validate an API description.

    Args:
        source: An ApiDescription, a parsed dictionary, a Path to a JSON/YAML
            file, an http(s) URL (e.g. a /v3/api-docs endpoint) or JSON/YAML text
        timeout: Timeout in seconds when fetching from a URL
        session: Optional requests session used for fetching

    Returns:
        The validated API description

    Raises:
        MalformedInputError: If the description cannot be loaded or is invalid
    """
    if isinstance(source, ApiDescription):
        return source

    if isinstance(source, dict):
        return ApiDescription.from_dict(source)

    if isinstance(source, Path):
        try:
            content = source.read_text()
        except OSError as e:
            raise MalformedInputError(f"Failed to read API description file: {e}")
    elif source.startswith(("http://", "https://")):
        content = _fetch(source, timeout, session)
    else:
        content = source

    return ApiDescription.from_dict(_parse_text(content))
