import json
from pathlib import Path
from typing import Any, Dict
from unittest.mock import Mock

import pytest
import requests
import yaml

FIXTURES = Path(__file__).parent / "fixtures"

SEARCH_CALL_RESPONSE = {
    "candidates": [
        {
            "content": {
                "parts": [
                    {"functionCall": {"name": "searchProducts", "args": {"name": "Smartphone"}}}
                ]
            }
        }
    ]
}

SMARTPHONE_RESULT = (
    '[{"id":2,"name":"Smartphone","description":"Latest model with AI camera","price":1200.0}]'
)


def make_response(status_code: int = 200, body: Any = "") -> Mock:
    """Build a stand-in for requests.Response.

    Args:
        status_code: The HTTP status
        body: The body, JSON-encoded unless already a string
    """
    text = body if isinstance(body, str) else json.dumps(body)
    return Mock(status_code=status_code, text=text)


@pytest.fixture
def products_path() -> Path:
    return FIXTURES / "products_api.yaml"


@pytest.fixture
def products_spec(products_path) -> Dict[str, Any]:
    with open(products_path) as f:
        return yaml.safe_load(f)


@pytest.fixture
def session() -> Mock:
    return Mock(spec=requests.Session)
