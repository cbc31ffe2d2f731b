import pytest
import requests

from conftest import SMARTPHONE_RESULT, make_response
from openapi_function_calling import CallDispatcher, FunctionCall
from openapi_function_calling.config import Settings
from openapi_function_calling.exceptions import (
    ConfigurationError,
    DispatchError,
    DuplicateOperationError,
    MissingArgumentError,
)


def test_dispatch_search(products_spec, session):
    """Test that searchProducts is sent as a GET with the name query parameter."""
    session.request.return_value = make_response(200, SMARTPHONE_RESULT)
    dispatcher = CallDispatcher(products_spec, session=session, timeout=5.0)

    result = dispatcher.dispatch(
        FunctionCall(name="searchProducts", arguments={"name": "Smartphone"})
    )

    assert result == SMARTPHONE_RESULT
    session.request.assert_called_once_with(
        "GET",
        "http://localhost:8080/api/products/search",
        timeout=5.0,
        params={"name": "Smartphone"},
        headers={},
        cookies={},
        json=None,
    )


def test_path_parameters_are_substituted(products_spec, session):
    session.request.return_value = make_response(200, '{"id":1,"name":"Laptop"}')
    dispatcher = CallDispatcher(products_spec, session=session)

    dispatcher.dispatch(FunctionCall(name="getProductById", arguments={"id": 1.0}))

    args, kwargs = session.request.call_args
    assert args == ("GET", "http://localhost:8080/api/products/1")
    assert kwargs["params"] == {}


def test_path_parameters_are_encoded(session):
    spec = {
        "paths": {
            "/files/{name}": {
                "get": {
                    "operationId": "getFile",
                    "parameters": [{"name": "name", "in": "path", "required": True}],
                }
            }
        }
    }
    session.request.return_value = make_response(200, "ok")
    dispatcher = CallDispatcher(spec, base_url="http://api", session=session)

    dispatcher.dispatch(FunctionCall(name="getFile", arguments={"name": "a b/c"}))

    assert session.request.call_args[0][1] == "http://api/files/a%20b%2Fc"


def test_header_and_boolean_arguments(session):
    spec = {
        "paths": {
            "/items": {
                "get": {
                    "operationId": "listItems",
                    "parameters": [
                        {"name": "X-Tenant", "in": "header", "description": "Tenant"},
                        {"name": "inStock", "in": "query", "schema": {"type": "boolean"}},
                    ],
                }
            }
        }
    }
    session.request.return_value = make_response(200, "[]")
    dispatcher = CallDispatcher(spec, base_url="http://api/", session=session)

    dispatcher.dispatch(
        FunctionCall(name="listItems", arguments={"X-Tenant": "acme", "inStock": True})
    )

    kwargs = session.request.call_args[1]
    assert session.request.call_args[0][1] == "http://api/items"
    assert kwargs["headers"] == {"X-Tenant": "acme"}
    assert kwargs["params"] == {"inStock": "true"}


def test_undeclared_arguments_become_body(products_spec, session):
    session.request.return_value = make_response(200, '{"id":2,"price":999.0}')
    dispatcher = CallDispatcher(products_spec, session=session)

    dispatcher.dispatch(
        FunctionCall(name="updateProductPrice", arguments={"id": 2, "price": 999.0})
    )

    args, kwargs = session.request.call_args
    assert args == ("PATCH", "http://localhost:8080/api/products/2/price")
    assert kwargs["json"] == {"price": 999.0}


def test_undeclared_arguments_dropped_without_body(products_spec, session):
    session.request.return_value = make_response(200, "[]")
    dispatcher = CallDispatcher(products_spec, session=session)

    dispatcher.dispatch(
        FunctionCall(name="searchProducts", arguments={"name": "Laptop", "color": "red"})
    )

    kwargs = session.request.call_args[1]
    assert kwargs["params"] == {"name": "Laptop"}
    assert kwargs["json"] is None


def test_missing_required_argument(products_spec, session):
    dispatcher = CallDispatcher(products_spec, session=session)

    with pytest.raises(MissingArgumentError) as exc_info:
        dispatcher.dispatch(FunctionCall(name="searchProducts", arguments={}))

    assert exc_info.value.operation == "searchProducts"
    assert exc_info.value.argument == "name"
    session.request.assert_not_called()


def test_unknown_operation(products_spec, session):
    dispatcher = CallDispatcher(products_spec, session=session)

    with pytest.raises(DispatchError) as exc_info:
        dispatcher.dispatch(FunctionCall(name="dropDatabase"))
    assert exc_info.value.operation == "dropDatabase"


def test_error_status(products_spec, session):
    session.request.return_value = make_response(404, "")
    dispatcher = CallDispatcher(products_spec, session=session)

    with pytest.raises(DispatchError) as exc_info:
        dispatcher.dispatch(FunctionCall(name="getProductById", arguments={"id": 99}))

    assert exc_info.value.operation == "getProductById"
    assert exc_info.value.status_code == 404


def test_transport_error(products_spec, session):
    session.request.side_effect = requests.Timeout("timed out")
    dispatcher = CallDispatcher(products_spec, session=session)

    with pytest.raises(DispatchError) as exc_info:
        dispatcher.dispatch(FunctionCall(name="searchProducts", arguments={"name": "x"}))
    assert exc_info.value.status_code is None


def test_duplicate_operation_ids(session):
    spec = {
        "paths": {
            "/a": {"get": {"operationId": "fetch"}},
            "/b": {"get": {"operationId": "fetch"}},
        }
    }

    with pytest.raises(DuplicateOperationError):
        CallDispatcher(spec, base_url="http://api", session=session)


def test_path_item_parameters_are_dispatched(session):
    """Test that a path parameter declared on the path item fills the URL."""
    spec = {
        "paths": {
            "/items/{id}": {
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}}
                ],
                "get": {
                    "operationId": "getItem",
                    "parameters": [{"name": "v", "in": "query", "description": "Version"}],
                },
            }
        }
    }
    session.request.return_value = make_response(200, "{}")
    dispatcher = CallDispatcher(spec, base_url="http://api", session=session)

    dispatcher.dispatch(FunctionCall(name="getItem", arguments={"id": 7, "v": "x"}))

    args, kwargs = session.request.call_args
    assert args == ("GET", "http://api/items/7")
    assert kwargs["params"] == {"v": "x"}


def test_referenced_parameters_are_dispatched(session):
    spec = {
        "paths": {
            "/items": {
                "get": {
                    "operationId": "listItems",
                    "parameters": [{"$ref": "#/components/parameters/Limit"}],
                }
            }
        },
        "components": {
            "parameters": {
                "Limit": {
                    "name": "limit",
                    "in": "query",
                    "required": True,
                    "schema": {"type": "integer"},
                }
            }
        },
    }
    session.request.return_value = make_response(200, "[]")
    dispatcher = CallDispatcher(spec, base_url="http://api", session=session)

    with pytest.raises(MissingArgumentError):
        dispatcher.dispatch(FunctionCall(name="listItems"))

    dispatcher.dispatch(FunctionCall(name="listItems", arguments={"limit": 5.0}))
    assert session.request.call_args[1]["params"] == {"limit": 5}


def test_base_url_required(session):
    with pytest.raises(ConfigurationError):
        CallDispatcher({"paths": {}}, session=session)


def test_routes_are_read_only(products_spec, session):
    dispatcher = CallDispatcher(products_spec, session=session)

    assert "healthCheck" in dispatcher.operation_names
    with pytest.raises(TypeError):
        dispatcher._routes["healthCheck"] = None


def test_from_settings_overrides_server(products_spec, session):
    settings = Settings(_env_file=None, api_base_url="http://products:9000")

    dispatcher = CallDispatcher.from_settings(products_spec, settings, session=session)
    assert dispatcher.base_url == "http://products:9000"
