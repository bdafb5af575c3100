"""Tests for the Spoonacular API client.

Tests use a mocked requests session to avoid hitting real endpoints.
"""

from unittest.mock import Mock

import pytest
import requests

from recipe_finder.data_layer.exceptions import ConfigurationError, ErrorCode, ProviderError
from recipe_finder.ingestion.spoonacular_client import SpoonacularClient


def make_response(status_code=200, payload=None, json_error=False):
    response = Mock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("bad json")
    else:
        response.json.return_value = payload
    return response


class TestSpoonacularClient:
    """Tests for SpoonacularClient API interactions."""

    @pytest.fixture
    def session(self):
        return Mock()

    @pytest.fixture
    def client(self, session):
        return SpoonacularClient(api_key="TEST_KEY", timeout=5, session=session)

    # === Configuration ===

    @pytest.mark.parametrize("key", ["", "   ", None])
    def test_requires_api_key(self, key):
        with pytest.raises(ConfigurationError):
            SpoonacularClient(api_key=key)

    # === Successful requests ===

    def test_find_by_ingredients_params(self, client, session):
        session.get.return_value = make_response(payload=[{"id": 1}])

        result = client.find_by_ingredients(["eggs", "milk"])

        assert result == [{"id": 1}]
        args, kwargs = session.get.call_args
        assert args[0] == "https://api.spoonacular.com/recipes/findByIngredients"
        assert kwargs["params"] == {
            "ingredients": "eggs,milk",
            "number": 12,
            "ranking": 1,
            "ignorePantry": "true",
            "apiKey": "TEST_KEY",
        }
        assert kwargs["timeout"] == 5

    def test_random_recipes_unwraps_list(self, client, session):
        session.get.return_value = make_response(payload={"recipes": [{"id": 7}]})
        assert client.get_random_recipes() == [{"id": 7}]
        assert session.get.call_args[1]["params"]["number"] == 12

    def test_recipe_information(self, client, session):
        session.get.return_value = make_response(payload={"id": 716429})

        assert client.get_recipe_information("716429") == {"id": 716429}
        args, kwargs = session.get.call_args
        assert args[0].endswith("/recipes/716429/information")
        assert kwargs["params"]["includeNutrition"] == "false"

    def test_search_ingredients(self, client, session):
        session.get.return_value = make_response(payload={"results": [{"id": 1, "name": "tomato"}]})

        assert client.search_ingredients("tom") == [{"id": 1, "name": "tomato"}]
        params = session.get.call_args[1]["params"]
        assert params["query"] == "tom"
        assert params["number"] == 10

    def test_search_ingredients_missing_results(self, client, session):
        session.get.return_value = make_response(payload={})
        assert client.search_ingredients("tom") == []

    # === Failures ===

    def test_timeout(self, client, session):
        session.get.side_effect = requests.exceptions.Timeout()
        with pytest.raises(ProviderError) as exc_info:
            client.find_by_ingredients(["eggs"])
        assert exc_info.value.error_code == "TIMEOUT"
        assert exc_info.value.code == ErrorCode.PROVIDER_FAILURE

    def test_connection_error(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError()
        with pytest.raises(ProviderError) as exc_info:
            client.find_by_ingredients(["eggs"])
        assert exc_info.value.error_code == "CONNECTION_ERROR"

    @pytest.mark.parametrize("status, code", [
        (429, "RATE_LIMITED"),
        (404, "NOT_FOUND"),
        (401, "API_ERROR"),
        (500, "API_ERROR"),
    ])
    def test_http_errors(self, client, session, status, code):
        session.get.return_value = make_response(status_code=status)
        with pytest.raises(ProviderError) as exc_info:
            client.get_recipe_information("1")
        assert exc_info.value.error_code == code
        assert exc_info.value.status_code == status

    def test_malformed_json(self, client, session):
        session.get.return_value = make_response(json_error=True)
        with pytest.raises(ProviderError) as exc_info:
            client.get_random_recipes()
        assert exc_info.value.error_code == "INVALID_RESPONSE"

    def test_unexpected_shape(self, client, session):
        session.get.return_value = make_response(payload={"not": "a list"})
        with pytest.raises(ProviderError) as exc_info:
            client.find_by_ingredients(["eggs"])
        assert exc_info.value.error_code == "INVALID_RESPONSE"
