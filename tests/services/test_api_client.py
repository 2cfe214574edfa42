"""
Unit tests for PrinterAPIClient.

Tests cover:
- Recommendation request body and response decoding
- Transport, status and decode failures mapped to GatewayError subclasses
- Catalog endpoints and query parameters
- Authorization header handling
"""

import pytest
import requests
from unittest.mock import patch, MagicMock

from printer_buddy.schemas.catalog import (
    DifficultyLevel,
    MaterialFilters,
    MaterialType,
    PrinterFilters,
    TroubleshootingFilters,
)
from printer_buddy.schemas.quiz import QuizAnswers, SkillLevel, UseCase
from printer_buddy.services.api_client import (
    DecodeError,
    GatewayError,
    HTTPStatusError,
    NetworkError,
    PrinterAPIClient,
)


BASE_URL = "http://buddy.test:8000"


# =============================================================================
# Test Fixtures
# =============================================================================

def make_response(body=None, status_code=200, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    response.text = "" if body is None else str(body)
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = body
    return response


PRINTER = {
    "id": 1,
    "name": "Bambu Lab P1S",
    "manufacturer": "Bambu Lab",
    "price": 699.0,
    "printer_type": "fdm",
    "build_volume_x": 256,
    "build_volume_y": 256,
    "build_volume_z": 256,
    "enclosure": True,
    "auto_leveling": True,
    "motion_system": "corexy",
}


@pytest.fixture
def client():
    return PrinterAPIClient(base_url=BASE_URL + "/", timeout=5, token="")


@pytest.fixture
def answers():
    return QuizAnswers(skill_level=SkillLevel.BEGINNER, use_case=UseCase.HOBBY)


# =============================================================================
# Recommendations
# =============================================================================

class TestRecommendationRequest:
    """Tests for POST /printers/recommend."""

    @patch("printer_buddy.services.api_client.requests.post")
    def test_sends_answers_as_json(self, mock_post, client, answers):
        mock_post.return_value = make_response([])

        client.post_recommendation_request(answers)

        args, kwargs = mock_post.call_args
        assert args[0] == f"{BASE_URL}/printers/recommend"
        assert kwargs["json"] == {
            "skill_level": "beginner",
            "use_case": "hobby",
            "budget_min": 100,
            "budget_max": 1000,
            "prefer_enclosure": False,
            "prefer_auto_leveling": True,
        }
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["Accept"] == "application/json"

    @patch("printer_buddy.services.api_client.requests.post")
    def test_decodes_results(self, mock_post, client, answers):
        mock_post.return_value = make_response([
            {"printer": PRINTER, "match_score": 87, "reasons": ["Matches your budget"]}
        ])

        results = client.post_recommendation_request(answers)

        assert len(results) == 1
        assert results[0].match_score == 87
        assert results[0].reasons == ("Matches your budget",)
        assert results[0].printer.name == "Bambu Lab P1S"
        assert results[0].id == 1

    @patch("printer_buddy.services.api_client.requests.post")
    def test_float_score_decodes(self, mock_post, client, answers):
        mock_post.return_value = make_response([
            {"printer": PRINTER, "match_score": 87.0, "reasons": ["Matches your budget"]}
        ])

        results = client.post_recommendation_request(answers)

        assert results[0].match_score == 87

    @patch("printer_buddy.services.api_client.requests.post")
    def test_empty_list_is_not_an_error(self, mock_post, client, answers):
        mock_post.return_value = make_response([])
        assert client.post_recommendation_request(answers) == []

    @patch("printer_buddy.services.api_client.requests.post")
    def test_incomplete_answers_send_nothing(self, mock_post, client):
        with pytest.raises(ValueError):
            client.post_recommendation_request(QuizAnswers(skill_level=SkillLevel.BEGINNER))
        mock_post.assert_not_called()


# =============================================================================
# Error Mapping
# =============================================================================

class TestErrorMapping:
    """Tests for transport, status and decoding failures."""

    @patch("printer_buddy.services.api_client.requests.post")
    def test_timeout(self, mock_post, client, answers):
        mock_post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(NetworkError) as exc:
            client.post_recommendation_request(answers)

        assert str(exc.value) == "Request timed out after 5s"
        assert exc.value.endpoint == "/printers/recommend"

    @patch("printer_buddy.services.api_client.requests.post")
    def test_connection_refused(self, mock_post, client, answers):
        mock_post.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NetworkError) as exc:
            client.post_recommendation_request(answers)

        assert BASE_URL in str(exc.value)

    @patch("printer_buddy.services.api_client.requests.post")
    def test_http_500(self, mock_post, client, answers):
        mock_post.return_value = make_response({"detail": "boom"}, status_code=500)

        with pytest.raises(HTTPStatusError) as exc:
            client.post_recommendation_request(answers)

        assert exc.value.status_code == 500
        assert str(exc.value) == "Server returned HTTP 500"
        assert isinstance(exc.value, NetworkError)

    @patch("printer_buddy.services.api_client.requests.post")
    def test_non_json_body(self, mock_post, client, answers):
        mock_post.return_value = make_response(json_error=True)

        with pytest.raises(DecodeError, match="not valid JSON"):
            client.post_recommendation_request(answers)

    @pytest.mark.parametrize("body", [
        {"results": []},
        [{"match_score": 80}],
        [{"printer": PRINTER, "match_score": "high"}],
        [{"printer": PRINTER, "match_score": 140}],
        [{"printer": {"id": 1, "name": "No price"}, "match_score": 50}],
    ])
    @patch("printer_buddy.services.api_client.requests.post")
    def test_unexpected_shapes(self, mock_post, body, client, answers):
        mock_post.return_value = make_response(body)

        with pytest.raises(DecodeError):
            client.post_recommendation_request(answers)

    def test_all_errors_share_base_class(self):
        for cls in (NetworkError, HTTPStatusError, DecodeError):
            assert issubclass(cls, GatewayError)


# =============================================================================
# Catalog Endpoints
# =============================================================================

class TestCatalog:
    """Tests for the catalog GET endpoints."""

    @patch("printer_buddy.services.api_client.requests.get")
    def test_health(self, mock_get, client):
        mock_get.return_value = make_response({"status": "healthy"})
        assert client.check_health() == "healthy"
        assert mock_get.call_args[0][0] == f"{BASE_URL}/health"

    @patch("printer_buddy.services.api_client.requests.get")
    def test_printers_with_filters(self, mock_get, client):
        mock_get.return_value = make_response([PRINTER])

        printers = client.fetch_printers(PrinterFilters(price_max=800, has_enclosure=True))

        assert printers[0].motion_system_display == "CoreXY"
        assert mock_get.call_args[1]["params"] == [("price_max", "800"), ("has_enclosure", "true")]

    @patch("printer_buddy.services.api_client.requests.get")
    def test_printers_without_filters_sends_no_params(self, mock_get, client):
        mock_get.return_value = make_response([])
        client.fetch_printers()
        assert mock_get.call_args[1]["params"] is None

    @patch("printer_buddy.services.api_client.requests.get")
    def test_printer_detail(self, mock_get, client):
        mock_get.return_value = make_response(dict(PRINTER, materials=["PLA", "PETG"], description="Fast"))

        printer = client.fetch_printer(1)

        assert mock_get.call_args[0][0] == f"{BASE_URL}/printers/1"
        assert printer.materials == ("PLA", "PETG")
        assert printer.description == "Fast"

    @patch("printer_buddy.services.api_client.requests.get")
    def test_materials(self, mock_get, client):
        mock_get.return_value = make_response([{
            "id": 3,
            "name": "PETG",
            "full_name": "Polyethylene Terephthalate Glycol",
            "material_type": "fdm",
            "difficulty_level": "intermediate",
            "print_temp_min": 230,
            "print_temp_max": 250,
        }])

        materials = client.fetch_materials(
            MaterialFilters(material_type=MaterialType.FDM, difficulty_level=DifficultyLevel.INTERMEDIATE)
        )

        assert materials[0].temperature_range == "230–250°C"
        assert mock_get.call_args[1]["params"] == [
            ("material_type", "fdm"), ("difficulty_level", "intermediate")
        ]

    @patch("printer_buddy.services.api_client.requests.get")
    def test_troubleshooting_search(self, mock_get, client):
        mock_get.return_value = make_response([{
            "id": 9,
            "name": "Stringing",
            "description": "Thin strands between parts",
            "printer_type": "fdm",
            "difficulty_level": "beginner",
            "symptoms": ["Wisps", "Hairs", "Blobs"],
        }])

        issues = client.fetch_troubleshooting(TroubleshootingFilters(search="string"))

        assert issues[0].symptoms_preview == "Wisps, Hairs"
        assert mock_get.call_args[1]["params"] == [("search", "string")]

    @patch("printer_buddy.services.api_client.requests.get")
    def test_troubleshooting_issue_detail(self, mock_get, client):
        mock_get.return_value = make_response({
            "id": 9,
            "name": "Stringing",
            "description": "Thin strands between parts",
            "printer_type": "fdm",
            "difficulty_level": "beginner",
            "causes": ["Retraction too short"],
            "solutions": [{"step": 1, "title": "Tune retraction", "description": "Increase distance"}],
        })

        issue = client.fetch_troubleshooting_issue(9)

        assert issue.causes == ("Retraction too short",)
        assert issue.solutions[0].title == "Tune retraction"

    @patch("printer_buddy.services.api_client.requests.get")
    def test_http_404(self, mock_get, client):
        mock_get.return_value = make_response({"detail": "Not found"}, status_code=404)

        with pytest.raises(HTTPStatusError) as exc:
            client.fetch_material(99)

        assert exc.value.endpoint == "/materials/99"


# =============================================================================
# Authorization
# =============================================================================

class TestAuthorization:
    """Tests for bearer token handling."""

    @patch("printer_buddy.services.api_client.requests.get")
    def test_token_sent_as_bearer(self, mock_get):
        mock_get.return_value = make_response({"status": "ok"})
        PrinterAPIClient(base_url=BASE_URL, timeout=5, token="s3cret").check_health()
        assert mock_get.call_args[1]["headers"]["Authorization"] == "Bearer s3cret"

    @patch("printer_buddy.services.api_client.requests.get")
    def test_no_header_without_token(self, mock_get, client):
        mock_get.return_value = make_response({"status": "ok"})
        client.check_health()
        assert "Authorization" not in mock_get.call_args[1]["headers"]

    @patch("printer_buddy.services.api_client.config_manager")
    @patch("printer_buddy.services.api_client.requests.get")
    def test_token_read_from_keyring_when_not_given(self, mock_get, mock_config):
        mock_config.get_api_token.return_value = "from-keyring"
        mock_get.return_value = make_response({"status": "ok"})

        PrinterAPIClient(base_url=BASE_URL, timeout=5).check_health()

        assert mock_get.call_args[1]["headers"]["Authorization"] == "Bearer from-keyring"
