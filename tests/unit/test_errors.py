"""Unit tests for error codes and exceptions"""
from uuid import uuid4

from rankriot.errors import ErrorCodeDictionary
from rankriot.exceptions import (
    CrawlerConfigurationError,
    CrawlerError,
    CrawlerResponseError,
    PlanLimitError,
    ProjectAccessError,
    ProjectTypeError,
)


class TestErrorCodeDictionary:
    """Tests for the error code registry"""

    def test_lookup(self):
        """Test codes are found by their string id"""
        assert ErrorCodeDictionary.get_error("PROJECT_001") is ErrorCodeDictionary.PROJECT_001
        assert ErrorCodeDictionary.get_error("NOPE_999") is None

    def test_category(self):
        """Test codes are grouped by prefix"""
        codes = {e.code for e in ErrorCodeDictionary.get_errors_by_category("crawler")}
        assert codes == {"CRAWLER_001", "CRAWLER_002", "CRAWLER_003", "CRAWLER_004"}


class TestExceptions:
    """Tests for exception payloads"""

    def test_project_access_error(self):
        """Test ownership failures carry the entity id"""
        project_id = uuid4()
        body = ProjectAccessError(entity_id=project_id).to_dict()

        assert body["code"] == "PROJECT_001"
        assert body["entity_id"] == str(project_id)
        assert body["message"] == "Project not found or you do not have permission to access it"

    def test_plan_limit_context(self):
        """Test plan limit errors report the plan and limit"""
        body = PlanLimitError(plan="free", limit=2).to_dict()
        assert body["code"] == "PLAN_001"
        assert body["context"] == {"plan": "free", "limit": 2}

    def test_message_override(self):
        """Test a specific message replaces the default one"""
        error = CrawlerResponseError(status_code=500, message="Crawler exploded")
        assert error.message == "Crawler exploded"
        assert error.status_code == 500
        assert isinstance(error, CrawlerError)

    def test_configuration_error_default(self):
        """Test the configuration error names the missing setting"""
        assert "CRAWLER_API_URL" in CrawlerConfigurationError().message

    def test_project_type_error(self):
        """Test type mismatches use the code they are raised with"""
        error = ProjectTypeError(ErrorCodeDictionary.PROJECT_002)
        assert error.to_dict()["code"] == "PROJECT_002"
