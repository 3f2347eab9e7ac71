"""
Tests for translating Google API errors into error kinds.
"""

from meet_recorder.errors import (
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    from_http_error,
)


class TestFromHttpError:
    def test_not_found(self, http_error):
        error = from_http_error(http_error(404, "File not found"), "recording file-1")

        assert isinstance(error, NotFoundError)
        assert error.status_code == 404
        assert error.details["error"]["message"] == "File not found"

    def test_unauthorized(self, http_error):
        error = from_http_error(http_error(401, "Invalid Credentials"), "Drive files")

        assert isinstance(error, UnauthorizedError)
        assert error.status_code == 401

    def test_missing_scope(self, http_error):
        error = from_http_error(
            http_error(403, "Request had insufficient authentication scopes.", "insufficientPermissions"),
            "Drive files",
        )

        assert isinstance(error, UnauthorizedError)

    def test_quota_is_upstream_failure(self, http_error):
        error = from_http_error(http_error(403, "Rate Limit Exceeded", "rateLimitExceeded"), "Drive files")

        assert type(error) is UpstreamError
        assert error.upstream_status == 403
        assert error.status_code == 502

    def test_server_error_keeps_body(self, http_error):
        error = from_http_error(http_error(500, "Backend Error"), "calendar events")

        assert isinstance(error, UpstreamError)
        assert error.to_dict() == {
            "error": "Google API error while accessing calendar events",
            "details": error.details,
        }
        assert error.details["error"]["code"] == 500
