"""Tests for shared service helpers."""

from musicbridge.enums import ResultStatus
from musicbridge.result import Result
from musicbridge.services.base import batched, carry_over, fetch_payload, unique


class TestFetchPayload:
    def test_found(self, session, fake_api):
        fake_api.respond("GET", "/v1/me", fake_api.ok({"id": "user123"}))
        result = fetch_payload(session, "/v1/me", required_key="id")
        assert result.value == {"id": "user123"}

    def test_missing_required_key(self, session, fake_api):
        fake_api.respond("GET", "/v1/me", fake_api.ok({"id": ""}))
        result = fetch_payload(session, "/v1/me", required_key="id")
        assert result.status == ResultStatus.NOT_AVAILABLE

    def test_non_200_success_is_not_available(self, session, fake_api):
        fake_api.respond("GET", "/v1/me", fake_api.ok({"id": "x"}, status=202))
        assert fetch_payload(session, "/v1/me").status == ResultStatus.NOT_AVAILABLE

    def test_non_dict_body(self, session, fake_api):
        fake_api.respond("GET", "/v1/me", fake_api.ok(["not", "a", "dict"]))
        assert fetch_payload(session, "/v1/me").status == ResultStatus.NOT_AVAILABLE

    def test_failure_carried_over(self, session, fake_api):
        fake_api.respond("GET", "/v1/me", fake_api.error(500))
        result = fetch_payload(session, "/v1/me")
        assert result.is_failed
        assert result.reason == "HTTP 500"
        assert result.status_code == 500

    def test_no_content_keeps_status(self, session, fake_api):
        fake_api.respond("GET", "/v1/me/player", fake_api.ok(None, status=204))
        result = fetch_payload(session, "/v1/me/player")
        assert result.status == ResultStatus.NOT_AVAILABLE
        assert result.status_code == 204


class TestHelpers:
    def test_carry_over_drops_value(self):
        result = carry_over(Result.failed("boom", status_code=503))
        assert result.is_failed
        assert result.reason == "boom"
        assert result.status_code == 503

    def test_batched(self):
        assert list(batched(list(range(5)), 2)) == [[0, 1], [2, 3], [4]]

    def test_batched_empty(self):
        assert list(batched([], 50)) == []

    def test_unique_keeps_order(self):
        assert unique(["b", "a", "b", "", "c", "a"]) == ["b", "a", "c"]
