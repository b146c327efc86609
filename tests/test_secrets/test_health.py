"""Tests for remote credential checks."""

from unittest.mock import Mock

from infraagent.exceptions import ExternalServiceError
from infraagent.secrets.health import check_services


class TestCheckServices:
    """Test check_services result aggregation."""

    def test_success(self, fixed_clock):
        verifier = Mock(return_value="octocat")

        results = check_services({"github": "ghp_x"}, {"github": verifier}, clock=fixed_clock)

        verifier.assert_called_once_with("ghp_x")
        assert len(results) == 1
        assert results[0].ok is True
        assert results[0].detail == "Connected as octocat"
        assert results[0].checked_at == fixed_clock()

    def test_failure_is_isolated(self):
        secrets = {"github": "ghp_x", "vercel": "v", "stripe": {"secretKey": "sk"}}
        verifiers = {
            "github": Mock(return_value="octocat"),
            "vercel": Mock(side_effect=ExternalServiceError("vercel rejected the token", status_code=403)),
            "stripe": Mock(return_value="acct_1"),
        }

        results = check_services(secrets, verifiers)

        assert [r.service for r in results] == ["github", "vercel", "stripe"]
        assert [r.ok for r in results] == [True, False, True]
        assert "HTTP 403" in results[1].detail
        verifiers["stripe"].assert_called_once_with({"secretKey": "sk"})

    def test_unexpected_exception_recorded(self):
        results = check_services({"github": "t"}, {"github": Mock(side_effect=RuntimeError("boom"))})

        assert results[0].ok is False
        assert results[0].detail == "Unexpected error: boom"

    def test_service_without_verifier_skipped(self):
        results = check_services({"netlify": "t"}, {})

        assert results[0].ok is True
        assert results[0].skipped is True

    def test_empty_vault(self):
        assert check_services({}, {"github": Mock()}) == []
