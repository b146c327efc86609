"""Tests for token shape validation."""

import pytest

from infraagent.exceptions import SecretsError, ValidationError
from infraagent.secrets.validators import TokenValidator, validate_token

VALID_TOKENS = {
    "github": "ghp_" + "A1b2" * 9,
    "vercel": "v" * 24,
    "supabase": "s" * 48,
    "cloudflare": "c" * 40,
    "stripe": "sk_test_" + "x" * 24,
}


class TestTokenValidator:
    """Test TokenValidator against the built-in shapes."""

    @pytest.fixture
    def validator(self):
        return TokenValidator()

    @pytest.mark.parametrize("service,token", sorted(VALID_TOKENS.items()))
    def test_valid_tokens_accepted(self, validator, service, token):
        validator.validate(service, token)

    def test_github_short_token_rejected(self, validator):
        with pytest.raises(ValidationError, match="Invalid github token format"):
            validator.validate("github", "ghp_short")

    def test_error_names_expected_shape(self, validator):
        with pytest.raises(ValidationError) as exc_info:
            validator.validate("github", "ghp_short")

        assert "36" in exc_info.value.message

    def test_github_wrong_prefix_rejected(self, validator):
        with pytest.raises(ValidationError):
            validator.validate("github", "gho_" + "a" * 36)

    def test_github_token_with_trailing_data_rejected(self, validator):
        with pytest.raises(ValidationError):
            validator.validate("github", "ghp_" + "a" * 36 + "\n")

    def test_stripe_publishable_key_accepted(self, validator):
        validator.validate("stripe", "pk_live_" + "z" * 24)

    def test_stripe_restricted_key_rejected(self, validator):
        with pytest.raises(ValidationError):
            validator.validate("stripe", "rk_live_" + "z" * 24)

    def test_unknown_service_accepts_anything_non_empty(self, validator):
        validator.validate("netlify", "any shape at all!")

    def test_empty_token_rejected_for_unknown_service(self, validator):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validator.validate("netlify", "")

    def test_empty_token_rejected_for_known_service(self, validator):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validator.validate("github", "")

    def test_structured_credentials_checked_per_field(self, validator):
        validator.validate(
            "stripe",
            {
                "secretKey": "sk_live_" + "a" * 24,
                "publishableKey": "pk_live_" + "b" * 24,
                "webhookSecret": "whsec_anything",
            },
        )

    def test_structured_field_with_wrong_shape_rejected(self, validator):
        with pytest.raises(ValidationError, match="secretKey"):
            validator.validate("stripe", {"secretKey": "pk_live_" + "a" * 24})

    def test_structured_empty_field_rejected(self, validator):
        with pytest.raises(ValidationError, match="anonKey"):
            validator.validate("supabase", {"anonKey": ""})

    def test_structured_empty_mapping_rejected(self, validator):
        with pytest.raises(ValidationError):
            validator.validate("supabase", {})

    def test_register_custom_shape(self, validator):
        validator.register("netlify", r"nfp_[a-z0-9]{8}", "'nfp_' followed by 8 characters")

        validator.validate("netlify", "nfp_abcd1234")
        with pytest.raises(ValidationError, match="nfp_"):
            validator.validate("netlify", "wrong")

    def test_is_known(self, validator):
        assert validator.is_known("github") is True
        assert validator.is_known("netlify") is False

    def test_validation_error_is_secrets_error(self):
        with pytest.raises(SecretsError):
            validate_token("github", "ghp_short")
