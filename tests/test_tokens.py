"""
Tests for JWT issuance and verification.
"""

import base64
import json
import string

import jwt
import pytest

from auth.errors import BadSignature, ConfigurationError, MalformedToken, TokenExpired
from auth.tokens import DEFAULT_LIFETIME_SECONDS, TokenIssuer, TokenVerifier
from utils.schemas import UserIdentity

SECRET = "test-secret-key-that-is-long-enough-for-hs256"
ISSUED_AT = 1_700_000_000
B64URL = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-_"

ALICE = UserIdentity(username="alice12", email="alice@example.com")


def _issue(**kwargs) -> str:
    return TokenIssuer(SECRET, clock=lambda: ISSUED_AT).issue(ALICE, **kwargs)


def _verifier(now: float = ISSUED_AT) -> TokenVerifier:
    return TokenVerifier(SECRET, clock=lambda: now)


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestTokenIssuer:
    def test_payload_has_subject_and_seven_day_window(self):
        token = _issue()
        payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
        assert payload["sub"] == "alice12"
        assert payload["iat"] == ISSUED_AT
        assert payload["exp"] == ISSUED_AT + 7 * 24 * 60 * 60
        assert DEFAULT_LIFETIME_SECONDS == 604800

    def test_three_base64url_segments(self):
        token = _issue()
        segments = token.split(".")
        assert len(segments) == 3
        for segment in segments:
            assert set(segment) <= set(B64URL)
        assert jwt.get_unverified_header(token) == {"alg": "HS256", "typ": "JWT"}

    def test_extra_claims_cannot_override_reserved(self):
        token = _issue(extra_claims={"sub": "mallory", "exp": 1, "role": "member"})
        payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
        assert payload["sub"] == "alice12"
        assert payload["exp"] == ISSUED_AT + DEFAULT_LIFETIME_SECONDS
        assert payload["role"] == "member"

    def test_password_hash_never_in_payload(self):
        token = _issue()
        payload = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
        assert set(payload) == {"sub", "iat", "exp"}

    def test_empty_secret_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            TokenIssuer("")
        with pytest.raises(ConfigurationError):
            TokenVerifier("")


class TestTokenVerifier:
    def test_round_trip_resolves_subject(self):
        claims = _verifier().verify(_issue())
        assert claims.sub == "alice12"
        assert claims.exp - claims.iat == DEFAULT_LIFETIME_SECONDS

    def test_verification_is_repeatable(self):
        token = _issue()
        verifier = _verifier(ISSUED_AT + 60)
        assert verifier.verify(token) == verifier.verify(token)

    def test_valid_one_second_before_expiry(self):
        claims = _verifier(ISSUED_AT + DEFAULT_LIFETIME_SECONDS - 1).verify(_issue())
        assert claims.sub == "alice12"

    def test_expired_at_exact_expiry(self):
        with pytest.raises(TokenExpired):
            _verifier(ISSUED_AT + DEFAULT_LIFETIME_SECONDS).verify(_issue())

    def test_expired_one_second_after_expiry(self):
        with pytest.raises(TokenExpired):
            _verifier(ISSUED_AT + DEFAULT_LIFETIME_SECONDS + 1).verify(_issue())

    def test_every_signature_character_mutation_is_rejected(self):
        token = _issue()
        header, payload, signature = token.split(".")
        verifier = _verifier()
        for i, ch in enumerate(signature):
            for replacement in (B64URL[(B64URL.index(ch) + 1) % 64], B64URL[(B64URL.index(ch) + 32) % 64]):
                mutated = signature[:i] + replacement + signature[i + 1:]
                with pytest.raises(BadSignature):
                    verifier.verify(f"{header}.{payload}.{mutated}")

    @pytest.mark.parametrize("replacement", [".", "!", "=", "+", "/"])
    def test_non_base64url_signature_character_is_bad_signature(self, replacement):
        header, payload, signature = _issue().split(".")
        verifier = _verifier()
        for i in (0, len(signature) // 2, len(signature) - 1):
            mutated = signature[:i] + replacement + signature[i + 1:]
            with pytest.raises(BadSignature):
                verifier.verify(f"{header}.{payload}.{mutated}")

    def test_extra_segment_after_valid_token_is_bad_signature(self):
        with pytest.raises(BadSignature):
            _verifier().verify(_issue() + ".c2ln")

    def test_wrong_secret_is_bad_signature(self):
        token = TokenIssuer("another-secret-key-that-is-long-enough-x", clock=lambda: ISSUED_AT).issue(ALICE)
        with pytest.raises(BadSignature):
            _verifier().verify(token)

    def test_tampered_payload_is_bad_signature(self):
        header, _, signature = _issue().split(".")
        forged = _b64({"sub": "bob99", "iat": ISSUED_AT, "exp": ISSUED_AT + 10})
        with pytest.raises(BadSignature):
            _verifier().verify(f"{header}.{forged}.{signature}")

    def test_unsigned_token_is_rejected(self):
        header = _b64({"alg": "none", "typ": "JWT"})
        payload = _b64({"sub": "alice12", "iat": ISSUED_AT, "exp": ISSUED_AT + 10})
        with pytest.raises(BadSignature):
            _verifier().verify(f"{header}.{payload}.c2ln")

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "not-a-token",
            "a.b",
            "a.b.c.d",
            "..",
            "!!!.???.sig",
            _b64({"alg": "HS256"}) + ".bm90LWpzb24." + "c2ln",
            _b64({"alg": "HS256"}) + "." + base64.urlsafe_b64encode(b"[1, 2]").decode() + ".c2ln",
        ],
    )
    def test_malformed_tokens(self, token):
        with pytest.raises(MalformedToken):
            _verifier().verify(token)

    def test_missing_claims_are_malformed(self):
        token = jwt.encode({"sub": "alice12", "iat": ISSUED_AT}, SECRET, algorithm="HS256")
        with pytest.raises(MalformedToken):
            _verifier().verify(token)

    def test_non_integer_expiry_is_malformed(self):
        token = jwt.encode(
            {"sub": "alice12", "iat": ISSUED_AT, "exp": "tomorrow"},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(MalformedToken):
            _verifier().verify(token)
