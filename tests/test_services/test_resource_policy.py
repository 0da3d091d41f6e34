# tests/test_services/test_resource_policy.py

import pytest

import glacier.services.resource_policy as policy
from glacier.core.exceptions import BadRequestException, InternalFaultException
from glacier.schemas.resources import ResourceKind, ResourceMeta, require_all_kinds
from tests.fixtures.tokens import SECRET, make_token

EXPORT = ResourceKind.EXPORT
THUMBNAIL = ResourceKind.THUMBNAIL


# ─────────────────────────────────────────────────────────────
# Tables
# ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("table", [policy.AUTH_REQUIRED, policy.CACHE_DURATION, policy.CONTENT_DIRS])
def test_every_kind_has_a_policy_entry(table):
    assert set(table) == set(ResourceKind)


def test_require_all_kinds_rejects_partial_tables():
    with pytest.raises(RuntimeError, match="THUMBNAIL"):
        require_all_kinds({EXPORT: True}, "partial")


# ─────────────────────────────────────────────────────────────
# validate_request
# ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "kind,raw,expected",
    [
        (EXPORT, "42", (42, True)),
        (EXPORT, "0", (0, True)),
        (THUMBNAIL, "5", (5, False)),
        (THUMBNAIL, "007", (7, False)),
        (EXPORT, "99999999999999999999", (99999999999999999999, True)),
    ],
)
def test_validate_request_accepts_plain_digits(kind, raw, expected):
    assert policy.validate_request(kind, raw) == expected


@pytest.mark.parametrize("raw", ["abc", "-1", "+1", "4.2", "1e3", " 42", "42 ", "", None, "٤٢", "0x2a"])
def test_validate_request_rejects_everything_else(raw):
    with pytest.raises(BadRequestException) as ei:
        policy.validate_request(EXPORT, raw)
    assert ei.value.status_code == 400
    assert ei.value.detail == '"id" must be a number'


def test_validate_request_without_auth_entry_is_internal_fault(monkeypatch, log_records):
    monkeypatch.delitem(policy.AUTH_REQUIRED, THUMBNAIL)
    with pytest.raises(InternalFaultException) as ei:
        policy.validate_request(THUMBNAIL, "5")
    assert ei.value.status_code == 500
    assert any(r["level"].name == "ERROR" and r["extra"].get("id") == 5 for r in log_records)


# ─────────────────────────────────────────────────────────────
# authorize
# ─────────────────────────────────────────────────────────────

META = ResourceMeta(film_id=7, mime="video/mp4", filename="cut.mp4")


def _authorize(kind, tokens, secret=SECRET, **kw):
    return policy.authorize(kind, META, tokens, secret=secret, **kw)


def test_public_kind_is_always_authorised():
    assert _authorize(THUMBNAIL, []) is True
    assert _authorize(THUMBNAIL, ["garbage"], secret=None) is True


def test_export_with_matching_token_is_authorised():
    assert _authorize(EXPORT, [make_token(7)]) is True


@pytest.mark.parametrize(
    "tokens",
    [
        [],
        [""],
        ["garbage"],
        [make_token(8)],
        [make_token(7, secret="other")],
        [make_token(7), make_token(7)],
    ],
    ids=["none", "empty", "garbage", "other-film", "bad-signature", "repeated"],
)
def test_export_denials(tokens):
    assert _authorize(EXPORT, tokens) is False


def test_export_denied_without_secret():
    assert _authorize(EXPORT, [make_token(7)], secret=None) is False


def test_export_honours_algorithm_allow_list():
    token = make_token(7, algorithm="HS512")
    assert _authorize(EXPORT, [token]) is False
    assert _authorize(EXPORT, [token], algorithms=("HS512",)) is True


def test_protected_kind_without_check_is_internal_fault(monkeypatch):
    monkeypatch.delitem(policy._AUTH_CHECKS, EXPORT)
    with pytest.raises(InternalFaultException):
        _authorize(EXPORT, [make_token(7)])


def test_claims_match_compares_owning_film():
    claims = policy.verify_download_token(make_token(7), SECRET)
    assert policy.claims_match(claims, META) is True
    assert policy.claims_match(claims, ResourceMeta(film_id=70)) is False


# ─────────────────────────────────────────────────────────────
# caching
# ─────────────────────────────────────────────────────────────

def test_cache_durations():
    assert policy.cache_duration(EXPORT) is None
    assert policy.cache_duration(THUMBNAIL) == 600


@pytest.mark.parametrize("seconds,expected", [(600, "max-age=600"), (1, "max-age=1"), (None, None), (0, None), (-5, None)])
def test_cache_control_header_value(seconds, expected):
    assert policy.cache_control(seconds) == expected


# ─────────────────────────────────────────────────────────────
# resolve_path
# ─────────────────────────────────────────────────────────────

def test_resolve_path_per_kind(tmp_path):
    assert policy.resolve_path(EXPORT, 42, root=tmp_path) == tmp_path / "exports" / "42"
    assert policy.resolve_path(THUMBNAIL, 5, root=str(tmp_path)) == tmp_path / "thumbs" / "5"


def test_resolve_path_unknown_kind_logs_and_faults(monkeypatch, tmp_path, log_records):
    monkeypatch.delitem(policy.CONTENT_DIRS, EXPORT)
    with pytest.raises(InternalFaultException):
        policy.resolve_path(EXPORT, 42, root=tmp_path, film_id=7)

    errors = [r for r in log_records if r["level"].name == "ERROR"]
    assert errors and errors[-1]["message"] == "Failed to generate glacier content path"
    assert errors[-1]["extra"]["id"] == 42
    assert errors[-1]["extra"]["film_id"] == 7
    assert errors[-1]["extra"]["kind"] == "export"


def test_fault_logs_write_kind_as_its_value(monkeypatch, log_records):
    monkeypatch.delitem(policy.AUTH_REQUIRED, THUMBNAIL)
    with pytest.raises(InternalFaultException):
        policy.validate_request(THUMBNAIL, "5")

    monkeypatch.delitem(policy._AUTH_CHECKS, EXPORT)
    with pytest.raises(InternalFaultException):
        _authorize(EXPORT, [make_token(7)])

    kinds = [r["extra"]["kind"] for r in log_records if r["level"].name == "ERROR"]
    assert kinds == ["thumbnail", "export"]
    assert all(type(k) is str for k in kinds)
