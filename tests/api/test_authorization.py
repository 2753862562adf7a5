from __future__ import annotations

import pytest
from starlette.requests import Request

from app.api.authorization import (
    AuthorizationGate,
    build_gate,
    require_authorization,
)
from app.core.errors import AuthorizationDenied
from app.services.admin_session import SafeModeAdminCheck, SessionAdminCheck
from app.services.passcodes import BearerPasscode, SystemPasscode
from tests.conftest import make_request, make_settings


class _Stub:
    def __init__(self, scheme: str, result: bool) -> None:
        self.scheme = scheme
        self.result = result
        self.calls = 0

    def is_valid(self, request: Request) -> bool:
        self.calls += 1
        return self.result


def test_any_passing_validator_authorizes() -> None:
    for passing in range(3):
        stubs = tuple(_Stub(f"s{i}", i == passing) for i in range(3))
        assert AuthorizationGate(stubs).authorize(make_request()) == f"s{passing}"


def test_no_passing_validator_denies() -> None:
    gate = AuthorizationGate((_Stub("a", False), _Stub("b", False)))
    assert gate.authorize(make_request()) is None


def test_evaluation_stops_at_first_success() -> None:
    first, second, third = _Stub("a", False), _Stub("b", True), _Stub("c", True)
    AuthorizationGate((first, second, third)).authorize(make_request())
    assert (first.calls, second.calls, third.calls) == (1, 1, 0)


def test_check_raises_forbidden() -> None:
    gate = AuthorizationGate((_Stub("a", False),))
    with pytest.raises(AuthorizationDenied) as excinfo:
        gate.check(make_request())
    assert excinfo.value.status_code == 403
    assert excinfo.value.detail == "Insufficient privileges"


def test_check_returns_matching_scheme() -> None:
    assert AuthorizationGate((_Stub("a", True),)).check(make_request()) == "a"


def test_empty_gate_denies() -> None:
    with pytest.raises(AuthorizationDenied):
        AuthorizationGate(()).check(make_request())


def test_require_authorization_wraps_the_gate() -> None:
    guard = require_authorization(AuthorizationGate((_Stub("a", True),)))
    assert guard(make_request()) == "a"

    guard = require_authorization(AuthorizationGate((_Stub("a", False),)))
    with pytest.raises(AuthorizationDenied):
        guard(make_request())


def test_build_gate_order_in_safe_mode() -> None:
    gate = build_gate(make_settings(safe_mode=True))
    kinds = [type(v) for v in gate.validators]
    assert kinds == [SystemPasscode, SafeModeAdminCheck, BearerPasscode]


def test_build_gate_uses_session_check_in_full_mode() -> None:
    gate = build_gate(make_settings(safe_mode=False))
    assert isinstance(gate.validators[1], SessionAdminCheck)


def test_denial_is_logged_without_credentials(caplog: pytest.LogCaptureFixture) -> None:
    gate = build_gate(make_settings())
    request = make_request(
        {
            "X-System-Passcode": "guessed-passcode",
            "Authorization": "Bearer guessed-token",
        }
    )
    with caplog.at_level("DEBUG"), pytest.raises(AuthorizationDenied):
        gate.check(request)
    assert "Access denied" in caplog.text
    assert "guessed-passcode" not in caplog.text
    assert "guessed-token" not in caplog.text
