"""Testes para twikey.session.manager.SessionManager.

Usa servidor fake (httpx.MockTransport) e relógio controlável: nenhum
teste depende de rede ou de sleep real para expiração.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from tests.fakes.fake_clock import FakeClock
from tests.fakes.fake_twikey_server import (
    API_KEY,
    FakeTwikeyServer,
    corrupt_gzip_response,
    form_of,
    make_stack,
)
from twikey.crypto import DecodeError
from twikey.session import EPOCH, SessionState
from twikey.utils.errors import TwikeySystemError, TwikeyUserError

PRIVATE_KEY = "0123456789ABCDEF0123456789ABCDEF"


class TestEnsureAuthenticated:
    """Fluxo de login e reutilização do token."""

    @pytest.mark.asyncio
    async def test_first_call_authenticates(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)

        token = await session.ensure_authenticated()

        assert token == "token-1"
        assert server.auth_count == 1
        assert session.state == SessionState(token="token-1", last_login=clock.now())

    @pytest.mark.asyncio
    async def test_auth_request_shape(self) -> None:
        """Login é POST form com apiToken e User-Agent configurado."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock, user_agent="billing-sync/1.0")

        await session.ensure_authenticated()

        request = server.auth_requests[0]
        assert request.method == "POST"
        assert request.url.path == "/creditor"
        assert request.headers["User-Agent"] == "billing-sync/1.0"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert form_of(request) == {"apiToken": [API_KEY]}

    @pytest.mark.asyncio
    async def test_fresh_token_reused_without_network(self) -> None:
        """Token com menos de 23h não gera nova chamada."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)

        await session.ensure_authenticated()
        clock.advance(hours=22, minutes=59, seconds=59)
        token = await session.ensure_authenticated()

        assert token == "token-1"
        assert server.auth_count == 1

    @pytest.mark.asyncio
    async def test_expired_token_triggers_exactly_one_login(self) -> None:
        """Após 23h o próximo chamador reautentica uma única vez."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)

        await session.ensure_authenticated()
        clock.advance(hours=23)
        token = await session.ensure_authenticated()
        again = await session.ensure_authenticated()

        assert token == again == "token-2"
        assert server.auth_count == 2
        assert session.state.last_login == clock.now()

    @pytest.mark.asyncio
    async def test_configurable_ttl(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock, token_ttl_seconds=60)

        await session.ensure_authenticated()
        clock.advance(seconds=61)
        await session.ensure_authenticated()

        assert server.auth_count == 2

    @pytest.mark.asyncio
    async def test_is_authenticated(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)

        assert session.is_authenticated() is False
        await session.ensure_authenticated()
        assert session.is_authenticated() is True
        clock.advance(hours=24)
        assert session.is_authenticated() is False


class TestOtp:
    """Segundo fator (OTP) no formulário de login."""

    @pytest.mark.asyncio
    async def test_otp_sent_when_private_key_configured(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock, private_key=PRIVATE_KEY)

        await session.ensure_authenticated()

        form = form_of(server.auth_requests[0])
        assert form["apiToken"] == [API_KEY]
        assert len(form["otp"]) == 1
        assert form["otp"][0].isdigit()

    @pytest.mark.asyncio
    async def test_otp_uses_injected_clock(self) -> None:
        """OTP é calculado com o instante do relógio injetado."""
        from twikey.crypto import generate_otp

        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock, private_key=PRIVATE_KEY)

        await session.ensure_authenticated()

        expected = generate_otp("own", PRIVATE_KEY, clock.now())
        assert form_of(server.auth_requests[0])["otp"] == [str(expected)]

    @pytest.mark.asyncio
    async def test_no_otp_without_private_key(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)

        await session.ensure_authenticated()

        assert "otp" not in form_of(server.auth_requests[0])

    @pytest.mark.asyncio
    async def test_invalid_private_key_fails_before_network(self) -> None:
        """Chave não-hex levanta DecodeError sem chamar o servidor."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock, private_key="xyz")

        with pytest.raises(DecodeError):
            await session.ensure_authenticated()

        assert server.auth_count == 0
        assert session.state == SessionState.empty()


class TestAuthenticationFailures:
    """Falhas de login sempre zeram o estado."""

    @pytest.mark.asyncio
    async def test_rejected_credentials_user_error(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.queue_auth(
            httpx.Response(
                401,
                json={"code": "err_invalid_apikey", "message": "Invalid apiToken"},
            )
        )
        session, _ = make_stack(server, clock)

        with pytest.raises(TwikeyUserError) as exc_info:
            await session.ensure_authenticated()

        assert exc_info.value.code == "err_invalid_apikey"
        assert exc_info.value.status_code == 401
        assert session.state.token == ""
        assert session.state.last_login == EPOCH

    @pytest.mark.asyncio
    async def test_ok_without_authorization_header(self) -> None:
        """200 sem Authorization é tratado como credencial recusada."""
        server, clock = FakeTwikeyServer(), FakeClock()
        server.queue_auth(httpx.Response(200))
        session, _ = make_stack(server, clock)

        with pytest.raises(TwikeyUserError) as exc_info:
            await session.ensure_authenticated()

        assert exc_info.value.code == "err_no_token"
        assert exc_info.value.message == "Invalid apiToken"
        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_ok_without_authorization_uses_apierror_header(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.queue_auth(httpx.Response(200, headers={"Apierror": "err_invalid_otp"}))
        session, _ = make_stack(server, clock)

        with pytest.raises(TwikeyUserError) as exc_info:
            await session.ensure_authenticated()

        assert exc_info.value.code == "err_invalid_otp"

    @pytest.mark.asyncio
    async def test_server_error_is_system_error(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.queue_auth(httpx.Response(503))
        session, _ = make_stack(server, clock)

        with pytest.raises(TwikeySystemError) as exc_info:
            await session.ensure_authenticated()

        assert exc_info.value.message == "503 Service Unavailable"
        assert exc_info.value.is_user_error is False

    @pytest.mark.asyncio
    async def test_transport_error_is_system_error(self) -> None:
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        server, clock = FakeTwikeyServer(), FakeClock()
        server.queue_auth(_refuse)
        session, _ = make_stack(server, clock)

        with pytest.raises(TwikeySystemError) as exc_info:
            await session.ensure_authenticated()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_undecodable_response_is_system_error(self) -> None:
        """Corpo com Content-Encoding inválido vira TwikeySystemError e zera o estado."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        clock.advance(hours=24)
        server.queue_auth(corrupt_gzip_response({"Authorization": "token-x"}))
        with pytest.raises(TwikeySystemError) as exc_info:
            await session.ensure_authenticated()

        assert isinstance(exc_info.value.__cause__, httpx.DecodingError)
        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_failure_after_expiry_clears_previous_token(self) -> None:
        """Reautenticação com falha descarta o token antigo."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        clock.advance(hours=24)
        server.queue_auth(httpx.Response(500))
        with pytest.raises(TwikeySystemError):
            await session.ensure_authenticated()

        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_recovers_after_failure(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.queue_auth(httpx.Response(500))
        session, _ = make_stack(server, clock)

        with pytest.raises(TwikeySystemError):
            await session.ensure_authenticated()
        token = await session.ensure_authenticated()

        assert token == "token-2"


class TestConcurrency:
    """Refresh single-flight e cancelamento."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_single_login(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.auth_delay = 0.01
        session, _ = make_stack(server, clock)

        tokens = await asyncio.gather(*(session.ensure_authenticated() for _ in range(10)))

        assert server.auth_count == 1
        assert set(tokens) == {"token-1"}

    @pytest.mark.asyncio
    async def test_concurrent_callers_after_expiry_share_single_login(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        clock.advance(hours=23, minutes=30)
        server.auth_delay = 0.01
        tokens = await asyncio.gather(*(session.ensure_authenticated() for _ in range(5)))

        assert server.auth_count == 2
        assert set(tokens) == {"token-2"}

    @pytest.mark.asyncio
    async def test_waiters_share_login_failure(self) -> None:
        """Login em andamento que falha entrega a mesma exceção a todos."""
        server, clock = FakeTwikeyServer(), FakeClock()
        server.auth_delay = 0.01
        server.queue_auth(httpx.Response(500))
        session, _ = make_stack(server, clock)

        results = await asyncio.gather(
            session.ensure_authenticated(),
            session.ensure_authenticated(),
            return_exceptions=True,
        )

        assert all(isinstance(result, TwikeySystemError) for result in results)
        assert server.auth_count == 1
        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_rejected_credentials_single_request(self) -> None:
        """Credenciais recusadas geram um único POST para N chamadores."""
        server, clock = FakeTwikeyServer(), FakeClock()
        server.auth_delay = 0.01
        server.queue_auth(httpx.Response(401, json={"code": "err_invalid_apikey"}))
        session, _ = make_stack(server, clock)

        results = await asyncio.gather(
            *(session.ensure_authenticated() for _ in range(5)),
            return_exceptions=True,
        )

        assert server.auth_count == 1
        assert [type(result) for result in results] == [TwikeyUserError] * 5

    @pytest.mark.asyncio
    async def test_next_call_after_shared_failure_logs_in_again(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.auth_delay = 0.01
        server.queue_auth(httpx.Response(500))
        session, _ = make_stack(server, clock)

        await asyncio.gather(
            session.ensure_authenticated(),
            session.ensure_authenticated(),
            return_exceptions=True,
        )
        token = await session.ensure_authenticated()

        assert token == "token-2"
        assert server.auth_count == 2

    @pytest.mark.asyncio
    async def test_one_waiter_timing_out_does_not_cancel_shared_login(self) -> None:
        """Deadline de um chamador não derruba o login aguardado por outro."""
        server, clock = FakeTwikeyServer(), FakeClock()
        server.auth_delay = 0.1
        session, _ = make_stack(server, clock)

        impatient, patient = await asyncio.gather(
            session.ensure_authenticated(timeout=0.01),
            session.ensure_authenticated(timeout=2.0),
            return_exceptions=True,
        )

        assert isinstance(impatient, TimeoutError)
        assert patient == "token-1"
        assert server.auth_count == 1

    @pytest.mark.asyncio
    async def test_deadline_during_login_preserves_state(self) -> None:
        """Cancelamento no meio do login não altera o estado anterior."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()
        previous = session.state

        clock.advance(hours=24)
        server.auth_gate = asyncio.Event()
        with pytest.raises(TimeoutError):
            await session.ensure_authenticated(timeout=0.05)

        assert session.state is previous

    @pytest.mark.asyncio
    async def test_abandoned_login_does_not_block_next_caller(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.auth_gate = asyncio.Event()
        session, _ = make_stack(server, clock)

        with pytest.raises(TimeoutError):
            await session.ensure_authenticated(timeout=0.05)

        server.auth_gate = None
        token = await session.ensure_authenticated(timeout=1.0)
        assert token == "token-2"


class TestInvalidate:
    """Invalidação do token."""

    @pytest.mark.asyncio
    async def test_invalidate_forces_login(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        assert session.invalidate() is True
        assert session.state == SessionState.empty()
        await session.ensure_authenticated()
        assert server.auth_count == 2

    @pytest.mark.asyncio
    async def test_invalidate_ignores_stale_token(self) -> None:
        """Token rejeitado já substituído não derruba a sessão nova."""
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        assert session.invalidate("token-0") is False
        assert session.state.token == "token-1"

    @pytest.mark.asyncio
    async def test_invalidate_matching_token(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        assert session.invalidate("token-1") is True
        assert session.state.token == ""


class TestLogout:
    """Logout best-effort."""

    @pytest.mark.asyncio
    async def test_logout_sends_token_and_clears_state(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        await session.logout()

        assert len(server.logout_requests) == 1
        request = server.logout_requests[0]
        assert request.method == "GET"
        assert request.headers["Authorization"] == "token-1"
        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_logout_without_session_is_noop(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        session, _ = make_stack(server, clock)

        await session.logout()

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_logout_server_error_not_propagated(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.logout_status = 500
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        await session.logout()

        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_logout_transport_error_not_propagated(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.logout_error = httpx.ReadTimeout("timed out")
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        await session.logout()

        assert session.state == SessionState.empty()

    @pytest.mark.asyncio
    async def test_logout_decoding_error_not_propagated(self) -> None:
        server, clock = FakeTwikeyServer(), FakeClock()
        server.logout_error = httpx.DecodingError("bad gzip")
        session, _ = make_stack(server, clock)
        await session.ensure_authenticated()

        await session.logout()

        assert session.state == SessionState.empty()


class TestSessionState:
    """Testes do snapshot SessionState."""

    def test_empty_state(self) -> None:
        state = SessionState.empty()
        assert state.token == ""
        assert state.last_login == EPOCH

    def test_repr_masks_token(self) -> None:
        state = SessionState(token="secret-bearer", last_login=EPOCH)
        assert "secret-bearer" not in repr(state)
