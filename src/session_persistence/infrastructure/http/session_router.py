"""Login, session bootstrap, and logout HTTP routes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import UUID

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, Field

from session_persistence.application.dto.session_models import AuthenticatedSession, Session
from session_persistence.application.ports.session_driver_port import SessionDriverPort
from session_persistence.application.services.auth_service import AuthOutcome, AuthService
from session_persistence.application.services.session_persistence_service import (
    SessionPersistenceService,
)
from session_persistence.infrastructure.http.cookie_session_driver import (
    CookieSessionDriver,
    PersistenceCookieSettings,
)

SessionPersistenceFactory = Callable[[SessionDriverPort], SessionPersistenceService]
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    """Login request body."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    remember: bool = False


class LogoutRequest(BaseModel):
    """Logout request body."""

    destroy_all: bool = False


class SessionStateResponse(BaseModel):
    """Session state returned to the caller."""

    authenticated: bool
    user_id: UUID | None = None


def build_session_router(
    *,
    auth_service: AuthService,
    session_persistence_factory: SessionPersistenceFactory,
    cookie_settings: PersistenceCookieSettings,
) -> APIRouter:
    """Build routes creating, restoring, and destroying remember-me sessions."""

    router = APIRouter()

    def _driver_for(request: Request) -> CookieSessionDriver:
        return CookieSessionDriver(
            request_cookies=request.cookies,
            cookie_settings=cookie_settings,
        )

    @router.post("/login", response_model=SessionStateResponse)
    async def login(
        payload: LoginRequest,
        request: Request,
        response: Response,
    ) -> SessionStateResponse:
        result = await auth_service.authenticate(
            email=payload.email,
            password=payload.password,
        )
        if result.outcome is not AuthOutcome.SUCCESS or result.user is None:
            raise HTTPException(status_code=401, detail="invalid credentials")

        driver = _driver_for(request)
        session_persistence = session_persistence_factory(driver)
        # A fresh login supersedes whatever remember-me code the client still carries.
        if driver.get() is not None:
            carried = await session_persistence.create_from_persistence_storage()
            if isinstance(carried, AuthenticatedSession):
                await session_persistence.destroy(user=carried.user, destroy_all=False)
                logger.info(
                    "login_replaced_carried_session previous_user_id=%s user_id=%s",
                    carried.user_id,
                    result.user.user_id,
                )
            else:
                driver.forget()

        session = await session_persistence.create_from_user(
            user=result.user,
            remember=payload.remember,
        )
        driver.apply(response)
        return _to_state_response(session)

    @router.get("/session", response_model=SessionStateResponse)
    async def current_session(request: Request) -> SessionStateResponse:
        driver = _driver_for(request)
        session = await session_persistence_factory(driver).create_from_persistence_storage()
        return _to_state_response(session)

    @router.post("/logout", status_code=204)
    async def logout(
        request: Request,
        response: Response,
        payload: LogoutRequest | None = None,
    ) -> None:
        destroy_all = payload.destroy_all if payload is not None else False
        driver = _driver_for(request)
        session_persistence = session_persistence_factory(driver)
        session = await session_persistence.create_from_persistence_storage()
        if isinstance(session, AuthenticatedSession):
            await session_persistence.destroy(user=session.user, destroy_all=destroy_all)
        else:
            logger.info("logout_without_restorable_session")
            driver.forget()
        driver.apply(response)

    return router


def _to_state_response(session: Session) -> SessionStateResponse:
    return SessionStateResponse(
        authenticated=session.is_authenticated,
        user_id=session.user_id,
    )
