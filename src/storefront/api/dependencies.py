"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Long-lived objects (storage, notifier, session store, settings) are
created once by the application factory and kept in ``app.state``;
domain services are cheap and built per request.
"""

from datetime import timedelta

from fastapi import Depends, HTTPException, Request, status

from storefront.api.sessions import Session, SessionStore
from storefront.config.settings import Settings
from storefront.domain.accounts import AccountService, AdminService
from storefront.domain.auth import AuthService
from storefront.domain.catalog import CatalogService, ContactService
from storefront.domain.inventory import InventoryService
from storefront.domain.models import User
from storefront.domain.notifications import NotificationService
from storefront.domain.ports import Storage
from storefront.domain.registration import RegistrationService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> Storage:
    """
    Get storage from app state.

    The storage is created by the application factory or during
    lifespan startup and stored in app.state.
    """
    return request.app.state.storage


def get_notifier(request: Request) -> NotificationService:
    return request.app.state.notifier


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the storage and notifier for the domain service.
    """
    settings = get_app_settings(request)
    return RegistrationService(
        storage=get_storage(request),
        notifier=get_notifier(request),
        code_ttl=timedelta(minutes=settings.verification_ttl_minutes),
        bcrypt_rounds=settings.bcrypt_cost,
    )


def get_auth_service(request: Request) -> AuthService:
    settings = get_app_settings(request)
    return AuthService(
        users=get_storage(request),
        notifier=get_notifier(request),
        reset_ttl=timedelta(minutes=settings.reset_ttl_minutes),
        bcrypt_rounds=settings.bcrypt_cost,
    )


def get_inventory_service(request: Request) -> InventoryService:
    settings = get_app_settings(request)
    return InventoryService(
        storage=get_storage(request), default_min_stock=settings.default_min_stock
    )


def get_catalog_service(request: Request) -> CatalogService:
    return CatalogService(products=get_storage(request))


def get_contact_service(request: Request) -> ContactService:
    return ContactService(messages=get_storage(request))


def get_account_service(request: Request) -> AccountService:
    return AccountService(storage=get_storage(request))


def get_admin_service(request: Request) -> AdminService:
    return AdminService(users=get_storage(request))


def get_session_id(request: Request) -> str | None:
    return request.cookies.get(get_app_settings(request).session_cookie_name)


def get_current_session(
    session_id: str | None = Depends(get_session_id),
    sessions: SessionStore = Depends(get_session_store),
) -> Session | None:
    return sessions.get(session_id)


def get_current_user(
    session: Session | None = Depends(get_current_session),
    storage: Storage = Depends(get_storage),
) -> User:
    """
    Resolve the logged-in user from the session cookie.

    Raises 401 when there is no live session or its user no longer exists.
    Raises 403 when the account was suspended after the session began.
    """
    user = storage.get_user(session.user_id) if session else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    if user.is_suspended:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been suspended. Please contact support.",
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only administrators through."""
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
