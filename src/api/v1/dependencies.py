"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.event_emitter import EventEmitter
from domain.services.message_builder import MessageBuilder
from domain.services.notification_engine import NotificationEngine
from domain.services.preference_cache import PreferenceCache
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.email.provider import IEmailProvider
from infrastructure.email.smtp_provider import create_email_provider


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_email_provider() -> IEmailProvider:
    """Get the configured email provider."""
    return create_email_provider(settings)


@lru_cache
def get_preference_cache() -> PreferenceCache:
    """Get the process-wide preference cache."""
    return PreferenceCache(ttl_seconds=settings.preference_cache_ttl_seconds)


@lru_cache
def get_notification_engine() -> NotificationEngine:
    """Get Notification engine instance."""
    return NotificationEngine(
        get_uow_factory(),
        email_provider=get_email_provider(),
        preference_cache=get_preference_cache(),
        builder=MessageBuilder(settings.app_base_url, settings.product_name),
    )


@lru_cache
def get_event_emitter() -> EventEmitter:
    """Get Event emitter instance."""
    return EventEmitter(get_uow_factory(), engine=get_notification_engine())
