"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

import structlog

from core.config import settings
from domain.services.activity_service import ActivityService
from domain.services.invitation_service import InvitationService
from domain.services.property_service import PropertyService
from domain.services.trust_level_service import TrustLevelService
from infrastructure.booking.beds24_client import Beds24Client
from infrastructure.booking.demo_client import DemoBookingProvider
from infrastructure.booking.provider import IBookingProvider, UnconfiguredBookingProvider
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.email.provider import IEmailSender
from infrastructure.email.sendgrid_client import SendGridEmailSender

logger = structlog.get_logger()


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_booking_provider() -> IBookingProvider:
    """Real Beds24 client when credentials exist, demo client when explicitly enabled.

    Never falls back to demo on its own: without either, provider calls fail.
    """
    if settings.beds24_configured:
        return Beds24Client(
            refresh_token=settings.beds24_refresh_token,
            base_url=settings.beds24_api_url,
            timeout=settings.beds24_timeout_seconds,
        )
    if settings.beds24_demo_mode:
        logger.info("booking_provider_demo_mode")
        return DemoBookingProvider()
    logger.warning("booking_provider_unconfigured")
    return UnconfiguredBookingProvider()


@lru_cache
def get_email_sender() -> IEmailSender:
    """SendGrid sender; runs in demo mode when no API key is set."""
    return SendGridEmailSender(
        api_key=settings.sendgrid_api_key,
        from_email=settings.sendgrid_from_email,
        from_name=settings.sendgrid_from_name,
        api_url=settings.sendgrid_api_url,
        timeout=settings.sendgrid_timeout_seconds,
    )


@lru_cache
def get_activity_service() -> ActivityService:
    """Get Activity service instance."""
    return ActivityService(get_uow_factory())


@lru_cache
def get_property_service() -> PropertyService:
    """Get Property service instance."""
    return PropertyService(
        get_uow_factory(),
        booking_provider=get_booking_provider(),
        activity_service=get_activity_service(),
        claim_ttl_seconds=settings.enlistment_claim_ttl_seconds,
        pricing_horizon_days=settings.beds24_pricing_horizon_days,
    )


@lru_cache
def get_invitation_service() -> InvitationService:
    """Get Invitation service instance."""
    return InvitationService(
        get_uow_factory(),
        email_sender=get_email_sender(),
        public_base_url=settings.public_base_url,
        activity_service=get_activity_service(),
        expiry_days=settings.invitation_expiry_days,
    )


@lru_cache
def get_trust_level_service() -> TrustLevelService:
    """Get Trust Level service instance."""
    return TrustLevelService(
        get_uow_factory(),
        activity_service=get_activity_service(),
    )
