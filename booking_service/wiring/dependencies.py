from functools import lru_cache
import logging

from booking_service.application.ports.booking_repository import BookingRepositoryPort
from booking_service.application.use_cases.booking import BookingUseCase
from booking_service.application.utils.date_parser import safe_timezone
from booking_service.core.config import settings
from booking_service.infrastructure.auth.token_verifier import JwtTokenVerifier
from booking_service.infrastructure.store.json_store import JsonBookingRepository
from booking_service.infrastructure.store.memory_store import MemoryBookingRepository
from booking_service.infrastructure.store.mongo_store import MongoBookingRepository


_booking_repository: BookingRepositoryPort | None = None


def _resolve_store_provider() -> str:
    provider = settings.STORE_PROVIDER.lower()
    if provider != "auto":
        return provider
    if settings.ENV.lower() in {"dev", "local"}:
        return "json"
    if settings.ENV.lower() == "test":
        return "memory"
    return "mongo"


def get_booking_repository() -> BookingRepositoryPort:
    global _booking_repository
    if _booking_repository is None:
        logger = logging.getLogger(__name__)
        provider = _resolve_store_provider()
        logger.info("Using %s booking store (ENV=%s)", provider, settings.ENV)

        if provider == "memory":
            _booking_repository = MemoryBookingRepository()
        elif provider == "json":
            _booking_repository = JsonBookingRepository(data_dir=settings.JSON_STORE_DIR)
        elif provider == "mongo":
            _booking_repository = MongoBookingRepository.connect(
                settings.MONGO_URI,
                settings.MONGO_DB,
                timeout_ms=settings.MONGO_TIMEOUT_MS,
            )
        else:
            raise ValueError(f"Unknown STORE_PROVIDER: {settings.STORE_PROVIDER}")
    return _booking_repository


def get_booking_use_case() -> BookingUseCase:
    return BookingUseCase(
        repository=get_booking_repository(),
        timezone=safe_timezone(settings.BUSINESS_TIMEZONE),
        work_start_hour=settings.WORK_START_HOUR,
        work_end_hour=settings.WORK_END_HOUR,
        slot_minutes=settings.SLOT_MINUTES,
    )


@lru_cache
def get_token_verifier() -> JwtTokenVerifier:
    return JwtTokenVerifier(secret=settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
