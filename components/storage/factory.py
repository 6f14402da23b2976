"""Selection of the storage backend from settings."""

import logging
from functools import lru_cache
from typing import Optional

from components.core.config import Settings, get_settings
from components.core.exceptions import StorageConfigurationError
from components.storage.api import ApiStorageService
from components.storage.firestore import FirestoreStorageService
from components.storage.interface import StorageService
from components.storage.keyvalue import InMemoryKeyValueArea, JsonFileKeyValueArea, KeyValueArea
from components.storage.local import LocalStorageService

logger = logging.getLogger(__name__)


def default_key_value_area(settings: Settings) -> KeyValueArea:
    """File backed area when ``LOCAL_STORAGE_PATH`` is set, otherwise in memory."""
    if settings.LOCAL_STORAGE_PATH:
        return JsonFileKeyValueArea(settings.LOCAL_STORAGE_PATH)
    return InMemoryKeyValueArea()


def create_storage_service(
    settings: Settings,
    *,
    token: Optional[str] = None,
    user_id: Optional[str] = None,
    key_value_area: Optional[KeyValueArea] = None,
) -> StorageService:
    """
    Build a fresh storage backend for ``settings.STORAGE_TYPE``.

    Args:
        settings: Application settings
        token: Session token for the API backend
        user_id: Signed in user for the Firestore backend
        key_value_area: Area for local state; defaults from settings

    Raises:
        StorageConfigurationError: If the selected backend lacks its settings
    """
    storage_type = settings.STORAGE_TYPE
    area = key_value_area if key_value_area is not None else default_key_value_area(settings)

    if storage_type == "localStorage":
        service: StorageService = LocalStorageService(area)
    elif storage_type == "api":
        if not settings.API_URL:
            raise StorageConfigurationError("API_URL is required for api storage")
        service = ApiStorageService(settings.API_URL, token=token, key_value_area=area)
    elif storage_type == "firestore":
        if not settings.FIREBASE_PROJECT_ID:
            raise StorageConfigurationError("FIREBASE_PROJECT_ID is required for firestore storage")
        service = FirestoreStorageService(
            project_id=settings.FIREBASE_PROJECT_ID,
            credentials_path=settings.FIREBASE_CREDENTIALS_PATH,
            user_id=user_id,
            key_value_area=area,
        )
    else:
        raise StorageConfigurationError(f"Unknown storage type: {storage_type}")

    logger.debug("Using %s storage", storage_type)
    return service


@lru_cache()
def get_storage_service() -> StorageService:
    """Process wide storage backend; call ``set_session`` on it after login."""
    return create_storage_service(get_settings())
