from typing import Annotated

from fastapi import Depends

from asms.services.storage.base import StorageBackend
from asms.services.storage.factory import get_default_storage_backend


def get_storage() -> StorageBackend:
    return get_default_storage_backend()


StorageDep = Annotated[StorageBackend, Depends(get_storage)]
