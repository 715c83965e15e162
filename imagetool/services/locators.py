"""In-memory display handles for binary images."""
import logging
import uuid
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


class LocatorRegistry:
    """
    Issues ``blob:`` locators for in-memory image bytes.

    Every handle stays resolvable until revoked; the owner is expected to
    revoke a handle as soon as the image it names is superseded.
    """

    SCHEME = "blob:"

    def __init__(self, origin: str = "imagetool"):
        self._origin = origin
        self._objects: Dict[str, Tuple[bytes, str]] = {}

    @classmethod
    def is_handle(cls, locator: str) -> bool:
        return locator.startswith(cls.SCHEME)

    def create(self, data: bytes, media_type: str) -> str:
        locator = f"{self.SCHEME}{self._origin}/{uuid.uuid4()}"
        self._objects[locator] = (data, media_type)
        logger.debug("Created %s (%d bytes)", locator, len(data))
        return locator

    def resolve(self, locator: str) -> Tuple[bytes, str]:
        """Return ``(data, media_type)`` for a live handle."""
        try:
            return self._objects[locator]
        except KeyError:
            raise LookupError(f"Unknown or revoked locator: {locator}") from None

    def revoke(self, locator: str) -> bool:
        if self._objects.pop(locator, None) is None:
            return False
        logger.debug("Revoked %s", locator)
        return True

    def revoke_all(self) -> int:
        count = len(self._objects)
        self._objects.clear()
        return count

    def __contains__(self, locator: str) -> bool:
        return locator in self._objects

    def __len__(self) -> int:
        return len(self._objects)
