"""BaseService — shared foundation for dynblk services.

Every service receives the resolved :class:`DynblkSettings` and a
:class:`LibraryManager`. Services own the library session boundaries:
they open, edit and finalize libraries through the manager and never
leave a session open when they return.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dynblk.infrastructure.library import LibraryManager

if TYPE_CHECKING:
    from dynblk.config.settings import DynblkSettings


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class GenerateService(BaseService):
            def generate(self, ...) -> ServiceResult:
                session = self._manager.open_or_create(name, path)
                ...
    """

    def __init__(self, settings: DynblkSettings, manager: LibraryManager | None = None) -> None:
        self._settings = settings
        self._manager = manager or LibraryManager()

    @property
    def settings(self) -> DynblkSettings:
        return self._settings

    @property
    def manager(self) -> LibraryManager:
        return self._manager
