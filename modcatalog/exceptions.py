"""Exception types raised by the mod catalogue."""


class CatalogError(Exception):
    """Base class for every error raised by the catalogue package."""


class CatalogStoreError(CatalogError):
    """A catalogue store operation was rejected."""


class ModNotFoundError(CatalogStoreError):
    """The requested mod does not exist in the store."""

    def __init__(self, mod_id: str):
        super().__init__(f"Mod not found: {mod_id}")
        self.mod_id = mod_id


class StorageError(CatalogError):
    """Reading from or writing to durable local storage failed."""
