"""Custom exceptions for mod-crater."""


class CraterError(Exception):
    """Base exception for all mod-crater errors."""


class InvalidInputError(CraterError):
    """Raised when a record carries a required dependency with no target name.

    A corrupt fact invalidates reachability for everything downstream of it,
    so the whole ``classify`` call is aborted before any result is built.
    """

    def __init__(self, mod_name: str, original_text: str):
        self.mod_name = mod_name
        self.original_text = original_text
        super().__init__(
            f"Mod '{mod_name}' declares a required dependency with an empty "
            f"target name: {original_text!r}"
        )


class CatalogError(CraterError):
    """Raised when downloaded catalog files are missing or malformed."""


class PortalError(CraterError):
    """Raised when the mod portal cannot be reached after retries."""
