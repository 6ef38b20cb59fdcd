class FenestraError(Exception):
    pass


class PropertyDatabaseError(FenestraError):
    """Raised when the property database cannot be loaded. Fatal."""
    pass


class PropertyLookupError(PropertyDatabaseError):
    """Raised when a property table has no entry for the requested key."""
    pass


class SandboxError(FenestraError):
    """Raised when the catalog sandbox is used out of order."""
    pass


class SandboxRestoreError(SandboxError):
    """Raised when the restored catalogs differ from the snapshot taken on
    entering the sandbox. Fatal: the host catalogs can no longer be trusted.
    """
    pass


class ConstructionError(FenestraError):
    pass


class BatchInputError(FenestraError):
    pass
