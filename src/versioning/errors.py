"""Exception taxonomy for module resolution.

Every error here is scoped to a single module: the resolution engine catches
them at the module boundary and records the module as unresolved.
"""


class ResolutionError(Exception):
    """Base class for failures while resolving one module."""


class InvalidVersionError(ResolutionError, ValueError):
    """A version string could not be parsed."""

    def __init__(self, version, reason=None):
        self.version = version
        message = f"Invalid version {version!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ArtifactNotFoundError(ResolutionError):
    """No artifact matched the requested coordinate."""


class ManifestParseError(ResolutionError):
    """The module descriptor is present but cannot be used."""


class UnsupportedIdentifierFormatError(ManifestParseError):
    """A required-module unique id does not start with a known namespace."""

    def __init__(self, uid):
        self.uid = uid
        super().__init__(f"Unsupported UID format: {uid}")
