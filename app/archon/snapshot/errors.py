"""Error hierarchy for snapshot operations.

Every error raised by the snapshot engine derives from ArchonError so the
CLI can report it uniformly. Subclasses group failures by how an operator
has to react to them: fix the configuration, fix the environment, inspect
the archive, or simply re-run after declining a prompt.
"""


class ArchonError(Exception):
    """Base exception for all archon failures."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigurationError(ArchonError):
    """Raised when the game configuration cannot drive a backup or restore."""


class DuplicateArchivePathError(ConfigurationError):
    """Raised when two backup targets map to the same archive path."""


# =============================================================================
# Runtime environment
# =============================================================================


class SnapshotEnvironmentError(ArchonError):
    """Raised when a live location cannot be derived on this machine."""


class EnvironmentUnavailableError(SnapshotEnvironmentError):
    """Raised when the user's home directory cannot be determined."""


class UnsupportedEnvironmentError(SnapshotEnvironmentError):
    """Raised for category/runtime combinations with no meaningful location."""


class UnknownRuntimeEnvironmentError(SnapshotEnvironmentError):
    """Raised when runtime_env is not one of native, wine or proton."""


class MissingCompatibilityDataError(SnapshotEnvironmentError, ConfigurationError):
    """Raised when a Proton prefix can be located neither by path nor by app id."""


# =============================================================================
# Copy and archive
# =============================================================================


class SnapshotError(ArchonError):
    """Raised when copying data into or out of a snapshot fails."""


class SourceNotFoundError(SnapshotError):
    """Raised when a configured backup source does not exist."""


class ArchiveError(ArchonError):
    """Raised when an archive cannot be created or read."""


class UnsafeArchiveError(ArchiveError):
    """Raised when an archive entry fails a safety check during extraction."""


class UnsafeArchivePathError(UnsafeArchiveError):
    """Raised when an entry would be written outside the extraction root."""


class ArchiveBombError(UnsafeArchiveError):
    """Raised when an entry's declared size or compression ratio is excessive."""


# =============================================================================
# Manifest and restore
# =============================================================================


class ManifestError(ArchonError):
    """Base exception for snapshot manifest errors."""


class ManifestNotFoundError(ManifestError):
    """Raised when the archive does not contain a manifest."""


class ManifestParseError(ManifestError):
    """Raised when the manifest is not valid YAML."""


class ManifestValidationError(ManifestError):
    """Raised when the manifest content does not match the schema."""


class UnsupportedManifestVersionError(ManifestError):
    """Raised when the manifest was written with an unknown schema version."""


class EmptyManifestError(ManifestError):
    """Raised when a manifest lists no files to restore."""


class UnsupportedStorageCategoryError(ManifestError):
    """Raised when a manifest entry uses an unknown storage category."""


# =============================================================================
# Operator interaction
# =============================================================================


class OperationCancelledError(ArchonError):
    """Raised when the operator declines a confirmation."""


class RestoreCancelledError(OperationCancelledError):
    """Raised when the operator declines to continue a restore."""


class ConfirmationError(ArchonError):
    """Raised when an answer could not be read from the operator."""
