"""Error taxonomy for the engine.

Every failure that reaches the CLI is a BaselineError subclass (or an
OSError from the filesystem) and is reported as a single prefixed line
with exit code 1.
"""


class BaselineError(Exception):
    """Base class for all engine errors."""


class ConfigError(BaselineError):
    """`.baseline/config.yaml` is missing, unparseable or has an invalid shape."""


class CapabilitySnapshotError(BaselineError):
    """Problem with `.baseline/capabilities/github.json`."""


class CapabilitySnapshotMissing(CapabilitySnapshotError):
    """The capability snapshot does not exist."""


class CapabilitySnapshotInvalid(CapabilitySnapshotError):
    """The capability snapshot exists but is malformed."""


class PolicyViolation(BaselineError):
    """A hard policy gate failed."""

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__("; ".join(self.violations) or "policy violation")


class ManifestDriftError(BaselineError):
    """Managed files on disk no longer match the manifest or the generators."""

    def __init__(self, message: str, paths: list[str] | None = None):
        self.paths = list(paths or [])
        super().__init__(message)


class ManifestConflictError(ManifestDriftError):
    """Another writer changed the manifest while this command was running."""


class ModuleGenerationError(BaselineError):
    """A module generator raised during its pure computation."""

    def __init__(self, module_id: str, cause: Exception):
        self.module_id = module_id
        self.cause = cause
        super().__init__(f"{module_id}: {type(cause).__name__}: {cause}")


class PublishError(BaselineError):
    """The changeset publisher collaborator failed."""


class LifecycleError(BaselineError):
    """The command is not valid in the target's current lifecycle state."""
