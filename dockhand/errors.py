"""Error taxonomy for dockhand operations.

Every error carries a ``hint``: a concrete next step printed by the CLI
after the error message.
"""


class DockhandError(Exception):
    """Base class for all expected, user-facing failures."""

    default_hint = ""

    def __init__(self, message, hint=None):
        super().__init__(message)
        self.hint = hint if hint is not None else self.default_hint


class ValidationError(DockhandError):
    """Bad name/hostname/image shape, duplicate name, or bad config."""


class AuthError(DockhandError):
    """The secret store rejected the token."""

    default_hint = "Create a new service token in Doppler (Project → Config → Access → Service Tokens) and try again."


class TransportError(DockhandError):
    """The secret store could not be reached or returned an unexpected status."""

    default_hint = "Check network connectivity to the secret store and retry."


class RequiredFieldMissing(DockhandError):
    """A key the deployment depends on (PORT) is absent from the merged environment."""

    default_hint = "Add a PORT variable to the service's Doppler config and retry."


class ServiceNotFoundError(DockhandError):
    """No registry record exists for the given name."""

    default_hint = "Run 'dockhand status' to list registered services."


class RemovalAborted(DockhandError):
    """The operator declined or mistyped the removal confirmation."""

    default_hint = "Nothing was changed. Re-run 'dockhand remove' to try again."


class LockError(DockhandError):
    """Another dockhand process is operating on the same service."""

    default_hint = "Wait for the other operation to finish, then retry."
