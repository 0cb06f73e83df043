from orbitkernel.config import DIAGNOSTIC_LENGTH


def bound_diagnostic(message):
    """Cut an engine message to the short-diagnostic buffer size (lossy)."""
    if message is None:
        return ""
    return str(message).strip()[:DIAGNOSTIC_LENGTH]


class KernelError(Exception):
    """Base class for everything orbitkernel raises."""

    def __init__(self, message, diagnostic=""):
        super().__init__(message)
        self.diagnostic = bound_diagnostic(diagnostic)


class EngineError(KernelError):
    """Raw engine failure. Only raised by the session adapter."""

    def __init__(self, diagnostic):
        diagnostic = bound_diagnostic(diagnostic)
        super().__init__(f"Engine call failed: {diagnostic}", diagnostic)


class NotFoundError(KernelError, LookupError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"Body '{name}' not found in kernel pool")


class ConstantUnavailableError(KernelError):
    def __init__(self, body, diagnostic):
        self.body = body
        super().__init__(
            f"Could not retrieve standard gravitational parameter for body {body}: "
            f"{bound_diagnostic(diagnostic)}",
            diagnostic,
        )


class StateUnavailableError(KernelError):
    def __init__(self, body, observer, epoch, diagnostic):
        self.body = body
        self.observer = observer
        self.epoch = epoch
        super().__init__(
            f"State for body {body} relative to {observer} at {epoch} could not be retrieved: "
            f"{bound_diagnostic(diagnostic)}",
            diagnostic,
        )


class SerializationError(KernelError):
    """Base class for failures of TrajectorySerializer.write."""


class InvalidFractionError(SerializationError, ValueError):
    def __init__(self, fraction):
        self.fraction = fraction
        super().__init__(
            f"Please supply a fraction_to_save value between 0 and 1 (got {fraction})"
        )


class InvalidInputError(SerializationError, ValueError):
    pass


class KernelOpenError(SerializationError):
    def __init__(self, diagnostic):
        super().__init__(
            f"Failed to open SPK file for writing: {bound_diagnostic(diagnostic)}", diagnostic
        )


class SegmentWriteError(SerializationError):
    def __init__(self, diagnostic):
        super().__init__(
            f"Failed to write to SPK file: {bound_diagnostic(diagnostic)}", diagnostic
        )


class KernelCloseError(SerializationError):
    def __init__(self, diagnostic):
        super().__init__(
            f"Failed to close SPK file after writing: {bound_diagnostic(diagnostic)}", diagnostic
        )
