"""Domain-specific errors for robotctl."""


class RobotctlError(Exception):
    """Base error for robotctl."""


class ProfileValidationError(RobotctlError):
    """Raised when a profile file does not conform to schema or semantics."""


class ProfileLoadError(RobotctlError):
    """Raised when loading profile sources fails."""


class FrameIntegrityError(RobotctlError):
    """Raised when a motor frame has the wrong length or checksum."""


class AgentError(RobotctlError):
    """Base error for the control agent channel."""


class AgentUnavailableError(AgentError):
    """Raised when the control agent process cannot be started."""


class DiscoveryError(RobotctlError):
    """Base error for robot discovery."""


class DiscoveryTimeoutError(DiscoveryError):
    """Raised when no robot was announced before the discovery deadline."""


class DeviceNotDiscoveredError(DiscoveryError):
    """Raised when connecting before a device address was captured."""


class AttributeResolutionTimeoutError(RobotctlError):
    """Raised when the TX characteristic was not announced before the deadline."""
