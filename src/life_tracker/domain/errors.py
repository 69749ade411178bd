"""Error taxonomy for the voice command pipeline."""


class VoiceError(Exception):
    """Base exception for voice pipeline failures."""


class InvalidInputError(VoiceError):
    """Caller-supplied data failed a precondition."""


class ServiceUnavailableError(VoiceError):
    """A required external dependency is not configured or not reachable."""


class UpstreamTimeoutError(ServiceUnavailableError):
    """An external call did not finish within its timeout."""


class UpstreamError(VoiceError):
    """An external service responded with a non-success status."""


class MalformedResponseError(VoiceError):
    """An external service responded with unusable content."""


class EmptyResponseError(MalformedResponseError):
    """The language model returned no text."""


class NutritionLookupFailedError(VoiceError):
    """A nutrition lookup required by a parsed action failed."""


class NotFoundError(VoiceError):
    """The entity an edit or delete action refers to could not be located."""
