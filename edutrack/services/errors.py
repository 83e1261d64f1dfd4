# edutrack/services/errors.py

class EduTrackError(Exception):
    """Base class for errors raised by the service layer."""


class InvalidInputError(EduTrackError, ValueError):
    """Request data failed a business rule (missing fields, bad level...)."""


class NotFoundError(EduTrackError, ValueError):
    """A referenced row does not exist, or a lookup came back empty."""


class PermissionDeniedError(EduTrackError):
    """The acting profile's role may not perform the operation."""


class LevelLockedError(EduTrackError):
    """The previous difficulty level of the topic has not been completed."""


class ContentGenerationError(EduTrackError):
    """The external content endpoint failed or answered with garbage."""
