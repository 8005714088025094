class MatchingError(Exception):
    """Base class for failures surfaced by a matching run."""


class SourceReadError(MatchingError):
    """Pending reports or existing matches could not be read. Nothing was written."""


class PersistenceWriteError(MatchingError):
    """Matches or notifications could not be stored."""


class RunInProgressError(MatchingError):
    """Another matching run holds the run lock."""
