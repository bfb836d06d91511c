"""
Error taxonomy for the discovery pipeline.

Only whole-stage failures reach the job record. Per-author and per-article
failures are absorbed where they happen.
"""


class BylineScoutError(Exception):
    """Base class for all pipeline errors."""


class ResolutionFailure(BylineScoutError):
    """No website could be found for the outlet."""

    def __init__(self, outlet: str, detail: str = ""):
        self.outlet = outlet
        message = f"Website detection failed for '{outlet}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DiscoveryFailure(BylineScoutError):
    """The website was found but no authors were discovered."""

    def __init__(self, outlet: str, website: str):
        self.outlet = outlet
        self.website = website
        super().__init__(f"No authors found for '{outlet}' at {website}")


class ExtractionDegradation(BylineScoutError):
    """A single author's profile could not be loaded."""

    def __init__(self, name: str, url: str, reason: str = ""):
        self.name = name
        self.url = url
        super().__init__(f"Could not load profile for {name} ({url}) {reason}".strip())


class PersistenceFailure(BylineScoutError):
    """A single profile upsert failed."""


class JobCancelled(BylineScoutError):
    """Raised at a cancellation checkpoint once a job has been cancelled."""

    def __init__(self):
        super().__init__("Cancelled")
