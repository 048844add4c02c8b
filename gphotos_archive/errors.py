class ArchiverError(Exception):
    """Fatal error, the run cannot continue."""


class CheckpointError(ArchiverError):
    pass


class LoginRequiredError(ArchiverError):
    pass


class BoundaryError(ArchiverError):
    pass
