"""Error types raised while loading tracks and handling map events."""


class TrackViewError(Exception):
    """Base class for viewer failures reported back to the page."""

    code = "TRACKVIEW_ERROR"

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self):
        payload = {
            'success': False,
            'error_code': self.code,
            'error': self.message,
        }
        if self.details:
            payload['details'] = self.details
        return payload


class TrackLoadError(TrackViewError):
    """A failure that aborts a track load and leaves the current route in place."""

    code = "TRACK_LOAD_ERROR"


class GpxFileNotFoundError(TrackLoadError):
    code = "FILE_NOT_FOUND"


class GpxParseError(TrackLoadError):
    code = "PARSE_ERROR"


class NoTrackError(TrackLoadError):
    code = "NO_TRACK"

    def __init__(self, message="There are no tracks to visualize in the provided GPX file", details=None):
        super().__init__(message, details=details)


class AmbiguousTrackError(TrackLoadError):
    code = "AMBIGUOUS_TRACK"

    def __init__(self, track_count, details=None):
        super().__init__(
            f"GPX file contains {track_count} tracks; please supply a file with a single track",
            details=details or {'track_count': track_count},
        )


class EmptyRouteError(TrackLoadError):
    code = "EMPTY_ROUTE"

    def __init__(self, message="Track has no waypoints to draw", details=None):
        super().__init__(message, details=details)


class InvalidEventError(TrackViewError):
    code = "INVALID_EVENT"
