"""Application configuration helpers."""

import os

from .route_builder import Coordinate, TRACK_SELECTION_POLICIES


# Amsterdam city center
DEFAULT_CENTER_LAT = 52.3676
DEFAULT_CENTER_LON = 4.9041
DEFAULT_ZOOM = 14
DEFAULT_ROUTE_COLOR = "orangered"
DEFAULT_TRACK_SELECTION = "first"


def parse_env_bool(value, default=False):
    """Parse a boolean-like environment value with a fallback default."""
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def get_cors_origins():
    """
    Return CORS origins from env, or localhost-only defaults.

    `TRACKVIEW_CORS_ORIGINS` supports a comma-separated list.
    """
    raw = os.getenv('TRACKVIEW_CORS_ORIGINS', '')
    if raw.strip():
        return [origin.strip() for origin in raw.split(',') if origin.strip()]
    return [r"^http://localhost(:\d+)?$", r"^http://127\.0\.0\.1(:\d+)?$"]


def parse_env_int(name, default):
    """Parse an integer environment value with fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def parse_env_float(name, default):
    """Parse a float environment value with fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def get_initial_center():
    lat = parse_env_float("TRACKVIEW_CENTER_LAT", DEFAULT_CENTER_LAT)
    lon = parse_env_float("TRACKVIEW_CENTER_LON", DEFAULT_CENTER_LON)
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        return Coordinate(DEFAULT_CENTER_LAT, DEFAULT_CENTER_LON)
    return Coordinate(lat, lon)


def get_default_zoom():
    return min(28, max(0, parse_env_int("TRACKVIEW_DEFAULT_ZOOM", DEFAULT_ZOOM)))


def get_track_selection_policy():
    policy = os.getenv("TRACKVIEW_TRACK_SELECTION", DEFAULT_TRACK_SELECTION).strip().lower()
    if policy in TRACK_SELECTION_POLICIES:
        return policy
    return DEFAULT_TRACK_SELECTION


def get_route_color():
    return os.getenv("TRACKVIEW_ROUTE_COLOR", "").strip() or DEFAULT_ROUTE_COLOR


def get_marker_animation_seconds():
    """Duration of the click marker move animation."""
    return max(0.0, parse_env_float("TRACKVIEW_MARKER_ANIMATION_SECONDS", 1.0))


def get_startup_gpx_path():
    """GPX file loaded when the app starts, or None."""
    return os.getenv("TRACKVIEW_GPX_PATH", "").strip() or None
