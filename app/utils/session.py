"""Viewer session: the single owner of route, marker and map state."""

import enum
import math
import time
from collections import namedtuple

from .errors import InvalidEventError, TrackLoadError
from .gpx_parser import parse_gpx_bytes, parse_gpx_file
from .map_view import CoordinateLine, MapView
from .marker_animation import DEFAULT_ANIMATION_SECONDS, ClickMarker
from .route_builder import Coordinate, Extent, build_route, normalize_coordinate, select_track


class EventKind(enum.Enum):
    MAP_CLICKED = "map_clicked"
    MAP_EXTENT = "map_extent"
    ZOOM_CHANGED = "zoom_changed"


MapEvent = namedtuple('MapEvent', ['kind', 'payload'])


def _require_number(payload, key):
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidEventError(f"Event field '{key}' must be a finite number")
    return value


def parse_event(data):
    """Build a MapEvent from a JSON request body."""
    if not isinstance(data, dict):
        raise InvalidEventError("Event body must be a JSON object")

    try:
        kind = EventKind(data.get('kind'))
    except ValueError:
        raise InvalidEventError(f"Unknown event kind: {data.get('kind')!r}")

    if kind is EventKind.MAP_CLICKED:
        payload = normalize_coordinate(_require_number(data, 'lat'), _require_number(data, 'lon'))
    elif kind is EventKind.MAP_EXTENT:
        bounds = data.get('extent')
        if not isinstance(bounds, dict):
            raise InvalidEventError("map_extent events need an 'extent' object")
        south, north = _require_number(bounds, 'south'), _require_number(bounds, 'north')
        west, east = _require_number(bounds, 'west'), _require_number(bounds, 'east')
        if south > north:
            raise InvalidEventError("Extent south bound is above its north bound")
        payload = Extent(Coordinate(south, west), Coordinate(north, east))
    else:
        payload = int(_require_number(data, 'zoom'))

    return MapEvent(kind, payload)


class ViewerSession:
    """
    Holds everything the map page shows and mutates it in response to
    loads and map events. All calls are expected on one thread.
    """

    def __init__(self, center, default_zoom, track_policy="first", route_color="orangered",
                 animation_seconds=DEFAULT_ANIMATION_SECONDS, clock=time.monotonic):
        self.center = center
        self.default_zoom = default_zoom
        self.track_policy = track_policy
        self.route_color = route_color
        self.clock = clock

        self.map_view = MapView()
        self.click_marker = ClickMarker(self.map_view, clock, duration=animation_seconds)
        self.route = None
        self.route_line = None

        self._handlers = {
            EventKind.MAP_CLICKED: self._on_map_clicked,
            EventKind.MAP_EXTENT: self._on_map_extent,
            EventKind.ZOOM_CHANGED: self._on_zoom_changed,
        }

        self.map_view.set_zoom(default_zoom)
        self.map_view.set_center(center)

    def load_gpx_file(self, filepath):
        """Load the track in a GPX file on disk and show it."""
        try:
            tracks = parse_gpx_file(filepath)
        except TrackLoadError as e:
            print(f"[ERROR] Loading {filepath} failed: {e}")
            raise
        return self._show_tracks(tracks, filepath)

    def load_gpx_bytes(self, data, source_name='<upload>'):
        """Load the track in raw GPX content and show it."""
        try:
            tracks = parse_gpx_bytes(data, source_name=source_name)
        except TrackLoadError as e:
            print(f"[ERROR] Loading {source_name} failed: {e}")
            raise
        return self._show_tracks(tracks, source_name)

    def _show_tracks(self, tracks, source_name):
        try:
            track = select_track(tracks, policy=self.track_policy)
            route = build_route(track)
        except TrackLoadError as e:
            print(f"[ERROR] Loading {source_name} failed: {e}")
            raise

        if len(tracks) > 1:
            print(f"[WARN] {source_name} has {len(tracks)} tracks; showing the first one")

        if self.route_line is not None:
            self.map_view.remove_coordinate_line(self.route_line.id)

        self.route = route
        self.route_line = self.map_view.add_coordinate_line(
            CoordinateLine(route.coordinates, color=self.route_color, visible=True)
        )
        self.map_view.set_extent(route.extent)
        print(f"[INFO] Showing {len(route.coordinates)} points from {source_name}")
        return route

    def dispatch(self, event):
        handler = self._handlers.get(event.kind)
        if handler is None:
            raise InvalidEventError(f"No handler for event kind {event.kind!r}")
        handler(event.payload)

    def _on_map_clicked(self, coordinate):
        self.click_marker.click(coordinate)

    def _on_map_extent(self, extent):
        self.map_view.set_extent(extent)

    def _on_zoom_changed(self, zoom):
        self.map_view.set_zoom(zoom)

    def reset_zoom(self):
        self.map_view.set_zoom(self.default_zoom)

    def set_marker_visible(self, visible):
        self.click_marker.set_visible(visible)

    def tick(self):
        return self.click_marker.tick()

    def scene(self):
        self.tick()
        scene = self.map_view.to_dict()
        scene['animating'] = self.click_marker.animating
        scene['marker_visible'] = self.click_marker.visible
        scene['route'] = {
            'name': self.route.name,
            'points': len(self.route.coordinates),
        } if self.route else None
        return scene
