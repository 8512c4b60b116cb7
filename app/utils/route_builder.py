"""Convert a parsed GPX track into a drawable, boundable route."""

from collections import namedtuple

import numpy as np

from .errors import AmbiguousTrackError, EmptyRouteError, NoTrackError


TRACK_SELECTION_POLICIES = ("first", "single")

Coordinate = namedtuple('Coordinate', ['lat', 'lon'])


class Extent(namedtuple('Extent', ['southwest', 'northeast'])):
    """Axis-aligned lat/lon box given by its south-west and north-east corners."""

    __slots__ = ()

    def contains(self, coordinate):
        return (
            self.southwest.lat <= coordinate.lat <= self.northeast.lat
            and self.southwest.lon <= coordinate.lon <= self.northeast.lon
        )

    def to_dict(self):
        return {
            'southwest': {'lat': self.southwest.lat, 'lon': self.southwest.lon},
            'northeast': {'lat': self.northeast.lat, 'lon': self.northeast.lon},
            'north': self.northeast.lat,
            'south': self.southwest.lat,
            'east': self.northeast.lon,
            'west': self.southwest.lon,
        }


RouteData = namedtuple('RouteData', ['name', 'coordinates', 'extent'])


def normalize_coordinate(lat, lon):
    """Clamp latitude to [-90, 90] and wrap longitude into [-180, 180)."""
    lat = min(90.0, max(-90.0, float(lat)))
    lon = float(lon)
    if not -180.0 <= lon < 180.0:
        lon = ((lon + 180.0) % 360.0) - 180.0
    return Coordinate(lat, lon)


def build_coordinates(track):
    """Return one Coordinate per waypoint, in recording order."""
    return [Coordinate(point.lat, point.lon) for point in track.points]


def build_extent(coordinates):
    """
    Compute the bounding extent of a coordinate sequence.

    Args:
        coordinates: Non-empty sequence of Coordinate

    Returns:
        Extent: south-west (min lat, min lon) and north-east (max lat, max lon) corners
    """
    if len(coordinates) == 0:
        raise EmptyRouteError("Cannot compute an extent over zero coordinates")

    points = np.asarray(coordinates, dtype=np.float64)
    mins = points.min(axis=0)
    maxs = points.max(axis=0)

    return Extent(
        southwest=Coordinate(float(mins[0]), float(mins[1])),
        northeast=Coordinate(float(maxs[0]), float(maxs[1])),
    )


def select_track(tracks, policy="first"):
    """
    Pick the track to display from a parsed GPX file.

    With policy "first" a multi-track file yields its first track in document
    order; with "single" it is rejected.
    """
    tracks = list(tracks)
    if not tracks:
        raise NoTrackError()
    if len(tracks) == 1:
        return tracks[0]
    if policy == "single":
        raise AmbiguousTrackError(len(tracks))
    return tracks[0]


def build_route(track):
    """Build the coordinate line and extent for a single track."""
    coordinates = build_coordinates(track)
    if not coordinates:
        raise EmptyRouteError(
            f"Track '{track.name or 'Unnamed Track'}' has no waypoints to draw",
        )
    return RouteData(
        name=track.name,
        coordinates=coordinates,
        extent=build_extent(coordinates),
    )
