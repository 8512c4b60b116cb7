"""Server-side model of what the Leaflet map widget displays."""

import itertools

from .route_builder import Coordinate


MIN_ZOOM = 0
MAX_ZOOM = 28

_ids = itertools.count(1)


def _coordinate_dict(coordinate):
    return {'lat': coordinate.lat, 'lon': coordinate.lon}


class CoordinateLine:
    """A polyline over an ordered sequence of coordinates."""

    def __init__(self, coordinates, color="orangered", visible=True):
        self.id = f"line-{next(_ids)}"
        self.coordinates = list(coordinates)
        self.color = color
        self.visible = visible

    def to_dict(self):
        return {
            'id': self.id,
            'color': self.color,
            'visible': self.visible,
            'coordinates': [[c.lat, c.lon] for c in self.coordinates],
        }


class Marker:
    """A single positioned marker; position stays None until it is placed."""

    def __init__(self, color="orange", visible=False):
        self.id = f"marker-{next(_ids)}"
        self.color = color
        self.visible = visible
        self.position = None

    def to_dict(self):
        return {
            'id': self.id,
            'color': self.color,
            'visible': self.visible,
            'position': _coordinate_dict(self.position) if self.position else None,
        }


class MapView:
    """Lines, markers, extent, zoom and center shown by the map page."""

    def __init__(self):
        self.lines = {}
        self.markers = {}
        self.extent = None
        self._zoom = None
        self._center = None

    def add_coordinate_line(self, line):
        self.lines[line.id] = line
        return line

    def remove_coordinate_line(self, line_id):
        return self.lines.pop(line_id, None)

    def add_marker(self, marker):
        if marker.position is None:
            raise ValueError("A marker can only be added once its position is set")
        self.markers[marker.id] = marker
        return marker

    def remove_marker(self, marker_id):
        return self.markers.pop(marker_id, None)

    def has_marker(self, marker_id):
        return marker_id in self.markers

    def set_extent(self, extent):
        self.extent = extent

    @property
    def zoom(self):
        return self._zoom

    def set_zoom(self, zoom):
        self._zoom = max(MIN_ZOOM, min(MAX_ZOOM, int(zoom)))

    @property
    def center(self):
        return self._center

    def set_center(self, coordinate):
        self._center = Coordinate(coordinate.lat, coordinate.lon)

    def to_dict(self):
        return {
            'zoom': self._zoom,
            'center': _coordinate_dict(self._center) if self._center else None,
            'extent': self.extent.to_dict() if self.extent else None,
            'lines': [line.to_dict() for line in self.lines.values()],
            'markers': [marker.to_dict() for marker in self.markers.values()],
        }
