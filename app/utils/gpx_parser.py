"""GPX file parsing utilities."""

import math
import os
import re
from collections import namedtuple

import gpxpy
import gpxpy.gpx

from .errors import GpxFileNotFoundError, GpxParseError


Waypoint = namedtuple('Waypoint', ['lat', 'lon', 'elevation', 'time'], defaults=(None, None))

Track = namedtuple('Track', ['name', 'points'])

_XML_DECLARATION = re.compile(rb'^\s*<\?xml[^>]*?\?>')
_DECLARED_ENCODING = re.compile(rb'encoding\s*=\s*["\']([A-Za-z][A-Za-z0-9._-]*)["\']')


def _valid_position(lat, lon):
    return (
        lat is not None and lon is not None
        and math.isfinite(lat) and math.isfinite(lon)
        and -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0
    )


def _collect_tracks(gpx, source_name):
    """Flatten each GPX track's segments into one ordered list of waypoints."""
    tracks = []
    for track in gpx.tracks:
        points = []
        for segment in track.segments:
            for point in segment.points:
                if not _valid_position(point.latitude, point.longitude):
                    raise GpxParseError(
                        f"{source_name} has a track point with invalid position "
                        f"lat={point.latitude}, lon={point.longitude}",
                        details={'source': source_name, 'point_index': len(points)},
                    )
                points.append(Waypoint(
                    lat=point.latitude,
                    lon=point.longitude,
                    elevation=point.elevation,
                    time=point.time,
                ))
        tracks.append(Track(name=track.name, points=tuple(points)))
    return tracks


def _decode_gpx(data, source_name):
    """Decode GPX bytes using the encoding named in the XML declaration (UTF-8 if none)."""
    if data.startswith(b'\xef\xbb\xbf'):
        data = data[3:]

    encoding = 'utf-8'
    declaration = _XML_DECLARATION.match(data)
    if declaration:
        declared = _DECLARED_ENCODING.search(declaration.group(0))
        if declared:
            encoding = declared.group(1).decode('ascii')
        data = data[declaration.end():]

    try:
        return data.decode(encoding)
    except LookupError:
        raise GpxParseError(f"{source_name} declares unknown encoding '{encoding}'")
    except UnicodeDecodeError as e:
        raise GpxParseError(f"{source_name} is not valid {encoding}: {e}")


def parse_gpx_bytes(data, source_name='<upload>'):
    """
    Parse raw GPX content into tracks.

    Args:
        data: GPX document as bytes or str
        source_name: Label used in error messages

    Returns:
        list: Track tuples in document order (possibly empty)
    """
    if isinstance(data, bytes):
        data = _decode_gpx(data, source_name)

    try:
        gpx = gpxpy.parse(data)
    except gpxpy.gpx.GPXException as e:
        raise GpxParseError(f"Could not parse {source_name}: {e}", details={'source': source_name})

    return _collect_tracks(gpx, source_name)


def parse_gpx_file(filepath):
    """
    Parse a GPX file on disk into tracks.

    Args:
        filepath: Path to GPX file

    Returns:
        list: Track tuples in document order (possibly empty)
    """
    if not os.path.isfile(filepath):
        raise GpxFileNotFoundError(f"Could not find GPX file: {filepath}", details={'path': filepath})

    with open(filepath, 'rb') as gpx_file:
        data = gpx_file.read()

    return parse_gpx_bytes(data, source_name=os.path.basename(filepath))
