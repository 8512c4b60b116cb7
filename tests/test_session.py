import os
import tempfile
import unittest

from app.utils.errors import (
    AmbiguousTrackError,
    EmptyRouteError,
    GpxFileNotFoundError,
    GpxParseError,
    InvalidEventError,
    NoTrackError,
)
from app.utils.route_builder import Coordinate
from app.utils.session import EventKind, MapEvent, ViewerSession, parse_event
from gpx_samples import (
    EMPTY_TRACK_GPX,
    MALFORMED_GPX,
    NAN_POINT_GPX,
    NO_TRACK_GPX,
    OUT_OF_RANGE_GPX,
    THREE_POINT_GPX,
    TWO_TRACK_GPX,
    make_gpx,
)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def make_session(**kwargs):
    clock = kwargs.pop("clock", FakeClock())
    return ViewerSession(
        center=Coordinate(52.3676, 4.9041),
        default_zoom=14,
        clock=clock,
        **kwargs
    )


class SessionInitTests(unittest.TestCase):
    def test_initial_scene(self):
        scene = make_session().scene()
        self.assertEqual(scene["zoom"], 14)
        self.assertEqual(scene["center"], {"lat": 52.3676, "lon": 4.9041})
        self.assertEqual(scene["lines"], [])
        self.assertEqual(scene["markers"], [])
        self.assertIsNone(scene["route"])
        self.assertFalse(scene["marker_visible"])
        self.assertFalse(scene["animating"])


class SessionLoadTests(unittest.TestCase):
    def test_load_scenario(self):
        session = make_session()
        route = session.load_gpx_bytes(THREE_POINT_GPX.encode("utf-8"), source_name="ride.gpx")
        self.assertEqual(
            route.coordinates,
            [Coordinate(52.0, 4.0), Coordinate(52.1, 4.2), Coordinate(51.9, 4.1)],
        )
        self.assertEqual(route.extent.southwest, Coordinate(51.9, 4.0))
        self.assertEqual(route.extent.northeast, Coordinate(52.1, 4.2))

        scene = session.scene()
        self.assertEqual(len(scene["lines"]), 1)
        self.assertEqual(scene["lines"][0]["color"], "orangered")
        self.assertTrue(scene["lines"][0]["visible"])
        self.assertEqual(scene["extent"]["south"], 51.9)
        self.assertEqual(scene["route"], {"name": "Track 1", "points": 3})

    def test_new_route_replaces_old_line(self):
        session = make_session(route_color="blue")
        session.load_gpx_bytes(THREE_POINT_GPX)
        first_line = session.route_line.id
        session.load_gpx_bytes(make_gpx([[(10.0, 20.0), (11.0, 21.0)]]))
        scene = session.scene()
        self.assertEqual(len(scene["lines"]), 1)
        self.assertNotEqual(scene["lines"][0]["id"], first_line)
        self.assertEqual(scene["lines"][0]["color"], "blue")
        self.assertEqual(scene["extent"]["north"], 11.0)

    def test_failed_loads_keep_previous_route(self):
        session = make_session(track_policy="single")
        previous = session.load_gpx_bytes(THREE_POINT_GPX)
        failures = [
            (MALFORMED_GPX, GpxParseError),
            (NAN_POINT_GPX, GpxParseError),
            (OUT_OF_RANGE_GPX, GpxParseError),
            (NO_TRACK_GPX, NoTrackError),
            (EMPTY_TRACK_GPX, EmptyRouteError),
            (TWO_TRACK_GPX, AmbiguousTrackError),
        ]
        for content, error in failures:
            with self.assertRaises(error):
                session.load_gpx_bytes(content)
            self.assertIs(session.route, previous)
            self.assertEqual(len(session.scene()["lines"]), 1)
            self.assertEqual(session.map_view.extent, previous.extent)

    def test_first_policy_shows_first_track(self):
        session = make_session(track_policy="first")
        route = session.load_gpx_bytes(TWO_TRACK_GPX)
        self.assertEqual(route.coordinates[0], Coordinate(52.0, 4.0))

    def test_load_file(self):
        session = make_session()
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "ride.gpx")
            with open(path, "w", encoding="utf-8") as f:
                f.write(THREE_POINT_GPX)
            route = session.load_gpx_file(path)
        self.assertEqual(len(route.coordinates), 3)

    def test_missing_file(self):
        session = make_session()
        with self.assertRaises(GpxFileNotFoundError):
            session.load_gpx_file("/nonexistent/ride.gpx")
        self.assertIsNone(session.route)


class SessionEventTests(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.session = make_session(clock=self.clock)

    def test_click_with_hidden_marker_is_ignored(self):
        self.session.dispatch(MapEvent(EventKind.MAP_CLICKED, Coordinate(52.37, 4.90)))
        self.assertEqual(self.session.scene()["markers"], [])
        self.assertIsNone(self.session.click_marker.position)

    def test_click_places_visible_marker(self):
        self.session.set_marker_visible(True)
        self.session.dispatch(parse_event({"kind": "map_clicked", "lat": 52.37, "lon": 4.90}))
        markers = self.session.scene()["markers"]
        self.assertEqual(len(markers), 1)
        self.assertEqual(markers[0]["position"], {"lat": 52.37, "lon": 4.90})

    def test_animation_snaps_to_target(self):
        self.session.set_marker_visible(True)
        self.session.dispatch(MapEvent(EventKind.MAP_CLICKED, Coordinate(52.0, 4.0)))
        self.session.dispatch(MapEvent(EventKind.MAP_CLICKED, Coordinate(52.2, 4.2)))

        self.clock.now = 0.3
        self.assertTrue(self.session.scene()["animating"])
        self.clock.now = 1.2
        scene = self.session.scene()
        self.assertFalse(scene["animating"])
        self.assertEqual(scene["markers"][0]["position"], {"lat": 52.2, "lon": 4.2})

    def test_extent_event_sets_extent(self):
        event = parse_event({
            "kind": "map_extent",
            "extent": {"south": 51.0, "west": 3.0, "north": 53.0, "east": 6.0},
        })
        self.session.dispatch(event)
        extent = self.session.map_view.extent
        self.assertEqual(extent.southwest, Coordinate(51.0, 3.0))
        self.assertEqual(extent.northeast, Coordinate(53.0, 6.0))

    def test_zoom_event_and_reset(self):
        self.session.dispatch(parse_event({"kind": "zoom_changed", "zoom": 9}))
        self.assertEqual(self.session.map_view.zoom, 9)
        self.session.dispatch(parse_event({"kind": "zoom_changed", "zoom": 99}))
        self.assertEqual(self.session.map_view.zoom, 28)
        self.session.reset_zoom()
        self.assertEqual(self.session.map_view.zoom, 14)


class ParseEventTests(unittest.TestCase):
    def test_click_is_normalized(self):
        event = parse_event({"kind": "map_clicked", "lat": 10.0, "lon": 190.0})
        self.assertIs(event.kind, EventKind.MAP_CLICKED)
        self.assertEqual(event.payload, Coordinate(10.0, -170.0))

    def test_invalid_events(self):
        bad_events = [
            None,
            [],
            {"kind": "pointer_moved"},
            {"kind": "map_clicked", "lat": "52", "lon": 4.0},
            {"kind": "map_clicked", "lat": True, "lon": 4.0},
            {"kind": "map_extent"},
            {"kind": "map_extent", "extent": {"south": 5.0, "north": 1.0, "west": 0.0, "east": 1.0}},
            {"kind": "zoom_changed"},
            {"kind": "zoom_changed", "zoom": float("inf")},
            {"kind": "map_clicked", "lat": 52.0, "lon": float("nan")},
            {"kind": "map_extent", "extent": {"south": float("-inf"), "north": 1.0, "west": 0.0, "east": 1.0}},
        ]
        for data in bad_events:
            with self.assertRaises(InvalidEventError):
                parse_event(data)


if __name__ == "__main__":
    unittest.main()
