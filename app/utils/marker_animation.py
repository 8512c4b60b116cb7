"""Click marker placement and its linear move animation."""

from .map_view import Marker
from .route_builder import Coordinate


DEFAULT_ANIMATION_SECONDS = 1.0


class MarkerAnimation:
    """Linear tween between two coordinates over a fixed duration."""

    def __init__(self, start, target, started_at, duration=DEFAULT_ANIMATION_SECONDS):
        self.start = start
        self.target = target
        self.started_at = started_at
        self.duration = duration
        self.delta_lat = target.lat - start.lat
        self.delta_lon = target.lon - start.lon

    def fraction(self, now):
        if self.duration <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.started_at) / self.duration))

    def position_at(self, now):
        """Interpolated position at `now`; exactly the target once finished."""
        v = self.fraction(now)
        if v >= 1.0:
            return self.target
        return Coordinate(
            self.start.lat + v * self.delta_lat,
            self.start.lon + v * self.delta_lon,
        )

    def is_finished(self, now):
        return self.fraction(now) >= 1.0


class ClickMarker:
    """
    The marker moved around by map clicks.

    Hidden markers ignore clicks. The first click on a visible marker places
    it; later clicks animate it to the new position. A click during an
    animation restarts the tween from the current interpolated position.
    """

    def __init__(self, map_view, clock, duration=DEFAULT_ANIMATION_SECONDS, color="orange"):
        self.map_view = map_view
        self.clock = clock
        self.duration = duration
        self.marker = Marker(color=color, visible=False)
        self.animation = None

    @property
    def position(self):
        return self.marker.position

    @property
    def visible(self):
        return self.marker.visible

    @property
    def animating(self):
        return self.animation is not None

    def set_visible(self, visible):
        self.marker.visible = bool(visible)

    def click(self, coordinate):
        """Handle a map click at an already normalized coordinate."""
        if not self.marker.visible:
            return False

        now = self.clock()
        if self.marker.position is None:
            self.marker.position = coordinate
            self.map_view.add_marker(self.marker)
            return True

        if self.animation is not None:
            self.marker.position = self.animation.position_at(now)

        self.animation = MarkerAnimation(self.marker.position, coordinate, now, self.duration)
        return True

    def tick(self):
        """Advance the running animation, snapping to the target when done."""
        if self.animation is None:
            return False

        now = self.clock()
        if self.animation.is_finished(now):
            self.marker.position = self.animation.target
            self.animation = None
        else:
            self.marker.position = self.animation.position_at(now)
        return True
