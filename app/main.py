#!/usr/bin/env python3
"""
TrackView - GPX Track Map Viewer
Local web application that shows a GPX track as a route on an interactive map.
"""

import os
from flask import Flask, render_template, request, jsonify
from flask_cors import CORS
from werkzeug.utils import secure_filename

from utils.errors import TrackLoadError, TrackViewError
from utils.session import ViewerSession, parse_event
from utils.app_config import (
    get_cors_origins,
    get_default_zoom,
    get_initial_center,
    get_marker_animation_seconds,
    get_route_color,
    get_startup_gpx_path,
    get_track_selection_policy,
    parse_env_bool,
    parse_env_int,
)

app = Flask(__name__)
CORS(app, resources={r"/*": {"origins": get_cors_origins()}})

# Configuration
ALLOWED_EXTENSIONS = {'gpx'}

app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max file size


def create_session():
    """Build a viewer session from the environment configuration."""
    return ViewerSession(
        center=get_initial_center(),
        default_zoom=get_default_zoom(),
        track_policy=get_track_selection_policy(),
        route_color=get_route_color(),
        animation_seconds=get_marker_animation_seconds(),
    )


def get_session():
    return app.config['VIEWER_SESSION']


def load_startup_track(session, filepath):
    """Load the configured GPX file; failures are logged and the map starts empty."""
    if not filepath:
        return None
    try:
        return session.load_gpx_file(filepath)
    except TrackLoadError as e:
        print(f"[WARN] Startup track not loaded: {e}")
        return None


def allowed_file(filename):
    """Check if file has allowed extension."""
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


app.config['VIEWER_SESSION'] = create_session()
load_startup_track(app.config['VIEWER_SESSION'], get_startup_gpx_path())


@app.route('/')
def index():
    """Render main page."""
    return render_template('index.html')


@app.route('/api/scene', methods=['GET'])
def get_scene():
    """Return the current map scene, advancing any marker animation."""
    return jsonify({
        'success': True,
        'scene': get_session().scene()
    })


@app.route('/api/upload', methods=['POST'])
def upload_gpx():
    """Handle GPX file upload and show its track."""
    if 'file' not in request.files:
        return jsonify({'success': False, 'error_code': 'NO_FILE', 'error': 'No file provided'}), 400

    file = request.files['file']
    if file.filename == '':
        return jsonify({'success': False, 'error_code': 'NO_FILE', 'error': 'No file selected'}), 400

    if not allowed_file(file.filename):
        return jsonify({
            'success': False,
            'error_code': 'INVALID_FILE_TYPE',
            'error': 'Invalid file type. Only GPX files allowed'
        }), 400

    filename = secure_filename(file.filename) or 'track.gpx'
    try:
        route = get_session().load_gpx_bytes(file.read(), source_name=filename)
    except TrackLoadError as e:
        return jsonify(e.to_payload()), 400

    return jsonify({
        'success': True,
        'filename': filename,
        'route': {
            'name': route.name,
            'points': len(route.coordinates),
            'extent': route.extent.to_dict()
        },
        'scene': get_session().scene()
    })


@app.route('/api/events', methods=['POST'])
def post_event():
    """Dispatch a map event (click, extent change, zoom change)."""
    try:
        event = parse_event(request.get_json(silent=True))
        get_session().dispatch(event)
    except TrackViewError as e:
        return jsonify(e.to_payload()), 400

    return jsonify({
        'success': True,
        'scene': get_session().scene()
    })


@app.route('/api/marker', methods=['POST'])
def set_marker_visibility():
    """Show or hide the click marker."""
    data = request.get_json(silent=True) or {}
    get_session().set_marker_visible(parse_env_bool(data.get('visible'), default=False))
    return jsonify({
        'success': True,
        'scene': get_session().scene()
    })


@app.route('/api/zoom/reset', methods=['POST'])
def reset_zoom():
    """Set the map back to the default zoom."""
    get_session().reset_zoom()
    return jsonify({
        'success': True,
        'scene': get_session().scene()
    })


@app.route('/api/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'service': 'TrackView'
    })


if __name__ == '__main__':
    debug_enabled = parse_env_bool(os.getenv('TRACKVIEW_DEBUG'), default=False)
    port = parse_env_int('TRACKVIEW_PORT', 5001)
    # Events are handled one at a time; the session is not shared across threads.
    app.run(host='127.0.0.1', port=port, debug=debug_enabled, threaded=False)
