"""
REST API for GCS Live Map

Accepts map events over HTTP and serves the current map state to the
browser page that renders it.
"""

import threading
from typing import Optional
import logging

from flask import Flask, request, jsonify
from flask_cors import CORS

from ..overlay import (
    Dispatcher,
    EVENTS,
    MapError,
    MapSession,
    RecordingSurface,
    UnknownEventError,
    UnknownVehicleError,
)
from ..utils.geo import LatLng, is_finite_coordinate
from ..utils.logger import EventJournal

logger = logging.getLogger(__name__)


def create_api_server(session: MapSession,
                      port: int = 8080,
                      host: str = '0.0.0.0',
                      journal: Optional[EventJournal] = None) -> 'APIServer':
    """
    Create and start REST API server

    Args:
        session: MapSession the events are applied to
        port: HTTP port
        host: Host address
        journal: Optional journal recording every applied event

    Returns:
        Running APIServer instance
    """
    server = APIServer(session, port, host, journal)
    server.start()
    return server


def error_status(error: MapError) -> int:
    """HTTP status for a rejected event"""
    if isinstance(error, (UnknownVehicleError, UnknownEventError)):
        return 404
    return 400


class APIServer:
    """REST API Server"""

    def __init__(self, session: MapSession,
                 port: int = 8080, host: str = '0.0.0.0',
                 journal: Optional[EventJournal] = None):
        self.session = session
        self.port = port
        self.host = host

        self.dispatcher = Dispatcher(session, journal)

        # Flask serves requests on worker threads; events must not interleave
        self._lock = threading.Lock()

        self.app = Flask(__name__)
        CORS(self.app)

        self._thread: Optional[threading.Thread] = None
        self._setup_routes()

    def _setup_routes(self):
        """Setup API routes"""

        # ==================== Health ====================

        @self.app.route('/api/health', methods=['GET'])
        def health():
            """Health check endpoint"""
            with self._lock:
                return jsonify({
                    'status': 'ok',
                    'vehicles': len(self.session.vehicles),
                    'events': self.dispatcher.event_count,
                })

        # ==================== Events ====================

        @self.app.route('/api/events', methods=['GET'])
        def list_events():
            """List accepted events and their parameters"""
            return jsonify({'events': {call: list(params) for call, params in EVENTS.items()}})

        @self.app.route('/api/events', methods=['POST'])
        def post_event():
            """
            Apply one event

            Request body: {"call": "positionUpdate", "args": ["A", 37.5, -122.0, 10]}
            """
            data = request.get_json(silent=True)
            if not data:
                return jsonify({'error': 'No data provided'}), 400

            try:
                with self._lock:
                    self.dispatcher.dispatch_event(data)
                return jsonify({'ok': True})

            except MapError as e:
                logger.warning(f"Rejected event {data.get('call') if isinstance(data, dict) else data!r}: {e}")
                return jsonify({'ok': False, 'error': str(e)}), error_status(e)

        @self.app.route('/api/events/batch', methods=['POST'])
        def post_events():
            """
            Apply events in order, stopping at the first failure

            Request body: {"events": [{...}, {...}]}
            Returns: {ok, applied, [index, error]}
            """
            data = request.get_json(silent=True)
            if not isinstance(data, dict) or not isinstance(data.get('events'), list):
                return jsonify({'error': "Expected {'events': [...]}"}), 400

            applied = 0
            with self._lock:
                for index, event in enumerate(data['events']):
                    try:
                        self.dispatcher.dispatch_event(event)
                    except MapError as e:
                        logger.warning(f"Rejected batch event {index}: {e}")
                        return jsonify({
                            'ok': False,
                            'applied': applied,
                            'index': index,
                            'error': str(e),
                        }), error_status(e)
                    applied += 1

            return jsonify({'ok': True, 'applied': applied})

        # ==================== State ====================

        @self.app.route('/api/state', methods=['GET'])
        def get_state():
            """Everything drawn on the map plus the session summary"""
            with self._lock:
                state = {'session': self.session.status()}
                surface = self.session.surface
                if isinstance(surface, RecordingSurface):
                    state['surface'] = surface.snapshot()
                return jsonify(state)

        @self.app.route('/api/vehicles', methods=['GET'])
        def list_vehicles():
            with self._lock:
                return jsonify({'vehicles': self.session.vehicles.names()})

        @self.app.route('/api/vehicles/<name>', methods=['GET'])
        def get_vehicle(name: str):
            """Telemetry and rendered label for one vehicle"""
            with self._lock:
                try:
                    vehicle = self.session.vehicles.get(name)
                except UnknownVehicleError as e:
                    return jsonify({'error': str(e)}), 404

                label = self.session.vehicles.label(vehicle)
                data = vehicle.to_dict()
                data['label'] = label.content
                data['title'] = label.title
                return jsonify(data)

        # ==================== Clicks ====================

        @self.app.route('/api/markers/<int:marker_id>/click', methods=['POST'])
        def click_marker(marker_id: int):
            """Forward a marker click from the page"""
            surface = self.session.surface
            if not isinstance(surface, RecordingSurface):
                return jsonify({'error': 'Surface does not accept clicks'}), 501

            with self._lock:
                if marker_id not in surface.markers:
                    return jsonify({'error': f'No marker with id {marker_id}'}), 404
                surface.click_marker(marker_id)
                return jsonify({'ok': True, 'viewport': surface.snapshot()['viewport']})

        @self.app.route('/api/map/click', methods=['POST'])
        def click_map():
            """
            Forward a map background click from the page

            Request body: {"lat": .., "lng": ..}
            """
            surface = self.session.surface
            if not isinstance(surface, RecordingSurface):
                return jsonify({'error': 'Surface does not accept clicks'}), 501

            data = request.get_json(silent=True) or {}
            lat, lng = data.get('lat'), data.get('lng')
            if not is_finite_coordinate(lat, lng):
                return jsonify({'error': 'Expected finite lat and lng'}), 400

            with self._lock:
                surface.click_map(LatLng(lat, lng))
                return jsonify({'ok': True, 'viewport': surface.snapshot()['viewport']})

    def start(self):
        """Start API server in background thread"""
        self._thread = threading.Thread(
            target=lambda: self.app.run(
                host=self.host,
                port=self.port,
                debug=False,
                use_reloader=False
            ),
            daemon=True
        )
        self._thread.start()
        logger.info(f"REST API started on http://{self.host}:{self.port}")

    def stop(self):
        """Close the map session; the daemon thread exits with the process"""
        with self._lock:
            self.session.close()
