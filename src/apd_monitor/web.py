"""Flask liveness/status endpoint"""
import logging
import threading
from typing import Callable, Optional

from flask import Flask, jsonify

from .models import PollStatus

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "Bot activo y funcionando!"


def create_app(status_provider: Optional[Callable[[], PollStatus]] = None) -> Flask:
    """Build the Flask app serving `/` and `/status`"""
    app = Flask(__name__)

    @app.route('/')
    def index():
        return LIVENESS_TEXT

    @app.route('/status')
    def status():
        if not status_provider:
            return jsonify({"error": "status unavailable"}), 503
        return jsonify(status_provider().as_dict())

    return app


class HealthServer:
    """Flask-based liveness server running in a background thread"""

    def __init__(self, port: int = 3000, status_provider: Optional[Callable[[], PollStatus]] = None):
        self.port = port
        self.app = create_app(status_provider)

    def start(self) -> None:
        """Start web server in background thread"""
        def run():
            logging.getLogger('werkzeug').setLevel(logging.WARNING)
            self.app.run(host='0.0.0.0', port=self.port, threaded=True, use_reloader=False)

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        logger.info(f"🌐 Servidor escuchando en puerto {self.port}")
