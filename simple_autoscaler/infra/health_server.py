import logging
import threading

from flask import Flask, jsonify

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    app = Flask(__name__)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"}), 200

    return app


def start_health_server(port: int, host: str = "0.0.0.0") -> threading.Thread:
    """Serves the liveness endpoint from a daemon thread, independent of the scaling loop."""
    app = create_app()
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": host, "port": port, "use_reloader": False},
        name="health-server",
        daemon=True,
    )
    thread.start()
    logger.info(f"Health endpoint listening on {host}:{port}")
    return thread
