"""Flask application factory for the OverlayForge web API."""

from flask import Flask, jsonify


def create_app() -> Flask:
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = 256 * 1024 * 1024  # 256 MB of capture JSON

    from overlayforge.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({"error": "Payload too large"}), 413

    return app
