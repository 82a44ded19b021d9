import json
import logging

from flask import Flask, jsonify

from config import Config


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    # Keep camelCase keys in the order the calculators emit them
    app.json.sort_keys = False

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))
    logger = logging.getLogger(__name__)

    # Gzip compression, full reports carry every module's trace and tables
    from flask_compress import Compress
    Compress(app)

    from esg_engine.api.routes import api_bp

    app.register_blueprint(api_bp)

    @app.route("/health")
    def health():
        """Health check: app status and module catalogue size."""
        from esg_engine.calculations.run_module import MODULE_IDS
        return json.dumps({
            "status": "ok",
            "modules": len(MODULE_IDS),
        }), 200, {"Content-Type": "application/json"}

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({"error": getattr(error, "description", str(error))}), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": getattr(error, "description", str(error))}), 404

    @app.errorhandler(413)
    def payload_too_large(error):
        max_mb = app.config.get("MAX_CONTENT_LENGTH", 0) // (1024 * 1024)
        return jsonify({"error": f"Payload too large. Maximum size is {max_mb} MB."}), 413

    @app.errorhandler(500)
    def internal_error(error):
        original = getattr(error, "original_exception", None) or error
        logger.error(f"500 error: {type(original).__name__}: {original}")
        return jsonify({"error": "Internal server error"}), 500

    logger.info("ESG calculation engine ready.")
    return app
