from flask import Flask, jsonify
from flask_cors import CORS

from planner.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(config_class=None):
    # Import config after dotenv is loaded
    from planner.config import get_config
    from planner.api import scheduling_bp

    # Get the appropriate config class based on environment
    config_class = config_class or get_config()

    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(
        log_level=app.config.get("LOG_LEVEL", "INFO"),
        log_file=app.config.get("LOG_FILE"),
    )

    logger.info(f"Starting application in {config_class.ENV} environment")
    logger.info(
        "Work calendar defaults",
        include_holidays=app.config.get("WORK_CALENDAR_INCLUDE_HOLIDAYS"),
        country=app.config.get("WORK_CALENDAR_COUNTRY"),
        subdivision=app.config.get("WORK_CALENDAR_SUBDIVISION"),
    )

    # Get allowed origins from environment variable
    allowed_origins = app.config.get("CORS_ORIGINS", "*")
    if allowed_origins != "*":
        # Parse comma-separated list if provided
        allowed_origins = [origin.strip() for origin in allowed_origins.split(",")]

    CORS(app,
         resources={r"/*": {"origins": allowed_origins}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "OPTIONS"])

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"}), 200

    # Register blueprints
    app.register_blueprint(scheduling_bp, url_prefix="/scheduling")

    # Global error handler to ensure CORS headers are always included
    @app.errorhandler(Exception)
    def handle_exception(e):
        """Handle all exceptions and return a JSON error response"""
        if hasattr(e, 'code') and isinstance(e.code, int):
            status_code = e.code
        else:
            status_code = 500

        if status_code >= 500:
            logger.error("Unhandled exception", error=str(e), exc_info=True)

        response = jsonify({
            "error": str(e),
            "message": "An error occurred processing your request"
        })
        response.status_code = status_code
        return response

    return app
