import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config
from .controllers.auth import bp as auth_bp
from .controllers.notifications import bp as notifications_bp
from .controllers.rentals import bp as rentals_bp
from .controllers.reports import bp as reports_bp
from .controllers.reviews import bp as reviews_bp
from .controllers.staff import bp as admin_bp
from .controllers.vehicles import bp as vehicles_bp
from .controllers.views import bp as views_bp
from .exceptions import DomainError
from .models.store import Store

logger = logging.getLogger(__name__)


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    logging.basicConfig(level=app.config["LOG_LEVEL"], format=app.config["LOG_FORMAT"])

    if not app.config.get("TESTING"):
        Store.instance(app.config["DATA_PATH"])  # load data.pkl or start empty

    app.register_blueprint(auth_bp)
    app.register_blueprint(views_bp)
    app.register_blueprint(rentals_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(admin_bp)

    @app.errorhandler(DomainError)
    def handle_domain_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        return jsonify({"error": err.name.lower().replace(" ", "_"), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.exception("Unhandled error")
        return jsonify({"error": "internal_error", "message": "Error: an unexpected error occurred"}), 500

    return app
