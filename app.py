import logging
from datetime import date, datetime

from bson import ObjectId
from flask import Flask, jsonify
from flask.json.provider import DefaultJSONProvider
from werkzeug.exceptions import HTTPException

from config import Config
from utils.db import init_db_connection, ensure_indexes
from utils.commands import register_commands

# Import controllers
from controllers.auth_controller import auth_bp
from controllers.admin_controller import admin_bp
from controllers.attendance_controller import attendance_bp
from controllers.csv_controller import csv_bp


class MongoJSONProvider(DefaultJSONProvider):
    """Render ObjectIds as strings and datetimes as ISO 8601."""

    @staticmethod
    def default(o):
        if isinstance(o, ObjectId):
            return str(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return DefaultJSONProvider.default(o)


def register_error_handlers(app):

    @app.errorhandler(413)
    def file_too_large(error):
        return jsonify({"message": "File too large (max 5 MB)"}), 413

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"message": "Not found"}), 404

    @app.errorhandler(Exception)
    def server_error(error):
        if isinstance(error, HTTPException):
            return jsonify({"message": error.description}), error.code
        app.logger.exception("Unhandled error: %s", error)
        return jsonify({"message": "Server error"}), 500


def create_app(config_class=Config):
    app = Flask(__name__)                 # Initialize Flask app
    app.config.from_object(config_class)  # Load configuration from Config class

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    init_db_connection(app)               # Initialize MongoDB connection (registers the ObjectId converter)
    app.json = MongoJSONProvider(app)

    # unique email and one-record-per-day constraints; create_index is idempotent
    with app.app_context():
        ensure_indexes()

    # Register Blueprint
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(csv_bp)

    register_error_handlers(app)
    register_commands(app)
    return app


# Run the app
if __name__ == "__main__":
    create_app().run(debug=True)
