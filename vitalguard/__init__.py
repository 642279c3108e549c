import logging

from flask import Flask, request
from dotenv import load_dotenv
from .extensions import db, cors, enable_sqlite_savepoints
from .config import Config
from .notifier import Notifier, build_notifier
from .service import MonitoringService

def create_app(config_class: type = Config, notifier: Notifier | None = None) -> Flask:
    """
    Build the app. Pass a notifier to wire in a push transport; otherwise
    the NOTIFIER setting picks one.
    """
    load_dotenv()
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger(__name__).setLevel(app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    cors.init_app(app)
    with app.app_context():
        enable_sqlite_savepoints(db.engine)

    app.extensions["vitalguard"] = MonitoringService(
        notifier if notifier is not None else build_notifier(app.config["NOTIFIER"])
    )

    @app.before_request
    def _log_req():
        app.logger.debug("REQ: %s %s | CT: %s", request.method, request.path,
                         request.headers.get("Content-Type"))

    @app.get("/health")
    def health():
        return {"status": "OK"}, 200

    # register blueprints
    from .routes.admin import admin_bp
    app.register_blueprint(admin_bp)

    from .routes.api_v1 import api_v1_bp
    app.register_blueprint(api_v1_bp)

    return app
