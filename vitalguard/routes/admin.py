import os
from flask import Blueprint, request, current_app
from ..extensions import db
from ..models import Alert, Limit, Patient, Reading, Recommendation

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _db_file():
    db_file = db.engine.url.database
    if not db_file or db_file == ":memory:":
        return db_file, None
    return db_file, os.path.abspath(db_file)


@admin_bp.get("/db-path")
def db_path():
    db_file, abs_path = _db_file()
    return {"database_uri": db.engine.url.render_as_string(hide_password=True),
            "db_file": db_file, "absolute_path": abs_path}, 200


@admin_bp.route("/init-db", methods=["POST", "GET"])
def init_db():
    if request.method == "GET" and request.args.get("confirm") != "yes":
        return {"message": "Use POST or /admin/init-db?confirm=yes (local only)"}, 200
    db.create_all()
    current_app.logger.info("schema created on %s", _db_file()[1] or db.engine.url.render_as_string(hide_password=True))
    return {"status": "initialized"}, 201


@admin_bp.get("/table-counts")
def table_counts():
    """Row counts per engine table, for checking a cascade or a seed by hand."""
    return {model.__tablename__: db.session.query(model).count()
            for model in (Patient, Reading, Limit, Alert, Recommendation)}, 200


@admin_bp.get("/routes")
def list_routes():
    routes = []
    for rule in current_app.url_map.iter_rules():
        routes.append({"rule": str(rule), "methods": sorted(list(rule.methods))})
    return {"routes": routes}, 200
