from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event

db = SQLAlchemy()
cors = CORS()


def enable_sqlite_savepoints(engine) -> None:
    """
    Let SQLite honour SAVEPOINT inside the session's transaction.

    pysqlite defers BEGIN until the first write, so a SAVEPOINT issued
    earlier would open (and RELEASE would commit) a transaction of its own.
    Taking over BEGIN keeps the alert and limit inserts nested properly.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")
