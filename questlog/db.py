from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event, inspect
import logging

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()
migrate = Migrate()


def init_db(app):
    with app.app_context():
        # Ensure foreign keys are enforced when a SQLite connection is opened
        @event.listens_for(db.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            import sqlite3
            if not isinstance(dbapi_connection, sqlite3.Connection):
                return

            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.execute("PRAGMA busy_timeout=30000;")
            cursor.close()

        # Import models so their tables are registered before create_all
        import questlog.models  # noqa: F401

        inspector = inspect(db.engine)
        if not inspector.has_table("collection_entry"):
            logger.info("Initializing database tables...")
        db.create_all()
