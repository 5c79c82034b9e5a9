# Overview: Flask extension instances for database, migrations and collection storage.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()

# Imported after db: the storage layer's models need it at import time
from .storage import DataStore  # noqa: E402

store = DataStore()
