# Overview: Shared Flask-SQLAlchemy handle and Alembic migration binding.
# Bound to the app in create_app(); services receive `db` from here.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()
