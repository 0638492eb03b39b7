# Overview: Shared Flask-SQLAlchemy and Flask-Migrate instances for the box office pricing backend.
# Bound to the app in create_app(); models and pricing services import db from here.

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()
