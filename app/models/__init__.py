"""
Ship or Sink: Change
Shared SQLAlchemy instance.

Every model module imports ``db`` from here; ``create_app`` binds it.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
