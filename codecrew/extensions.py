"""Application-wide Flask extensions."""

from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy


# A single SQLAlchemy handle shared across the application. The actual engine is
# configured in :func:`codecrew.create_app` so it respects the deployment
# environment (SQLite for development, a pooled URL in production).
db = SQLAlchemy()

cors = CORS()
