"""Flask extensions initialization."""

from flask_marshmallow import Marshmallow
from flask_sqlalchemy import SQLAlchemy


# SQLAlchemy database instance (task and user stores)
db = SQLAlchemy()

# Marshmallow serialization instance
ma = Marshmallow()
