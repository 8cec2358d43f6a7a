"""SQLAlchemy ORM models."""

# Import all models so Base.metadata registers them for create_all().
from tracker_server.models.user import User as User
