from rishta.db.session import engine
from rishta.db.base import Base
from rishta.models import *  # noqa: F401,F403 Import all models

print("Creating database tables...")
Base.metadata.create_all(bind=engine)
print("✅ All tables created successfully!")
