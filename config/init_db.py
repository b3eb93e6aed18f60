# File: config/init_db.py

from signlink.config import Settings
from signlink.db.session import get_engine, init_db

if __name__ == "__main__":
    settings = Settings.from_env()
    print("⏳ Creating database tables...")
    init_db(get_engine(settings.database_url))
    print("✅ Tables created.")
