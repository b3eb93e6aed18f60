# FILE: run.py
# DESCRIPTION: Run the signlink application (production entrypoint for Gunicorn).

"""
Entrypoint for the signlink application.
Used by Gunicorn to start the app server.
"""

from signlink import create_app
from signlink.config import Settings
from signlink.log_utils.logging_config import configure_logging

# Configure logging first
logger = configure_logging(
    name="signlink",
    logfile="signlink.log",
    level=None  # Will use LOG_LEVEL from .env if present
)

# Create the Flask application
app = create_app(Settings.from_env())

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
