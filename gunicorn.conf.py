import os

# Logging
accesslog = "-"  # Log to stdout
errorlog = "-"   # Log to stderr
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

# Worker configuration
bind = os.environ.get("BIND", "0.0.0.0:5000")
workers = int(os.environ.get("WEB_CONCURRENCY", 3))
worker_class = "sync"
timeout = 60

# Path handling
forwarded_allow_ips = "*"

# Error handling
capture_output = True
enable_stdio_inheritance = True

# Create logs directory if it doesn't exist
os.makedirs(os.environ.get("SIGNLINK_LOG_DIR") or "logs", exist_ok=True)
