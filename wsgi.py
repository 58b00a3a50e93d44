"""
Production WSGI entry point for Gunicorn.

Gunicorn will import this file and look for a top-level variable named `app`.
Run a single worker: the reminder scheduler and plant cache live in-process.

Usage:
    gunicorn -w 1 -k gthread --threads 4 -b 0.0.0.0:$PORT wsgi:app
"""

from plant_companion import create_app

# Gunicorn looks for a top-level 'app' variable here.
app = create_app()
