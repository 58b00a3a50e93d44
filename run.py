"""
Local development entry point.

Creates the Flask app via create_app() and runs the dev server. Keeps startup
simple and avoids embedding app logic here.
"""

import os

# Allow overriding config via environment variable for dev/test flexibility
os.environ.setdefault("APP_CONFIG", "plant_companion.config.DevConfig")

from plant_companion import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    # use_reloader=False so the background reminder scheduler is not started twice
    app.run(
        host="127.0.0.1",
        port=int(os.getenv("PORT", 5000)),
        debug=os.getenv("FLASK_DEBUG", "1") == "1",
        use_reloader=False,
    )
