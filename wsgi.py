#!/usr/bin/env python3
"""
WSGI entry point for the classroom API.
Gunicorn and other WSGI servers load `app` from here; `python wsgi.py` runs
the development server.
"""

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get('DEBUG', False),
            port=int(app.config.get('PORT', 5000)))
