"""
WSGI / Flask-Migrate entry point.

Usage:
    flask --app wsgi run
    FLASK_APP=wsgi flask db upgrade
"""

from trackboard import create_app

app = create_app()
