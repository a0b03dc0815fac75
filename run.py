#!/usr/bin/env python3
"""
Community Connector API - development entry point

Production runs ``connector:create_app()`` under a WSGI server; tables are
created with ``flask init-db``.
"""
import os

from connector import create_app, db

app = create_app()

if __name__ == '__main__':
    with app.app_context():
        db.create_all()

    app.run(
        host=os.getenv('HOST', '127.0.0.1'),
        port=int(os.getenv('PORT', 5000)),
        debug=app.config.get('DEBUG', False),
    )
