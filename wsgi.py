"""ABOUTME: WSGI entry point for production deployment
ABOUTME: Creates Flask application instance for WSGI servers"""

from userapi.entrypoints.flask_app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(port=8080)
