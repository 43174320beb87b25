# Overview: WSGI entry point (FLASK_APP=wsgi.py, or gunicorn wsgi:app).

from pos_api import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8080)
