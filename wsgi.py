"""
WSGI entry point for deployment behind Gunicorn or Waitress.
Imports the Flask app from main.py.
"""
from main import app

if __name__ == "__main__":
    app.run()
