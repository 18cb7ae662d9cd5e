# app.py
# WSGI entry point: `flask --app app run` or `gunicorn app:app`
from core import create_app

app = create_app()

# --- Run ---
if __name__ == "__main__":
    app.run(debug=True)
