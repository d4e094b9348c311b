from planner import create_app

app = create_app()

# Run with gunicorn: gunicorn -w 2 wsgi:app
