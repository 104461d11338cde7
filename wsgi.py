"""WSGI entrypoint for Gunicorn.

The coordinator keeps the live game in process memory, so run one worker:
  gunicorn -w 1 --threads 4 -b 0.0.0.0:8000 wsgi:app
"""

from super3 import create_app

app = create_app()
