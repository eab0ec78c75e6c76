"""Run a quick smoke check against the app.

Calls `/health` and one validation path through FastAPI's TestClient and
prints the responses.
"""

import sys
import os

# Ensure backend folder is on sys.path so `schoolsurvey` package can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient
from schoolsurvey.main import app


def run():
    client = TestClient(app)
    for path in ('/health', '/api/mongodb/courses'):
        resp = client.get(path)
        print(f'{path} STATUS:', resp.status_code)
        print('JSON:', resp.json())


if __name__ == '__main__':
    run()
