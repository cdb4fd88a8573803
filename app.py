"""
App assembly entry point.

Loads a local .env (if present) and re-exports the FastAPI `app` from
`marketplace.api.main` for `uvicorn app:app`.
"""
from dotenv import load_dotenv

load_dotenv()

from marketplace.api.main import app  # noqa: E402,F401
