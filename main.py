# FastAPI application entry point for running from the repository root
# (the app itself lives in the ems package)

from ems.main import app

# uvicorn main:app --host 0.0.0.0 --port 8001
