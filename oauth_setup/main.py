# oauth_setup/main.py
from fastapi import FastAPI

from oauth_setup.config import APP_NAME, APP_VERSION
from oauth_setup.routes.schema import router as schema_router

app = FastAPI(title=APP_NAME, version=APP_VERSION)
app.include_router(schema_router)

@app.get("/healthz")
def healthz():
    return {"ok": True, "service": APP_NAME, "version": APP_VERSION}
