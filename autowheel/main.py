import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from autowheel.api.routes import inquiry_store, router as api_router
from autowheel.db import Base, engine
from autowheel.scheduler import get_scheduler, shutdown_scheduler
from autowheel.storage import StorageError
from autowheel.utils import logger
import autowheel.models  # noqa: F401 ensure models are imported so tables are known

# create FastAPI instance
app = FastAPI(title="AutoWheel API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(StorageError)
def storage_error_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Storage is unavailable, please try again"})


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Something went wrong. Please reload and try again."})


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    # pick up inquiry queue writes made by other workers
    inquiry_store().watch(get_scheduler())


@app.on_event("shutdown")
def on_shutdown():
    inquiry_store().unwatch()
    shutdown_scheduler()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
