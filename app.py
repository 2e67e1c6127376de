import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import DB_PATH, LOG_LEVEL, SEED_ON_STARTUP
from db import (
    connect, init, seed,
    StoreError, StoreUnavailable, NotFound, DuplicateKey, ValidationFailed,
)
from routers import cart, orders, products

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("app")

STATUS_FOR = {
    ValidationFailed: 400,
    NotFound: 404,
    DuplicateKey: 409,
    StoreUnavailable: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    con = connect(DB_PATH)
    try:
        init(con)
        if SEED_ON_STARTUP:
            seed.initialize(con)
    finally:
        con.close()
    yield


app = FastAPI(title="Bento & Fruit Store", version="1.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True,
                   allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    status = STATUS_FOR.get(type(exc), 500)
    if status >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"success": False, "error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    msgs = ["{}: {}".format(".".join(str(x) for x in e["loc"]), e["msg"]) for e in exc.errors()]
    return JSONResponse(status_code=400, content={"success": False, "error": "; ".join(msgs)})


@app.get("/")
def read_root():
    return {"message": "Bento & Fruit Store API running"}


app.include_router(products.router)
app.include_router(cart.router)
app.include_router(orders.router)


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
