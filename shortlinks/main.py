import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from . import codes, database, links, qr_utils, schemas
from .errors import LinkError, NotFoundError

ENVIRONMENT = database.ENVIRONMENT

# --- Logging ---
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger("shortlinks")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- DB tables ---
    database.init_db()
    yield


app = FastAPI(
    title="Short Links",
    description="Map short codes to URLs, redirect visitors and count clicks.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- CORS (allow frontend dev servers, etc.) ---
origins = ["*"] if ENVIRONMENT == "dev" else [
    os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"),
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LinkError)
async def link_error_handler(request: Request, exc: LinkError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


def public_base_url(request: Request) -> str:
    return os.getenv("PUBLIC_BASE_URL") or str(request.base_url).rstrip("/")


# Small config for clients to know the public base URL
@app.get("/config", include_in_schema=False)
def get_config(request: Request):
    return {"public_base_url": public_base_url(request)}


# Health check (useful for uptime monitors & load balancers)
@app.get("/health", include_in_schema=False)
def health():
    return {"status": "ok", "env": ENVIRONMENT}


# ---------- API ----------
@app.post("/links", response_model=schemas.LinkOut, status_code=201,
          responses={400: {"model": schemas.ErrorOut}, 409: {"model": schemas.ErrorOut}})
def create_link(link_in: schemas.LinkCreate, db=Depends(database.get_db)):
    logger.info("Creating link: code=%s target=%s", link_in.code, link_in.target_url)
    return links.register_link(db, link_in.target_url, link_in.code)


@app.get("/links", response_model=list[schemas.LinkOut])
def list_links(db=Depends(database.get_db)):
    return links.list_links(db)


@app.get("/links/{code}", response_model=schemas.LinkOut,
         responses={404: {"model": schemas.ErrorOut}})
def get_link(code: str, db=Depends(database.get_db)):
    return links.get_link(db, code)


@app.delete("/links/{code}", response_model=schemas.DeleteOut,
            responses={404: {"model": schemas.ErrorOut}})
def delete_link(code: str, db=Depends(database.get_db)):
    links.soft_delete_link(db, code)
    return {"success": True}


@app.get("/links/{code}/qr", response_model=schemas.QrOut,
         responses={404: {"model": schemas.ErrorOut}})
def qr_code(code: str, request: Request, db=Depends(database.get_db)):
    link = links.get_link(db, code)
    url = qr_utils.short_url(public_base_url(request), link.code)
    return {"short_url": url, "qr_base64": qr_utils.generate_qr_base64(url)}


# Pretty redirect /{code}
@app.get("/{code}", include_in_schema=False)
def redirect(code: str, db=Depends(database.get_db)):
    if codes.is_reserved(code) or not codes.is_valid_code(code):
        raise NotFoundError()
    target_url = links.resolve_redirect(db, code)
    logger.info("Redirect %s -> %s", code, target_url)
    return RedirectResponse(url=target_url, status_code=307)
