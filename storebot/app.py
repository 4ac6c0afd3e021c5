from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import check_admin_credentials, create_access_token, require_admin
from .context import AppContext, build_context
from .config import Settings, load_settings
from .image_selector import collect_images
from .model_gateway import AssistantUnavailableError
from .models import (
    AdminDataResponse,
    ChatRequest,
    ChatResponse,
    ImagesRequest,
    ImagesResponse,
    LoginRequest,
    LoginResponse,
    ProductListResponse,
    ProductSummary,
    StoreLocation,
)
from .store_profile import STORE_PROFILE, WARRANTIES, WELCOME_MESSAGE, store_info

BASE_DIR = Path(__file__).resolve().parent

ENV_PATH = BASE_DIR / ".env"


def load_environment(env_path: Path = ENV_PATH) -> None:
    """Load the package .env when present, otherwise the working directory one."""
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        load_dotenv()


def configure_logging() -> None:
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_name, logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    logging.getLogger("storebot").setLevel(log_level)


# The .env file must be loaded before LOG_LEVEL is read.
load_environment()
configure_logging()
logger = logging.getLogger("storebot.api")

CHAT_ERROR = "Error en el asistente"
IMAGES_ERROR = "Error al cargar imágenes"
PRODUCTS_ERROR = "Error al cargar productos"

router = APIRouter()


def get_context(request: Request) -> AppContext:
    return request.app.state.context


@router.get("/bienvenida")
def welcome() -> Dict[str, str]:
    return {"response": WELCOME_MESSAGE}


@router.post("/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest, context: AppContext = Depends(get_context)) -> ChatResponse:
    """Purpose: Answer one customer message with the store pipeline.
    Inputs/Outputs: Input is ChatRequest; output is ChatResponse with answer, images
        and the store's location fields.
    Side Effects / State: Reads the store, scrapes the site, calls the model.
    Dependencies: StoreAssistant.reply.
    Failure Modes: Blank message -> 400 before any upstream call; gateway and
        unexpected errors -> 500 with a generic message only.
    If Removed: The chatbot frontend has nothing to talk to.
    Testing Notes: Empty body -> 400 and the assistant is never called.
    """
    if not payload.message.strip():
        raise HTTPException(status_code=400, detail="Mensaje requerido")
    try:
        result = await context.assistant.reply(payload.message)
    except AssistantUnavailableError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from None
    except Exception:
        logger.exception("chat pipeline failed")
        raise HTTPException(status_code=500, detail=CHAT_ERROR) from None

    return ChatResponse(
        response=result.answer,
        images=result.images,
        show_images=result.show_images,
        store_info=StoreLocation(**STORE_PROFILE.location_fields()),
    )


@router.post("/images", response_model=ImagesResponse)
async def images(
    payload: Optional[ImagesRequest] = None,
    context: AppContext = Depends(get_context),
) -> ImagesResponse:
    payload = payload or ImagesRequest()
    try:
        store_data = await context.aggregator.fetch()
        found = collect_images(store_data.products, payload.product_name, payload.limit)
    except Exception:
        logger.exception("image lookup failed")
        raise HTTPException(status_code=500, detail=IMAGES_ERROR) from None
    return ImagesResponse(
        product=payload.product_name or "Todos",
        images=found,
        total=len(found),
        message=f"{len(found)} imagen(es)" if found else "Sin imágenes",
    )


@router.get("/productos", response_model=ProductListResponse)
async def products(context: AppContext = Depends(get_context)) -> ProductListResponse:
    try:
        store_data = await context.aggregator.fetch()
    except Exception:
        logger.exception("product listing failed")
        raise HTTPException(status_code=500, detail=PRODUCTS_ERROR) from None
    listing = [
        ProductSummary(
            id=product.id,
            nombre=product.name,
            precio=product.price,
            imagen=product.images[0] if product.images else None,
            total_imagenes=len(product.images),
        )
        for product in store_data.products
    ]
    return ProductListResponse(productos=listing, total=len(listing))


@router.get("/garantias")
def warranties() -> Dict[str, Any]:
    return {"garantias": dict(WARRANTIES)}


@router.get("/tienda")
def store() -> Dict[str, str]:
    return STORE_PROFILE.to_dict()


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, context: AppContext = Depends(get_context)) -> LoginResponse:
    if not check_admin_credentials(payload.username, payload.password):
        logger.warning("failed admin login username=%s", payload.username)
        raise HTTPException(status_code=401, detail="Credenciales inválidas")
    settings = context.settings
    token = create_access_token(payload.username, settings.jwt_secret, settings.jwt_expires_minutes)
    return LoginResponse(token=token)


@router.get("/admin/data", response_model=AdminDataResponse)
async def admin_data(
    context: AppContext = Depends(get_context),
    claims: Dict[str, Any] = Depends(require_admin),
) -> AdminDataResponse:
    store_data = await context.aggregator.fetch()
    logger.info("admin data requested by=%s source=%s", claims.get("username"), store_data.source)
    return AdminDataResponse(
        data=store_data.to_dict(),
        store_info=store_info(),
        source=store_data.source,
        timestamp=datetime.now().isoformat(timespec="seconds"),
    )


@router.get("/health")
async def health(context: AppContext = Depends(get_context)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "app": "storebot",
        "model_provider": context.settings.model_provider,
        "store_ready": await context.aggregator.is_ready(),
    }


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Report the first offending field, e.g. "message: Field required".
    errors = exc.errors()
    detail = "Solicitud inválida"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ())[1:])
        detail = f"{location}: {first.get('msg', detail)}" if location else str(first.get("msg", detail))
    return JSONResponse(status_code=400, content={"error": detail})


def create_app(context: Optional[AppContext] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Purpose: Build the FastAPI application.
    Inputs/Outputs: Optional prebuilt AppContext (tests) and Settings; returns the app.
    Side Effects / State: Without a context, one is built in the lifespan from
        settings and closed on shutdown.
    Dependencies: build_context, router, CORS middleware, error handlers.
    Failure Modes: Invalid settings raise at startup.
    If Removed: There is no HTTP surface.
    Testing Notes: Pass an AppContext built from fakes and use TestClient.
    """
    if settings is None:
        settings = context.settings if context is not None else load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned: Optional[AppContext] = None
        if getattr(app.state, "context", None) is None:
            owned = build_context(settings)
            app.state.context = owned
            logger.info(
                "storebot ready provider=%s website=%s",
                settings.model_provider,
                settings.website_url,
            )
        yield
        if owned is not None:
            await owned.close()

    app = FastAPI(title="Sr Robot Store Assistant", lifespan=lifespan)
    if context is not None:
        app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    return app


app = create_app()
