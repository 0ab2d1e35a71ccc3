# storefront/main.py
import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, File, Form, Header, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import check_bearer, check_password
from .config import Settings, get_settings
from .core import ConfigOut, DeletedOut, LoginIn, LoginOut, ProductIn, ProductOut
from .database import ProductRepository, build_repository
from .errors import StoreError
from .logging_config import setup_logging
from .middleware import CorrelationIDMiddleware
from .products import ProductStore
from .uploads import ImageUpload, ImageUploader, build_uploader

APP_NAME = "storefront"
logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------
# Dependencies
# ---------------------------
def get_store(request: Request) -> ProductStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_admin(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    check_bearer(authorization, settings.admin_password)


async def _read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    # browsers send an empty part when the file input is left blank
    if image is None or not image.filename:
        return None
    data = await image.read()
    return ImageUpload(filename=image.filename, content_type=image.content_type or "", data=data)


# ---------------------------
# Public endpoints
# ---------------------------
@router.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok", "service": APP_NAME}


@router.get("/api/config", response_model=ConfigOut)
async def get_config(settings: Settings = Depends(get_app_settings)):
    return ConfigOut(messagingDestination=settings.whatsapp_number)


@router.get("/api/products", response_model=List[ProductOut])
async def list_products(category: Optional[str] = None, store: ProductStore = Depends(get_store)):
    return store.list(category or None)


@router.get("/api/products/meta/categories", response_model=List[str])
async def list_categories(store: ProductStore = Depends(get_store)):
    return store.list_categories()


@router.get("/api/products/{product_id}", response_model=ProductOut)
async def get_product(product_id: int, store: ProductStore = Depends(get_store)):
    return store.get(product_id)


# ---------------------------
# Admin endpoints
# ---------------------------
@router.post("/api/admin/login", response_model=LoginOut)
async def admin_login(payload: LoginIn, settings: Settings = Depends(get_app_settings)):
    check_password(payload.password, settings.admin_password)
    # the admin password doubles as the bearer token
    return LoginOut(token=payload.password)


@router.post("/api/products", status_code=201, response_model=ProductOut, dependencies=[Depends(require_admin)])
async def create_product(
    name: str = Form(...),
    price: str = Form(...),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    store: ProductStore = Depends(get_store),
):
    fields = ProductIn(name=name, description=description, price=price, category=category)
    return await store.create(fields, await _read_image(image))


@router.put("/api/products/{product_id}", response_model=ProductOut, dependencies=[Depends(require_admin)])
async def update_product(
    product_id: int,
    name: str = Form(...),
    price: str = Form(...),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    store: ProductStore = Depends(get_store),
):
    fields = ProductIn(name=name, description=description, price=price, category=category)
    return await store.update(product_id, fields, await _read_image(image))


@router.delete("/api/products/{product_id}", response_model=DeletedOut, dependencies=[Depends(require_admin)])
async def delete_product(product_id: int, store: ProductStore = Depends(get_store)):
    product = store.delete(product_id)
    return DeletedOut(message="Product deleted", product=product)


# ---------------------------
# App factory
# ---------------------------
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[ProductRepository] = None,
    uploader: Optional[ImageUploader] = None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(APP_NAME, settings.log_level)

    repository = repository or build_repository(settings)
    uploader = uploader or build_uploader(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repository.create_tables()
        logger.info("database ready")
        yield

    app = FastAPI(title="storefront", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = ProductStore(repository, uploader, max_image_bytes=settings.max_image_bytes)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIDMiddleware)
    app.add_exception_handler(StoreError, store_error_handler)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8085)
