"""
Inventory CRUD – FastAPI Application

Server-rendered inventory manager. Each record carries a name, description,
quantity, brand, price and an optional image. Image bytes go to an object
store bucket; the record, including the image's object key, goes to the
`crudimg` table.

Routes:
- GET  /              list every record
- GET  /create        empty creation form
- POST /save          insert a record (optional image upload)
- GET  /edit/{id}     edit form for a record that has an image
- POST /update        overwrite a record (optional image replacement)
- GET  /delete/{id}   delete a record and its image
- GET  /delete-all    delete every record and every image
- GET  /health        liveness probe

Environment Variables Required:
- DATABASE_URL: connection string for the relational datastore
- BUCKET_NAME: object store bucket for images
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile

from inventory import __version__
from inventory.config import Settings, get_setting
from inventory.database import ImageStore, ItemStore
from inventory.gcs_store import make_image_key, open_image_store
from inventory.models import HealthResponse, InventoryItemCreate, InventoryItemUpdate
from inventory.sql_store import SqlItemStore

# Configure logging
logging.basicConfig(level=get_setting("LOG_LEVEL", default="INFO").upper())
logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

PACKAGE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = PACKAGE_DIR.parent / "public"

templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))

router = APIRouter()


# ============================================================================
# FORM HANDLING
# ============================================================================


class UploadTooLarge(Exception):
    """Raised when an uploaded file exceeds MAX_UPLOAD_BYTES."""


@dataclass
class Upload:
    filename: str
    data: bytes


@dataclass
class ItemForm:
    """
    A submitted create/edit form.

    The edit form posts the current image key in a hidden field named
    `imagen` next to the file input of the same name, so the two are told
    apart by type: the file part lands in `upload`, the text in `current_key`.
    """

    fields: Dict[str, str] = field(default_factory=dict)
    current_key: Optional[str] = None
    upload: Optional[Upload] = None


async def read_item_form(request: Request) -> ItemForm:
    """Parse a multipart (or urlencoded) item form."""
    parsed = ItemForm()
    async with request.form() as form:
        for name, value in form.multi_items():
            if name != "imagen":
                parsed.fields[name] = value
            elif isinstance(value, UploadFile):
                if not value.filename:
                    continue
                data = await value.read(MAX_UPLOAD_BYTES + 1)
                if len(data) > MAX_UPLOAD_BYTES:
                    raise UploadTooLarge(value.filename)
                parsed.upload = Upload(filename=value.filename, data=data)
            elif value:
                parsed.current_key = value
    return parsed


# ============================================================================
# DEPENDENCIES
# ============================================================================


def get_item_store(request: Request) -> ItemStore:
    return request.app.state.item_store


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store


# ============================================================================
# RESPONSES
# ============================================================================


def _failure(message: str, exc: Exception, status_code: int = 500) -> PlainTextResponse:
    logger.error("❌ %s %r", message, exc)
    return PlainTextResponse(message, status_code=status_code)


def _not_found(message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=404)


def _too_large(exc: UploadTooLarge) -> PlainTextResponse:
    logger.warning("Rejected upload %s: larger than %d bytes", exc, MAX_UPLOAD_BYTES)
    return PlainTextResponse("El archivo excede el tamaño máximo permitido.", status_code=413)


def _back_to_list() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=303)


# ============================================================================
# ROUTES
# ============================================================================


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Liveness probe."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
    )


@router.get("/", response_class=HTMLResponse)
async def list_items(request: Request, items: ItemStore = Depends(get_item_store)):
    """Render every record."""
    try:
        data = await asyncio.to_thread(items.list_items)
    except Exception as exc:
        return _failure("Error al obtener los registros.", exc)
    return templates.TemplateResponse(request, "index.html", {"data": data})


@router.get("/create", response_class=HTMLResponse)
async def create_form(request: Request):
    """Render the empty creation form."""
    return templates.TemplateResponse(request, "create.html", {})


@router.post("/save")
async def save_item(
    request: Request,
    items: ItemStore = Depends(get_item_store),
    images: ImageStore = Depends(get_image_store),
):
    """
    Insert a new record.

    When a file was uploaded it is stored first under a fresh
    `<ms epoch>-<filename>` key, and that key is written with the record.
    """
    try:
        form = await read_item_form(request)
    except UploadTooLarge as exc:
        return _too_large(exc)

    try:
        item = InventoryItemCreate(**form.fields)
        if form.upload is not None:
            key = make_image_key(form.upload.filename)
            await asyncio.to_thread(images.put_object, key, form.upload.data)
            item = item.model_copy(update={"imagen": key})
        created = await asyncio.to_thread(items.create_item, item)
    except Exception as exc:
        return _failure("Error al subir la imagen o guardar la información.", exc)

    logger.info("Created item %s (imagen=%s)", created.id, created.imagen)
    return _back_to_list()


@router.get("/edit/{item_id}", response_class=HTMLResponse)
async def edit_form(request: Request, item_id: int, items: ItemStore = Depends(get_item_store)):
    """Render the edit form for a record that has an image."""
    try:
        item = await asyncio.to_thread(items.get_item, item_id)
    except Exception as exc:
        return _failure("Error al obtener el registro.", exc)

    if item is None or not item.imagen:
        return _not_found("Registro no encontrado o sin imagen")

    image_url = f"/images/{item.imagen}"
    return templates.TemplateResponse(request, "edit.html", {"crudimg": item, "imageUrl": image_url})


@router.post("/update")
async def update_item(
    request: Request,
    items: ItemStore = Depends(get_item_store),
    images: ImageStore = Depends(get_image_store),
):
    """
    Overwrite a record.

    Without a new file the current key from the hidden field is kept and the
    object store is not touched. With one, the old object is deleted, the new
    bytes are uploaded under a fresh key, and only then is the record written.
    """
    try:
        form = await read_item_form(request)
    except UploadTooLarge as exc:
        return _too_large(exc)

    try:
        item_id = int(form.fields["id"])
        update = InventoryItemUpdate(**form.fields, imagen=form.current_key)
        if form.upload is not None:
            if form.current_key:
                await asyncio.to_thread(images.delete_object, form.current_key)
            key = make_image_key(form.upload.filename)
            await asyncio.to_thread(images.put_object, key, form.upload.data)
            update = update.model_copy(update={"imagen": key})
        found = await asyncio.to_thread(items.update_item, item_id, update)
    except Exception as exc:
        return _failure("Error al actualizar el registro.", exc)

    if not found:
        return _not_found("Registro no encontrado")
    logger.info("Updated item %s (imagen=%s)", item_id, update.imagen)
    return _back_to_list()


@router.get("/delete/{item_id}")
async def delete_item(
    item_id: int,
    items: ItemStore = Depends(get_item_store),
    images: ImageStore = Depends(get_image_store),
):
    """Delete a record, removing its image from the object store first."""
    try:
        item = await asyncio.to_thread(items.get_item, item_id)
        if item is None:
            raise LookupError(f"Item {item_id} not found")
        if item.imagen:
            await asyncio.to_thread(images.delete_object, item.imagen)
        await asyncio.to_thread(items.delete_item, item_id)
    except Exception as exc:
        return _failure("Error al eliminar la imagen o el registro.", exc)

    logger.info("Deleted item %s", item_id)
    return _back_to_list()


@router.get("/delete-all")
async def delete_all_items(
    items: ItemStore = Depends(get_item_store),
    images: ImageStore = Depends(get_image_store),
):
    """
    Delete every record.

    All image deletions run concurrently; records are removed only once every
    one of them has finished. The first failed deletion aborts the record
    removal, and images already deleted stay deleted.
    """
    try:
        keys = await asyncio.to_thread(items.list_image_keys)
        await asyncio.gather(
            *(asyncio.to_thread(images.delete_object, key) for key in keys if key)
        )
        removed = await asyncio.to_thread(items.delete_all_items)
    except Exception as exc:
        return _failure("Error al eliminar las imágenes o los registros.", exc)

    logger.info("Deleted all %d items", removed)
    return _back_to_list()


# ============================================================================
# APPLICATION
# ============================================================================


def create_app(
    item_store: Optional[ItemStore] = None,
    image_store: Optional[ImageStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the application.

    Stores passed in are used as-is; missing ones are opened from `settings`
    (or the environment) when the app starts. Every store is closed on
    shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.item_store is None or app.state.image_store is None:
            cfg = settings or Settings.from_env()
            if app.state.item_store is None:
                app.state.item_store = SqlItemStore(cfg.database_url)
            if app.state.image_store is None:
                app.state.image_store = open_image_store(
                    cfg.bucket_name, project=cfg.project, debug=cfg.debug
                )
        logger.info("🚀 Inventory app ready")
        try:
            yield
        finally:
            for store in (app.state.item_store, app.state.image_store):
                store.close()
            logger.info("Inventory app stopped")

    app = FastAPI(
        title="Inventory CRUD",
        version=__version__,
        description="Server-rendered inventory manager with images kept in an object store.",
        lifespan=lifespan,
    )
    app.state.item_store = item_store
    app.state.image_store = image_store

    app.include_router(router)
    # Mounted after the routes so that routes win over static paths.
    app.mount("/images", StaticFiles(directory=str(PUBLIC_DIR / "images"), check_dir=False), name="images")
    app.mount("/", StaticFiles(directory=str(PUBLIC_DIR), check_dir=False), name="public")
    return app


app = create_app()
