import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, Form, Header, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from . import __version__
from .auth import (
    clear_session_cookie,
    is_authenticated,
    is_protected,
    login_redirect,
    password_matches,
    safe_redirect_target,
    set_session_cookie,
    unauthorized_response,
)
from .catalog import StyleCatalog, StyleConfig
from .config import Settings
from .gallery import GalleryService
from .generation import (
    ALLOWED_QUALITIES,
    GenerationPipeline,
    GenerationRequest,
    InputImage,
    RequestValidationError,
    get_generator,
    validate_request,
)
from .generation.clients import BaseGenerator
from .metadata import MetadataWriter
from .serving import serve_artifact
from .storage import ArtifactStore

# Configure logging
logging.basicConfig(
    level=Settings().log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Accepted multipart field names per input, in lookup order
IMAGE_FIELDS = {
    "person": ("person", "personImage", "person_image"),
    "celebrity": ("celebrity", "celebrityImage", "celebrity_image"),
}
EXTRA_DETAILS_FIELDS = ("extraDetails", "extra_details")
CELEBRITY_NAME_FIELDS = ("celebrityName", "celebrity_name")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


@lru_cache()
def get_catalog() -> StyleCatalog:
    return StyleCatalog.from_file()


def get_store(settings: Settings = Depends(get_settings)) -> ArtifactStore:
    return ArtifactStore(settings.data_dir)


def get_metadata_writer(settings: Settings = Depends(get_settings)) -> MetadataWriter:
    return MetadataWriter(settings.content_dir, settings.metadata_dir)


def get_generator_client(settings: Settings = Depends(get_settings)) -> BaseGenerator:
    return get_generator("openai", settings)


def get_pipeline(
    store: ArtifactStore = Depends(get_store),
    metadata: MetadataWriter = Depends(get_metadata_writer),
    generator: BaseGenerator = Depends(get_generator_client),
    settings: Settings = Depends(get_settings),
) -> GenerationPipeline:
    return GenerationPipeline(
        store,
        metadata,
        generator,
        download_timeout=settings.download_timeout,
        default_size=settings.size,
    )


def get_gallery(
    store: ArtifactStore = Depends(get_store),
    metadata: MetadataWriter = Depends(get_metadata_writer),
    catalog: StyleCatalog = Depends(get_catalog),
) -> GalleryService:
    return GalleryService(store, metadata, catalog)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    settings.validate()
    catalog = get_catalog()
    ArtifactStore(settings.data_dir)
    MetadataWriter(settings.content_dir, settings.metadata_dir).rebuild_mirror()
    logger.info(f"Serving {len(catalog)} styles from {settings.data_dir}")
    yield


app = FastAPI(
    title="Filter Studio",
    description="Photo style filters powered by an AI image-editing API",
    version=__version__,
    lifespan=lifespan,
)

# Setup Templates
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


@app.middleware("http")
async def auth_gate(request: Request, call_next):
    """Require the session cookie on protected path prefixes."""
    if is_protected(request.url.path):
        if not is_authenticated(request, get_settings().auth_password):
            logger.info(f"Unauthenticated request to {request.url.path}")
            return unauthorized_response(request)
    return await call_next(request)


# =============================================================================
# Pages
# =============================================================================

@app.get("/", response_class=HTMLResponse)
def read_root(request: Request, catalog: StyleCatalog = Depends(get_catalog)):
    """
    Serve the style catalog page.
    """
    return templates.TemplateResponse(request, "index.html", {"styles": catalog.all()})


@app.get("/login", response_class=HTMLResponse)
def login_page(request: Request, error: Optional[str] = None, redirect: str = "/"):
    return templates.TemplateResponse(
        request, "login.html", {"error": error, "redirect": safe_redirect_target(redirect)}
    )


@app.get("/gallery", response_class=HTMLResponse)
def gallery_page(
    request: Request,
    style: Optional[str] = None,
    gallery: GalleryService = Depends(get_gallery),
    catalog: StyleCatalog = Depends(get_catalog),
):
    return templates.TemplateResponse(
        request,
        "gallery.html",
        {"images": gallery.list_artifacts(style), "styles": catalog.all(), "selected": style},
    )


@app.get("/generate/{style_id}", response_class=HTMLResponse)
def generate_page(request: Request, style_id: str, catalog: StyleCatalog = Depends(get_catalog)):
    style = catalog.get(style_id)
    if style is None:
        raise HTTPException(status_code=404, detail="Style not found")
    return templates.TemplateResponse(
        request, "generate.html", {"style": style, "qualities": ALLOWED_QUALITIES}
    )


# =============================================================================
# Auth API
# =============================================================================

@app.post("/api/auth/login")
def login(
    password: Optional[str] = Form(None),
    redirect: str = Form("/"),
    settings: Settings = Depends(get_settings),
):
    """
    Exchange the shared password for a session cookie.
    """
    target = safe_redirect_target(redirect)
    if not password:
        return PlainTextResponse("Password is required", status_code=400)

    if not password_matches(password, settings.auth_password):
        logger.warning("Failed login attempt")
        return login_redirect(target, "invalid")

    response = RedirectResponse(url=target, status_code=303)
    set_session_cookie(response, settings.auth_password, secure=settings.production)
    return response


@app.api_route("/api/auth/logout", methods=["GET", "POST"])
def logout():
    response = RedirectResponse(url="/login", status_code=303)
    clear_session_cookie(response)
    return response


# =============================================================================
# Generation API
# =============================================================================

def _first_value(form, names):
    for name in names:
        value = form.get(name)
        if value is not None:
            return value
    return None


async def build_request_from_form(request: Request, style: StyleConfig) -> GenerationRequest:
    """Read a multipart form into a GenerationRequest."""
    form = await request.form()

    images = []
    for role, names in IMAGE_FIELDS.items():
        upload = _first_value(form, names)
        if not isinstance(upload, UploadFile):
            continue
        data = await upload.read()
        if not data:
            continue
        images.append(InputImage(
            role=role,
            data=data,
            filename=upload.filename or "",
            content_type=upload.content_type or "",
        ))

    extra_details = _first_value(form, EXTRA_DETAILS_FIELDS)
    quality = form.get("quality") or "medium"
    params = {}
    celebrity_name = _first_value(form, CELEBRITY_NAME_FIELDS)
    if isinstance(celebrity_name, str) and celebrity_name.strip():
        params["celebrityName"] = celebrity_name.strip()

    return GenerationRequest(
        style_id=style.id,
        input_images=images,
        extra_details=extra_details if isinstance(extra_details, str) else "",
        quality=quality if isinstance(quality, str) else "",
        params=params,
    )


async def handle_generation(request: Request, style: StyleConfig, pipeline: GenerationPipeline) -> JSONResponse:
    try:
        gen_request = await build_request_from_form(request, style)
        validate_request(gen_request, style)
    except RequestValidationError as e:
        logger.info(f"Rejected {style.id} request: {e}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": str(e), "styleId": style.id},
        )

    try:
        logger.info(f"Processing {style.id} request...")
        result = await run_in_threadpool(pipeline.run, gen_request, style)

        if not result.success:
            return JSONResponse(status_code=500, content=result.to_dict())

        content = result.to_dict()
        content["message"] = f"{style.name} generated successfully!"
        content["images"] = {image.role: image.filename for image in gen_request.input_images}
        content["data"] = {
            "extraDetails": gen_request.extra_details.strip() or style.default_details,
            "type": style.type_label,
            "theme": style.theme,
        }
        if gen_request.params:
            content["data"].update(gen_request.params)
        return JSONResponse(status_code=200, content=content)

    except Exception as e:
        logger.exception(f"Unexpected error handling {style.id} request")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "details": str(e)},
        )


@app.post("/api/generate/{style_id}", tags=["Generation"])
async def generate_style(
    style_id: str,
    request: Request,
    catalog: StyleCatalog = Depends(get_catalog),
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    """
    Generate an image for any catalog style.

    Expects multipart/form-data with the style's image fields plus optional
    extraDetails and quality ("medium" or "high").
    """
    style = catalog.get(style_id)
    if style is None:
        raise HTTPException(status_code=404, detail=f"Unknown style: {style_id}")
    return await handle_generation(request, style, pipeline)


@app.post("/api/generate", tags=["Generation"])
async def generate_legacy_default(
    request: Request,
    catalog: StyleCatalog = Depends(get_catalog),
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    """
    Original two-image endpoint (person + celebrity).
    """
    style = catalog.by_route("generate")
    if style is None:
        raise HTTPException(status_code=404, detail="Style not found")
    return await handle_generation(request, style, pipeline)


@app.post("/api/generate-{slug}", tags=["Generation"])
async def generate_legacy_route(
    slug: str,
    request: Request,
    catalog: StyleCatalog = Depends(get_catalog),
    pipeline: GenerationPipeline = Depends(get_pipeline),
):
    """
    Per-style endpoints kept for existing front-end forms.
    """
    style = catalog.by_route(f"generate-{slug}")
    if style is None:
        raise HTTPException(status_code=404, detail=f"Unknown generation route: generate-{slug}")
    return await handle_generation(request, style, pipeline)


# =============================================================================
# Catalog and Gallery API
# =============================================================================

class StyleSummary(BaseModel):
    """Public view of a catalog style."""
    id: str
    name: str
    emoji: str
    description: str
    required_images: List[str]
    has_celebrity: bool
    theme: str
    type_label: str


class ProviderInfo(BaseModel):
    name: str
    description: str
    configured: bool
    model: str
    required_env_vars: List[str]
    missing: List[str]


@app.get("/api/styles", response_model=List[StyleSummary], tags=["Catalog"])
def list_styles(catalog: StyleCatalog = Depends(get_catalog)):
    """
    Get the list of configured styles.
    """
    return [StyleSummary(**style.to_dict()) for style in catalog.all()]


@app.get("/api/providers", response_model=Dict[str, List[ProviderInfo]], tags=["Catalog"])
def list_providers(generator: BaseGenerator = Depends(get_generator_client)):
    """
    List the image provider and its configuration status.
    """
    return {
        "providers": [
            ProviderInfo(
                name=generator.name,
                description=f"OpenAI-compatible image editing with {getattr(generator, 'model', '')}",
                configured=generator.is_configured(),
                model=getattr(generator, "model", ""),
                required_env_vars=[Settings.ENV_API_KEY],
                missing=generator.get_missing_config() if not generator.is_configured() else [],
            )
        ]
    }


@app.get("/api/gallery", tags=["Gallery"])
def list_gallery(
    style: Optional[str] = Query(default=None, description="Only images of this style"),
    gallery: GalleryService = Depends(get_gallery),
):
    images = gallery.list_artifacts(style)
    return {"count": len(images), "images": images}


@app.get("/api/gallery/stats", tags=["Gallery"])
def gallery_stats(gallery: GalleryService = Depends(get_gallery)):
    return gallery.stats()


@app.get("/api/latest-image.json", tags=["Gallery"])
def latest_image(gallery: GalleryService = Depends(get_gallery)):
    """
    Newest generated image, for clients polling for updates.
    """
    try:
        content = gallery.latest()
        status_code = 200
    except Exception as e:
        logger.error(f"Error getting latest image: {e}")
        content = {"error": "Error loading images", "image": None, "totalImages": 0}
        status_code = 500
    return JSONResponse(status_code=status_code, content=content, headers={"Cache-Control": "no-cache"})


@app.get("/api/images/{file_path:path}", tags=["Gallery"])
def get_image(
    file_path: str,
    if_none_match: Optional[str] = Header(None, alias="If-None-Match"),
    store: ArtifactStore = Depends(get_store),
) -> Response:
    """
    Serve a generated or original image with caching headers.
    """
    return serve_artifact(store, file_path, if_none_match)
