from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from .auth import check_password
from .configuration import get_settings
from .document_store import DEFAULT_DOCUMENT_ID, DocumentNotFound, DocumentStore
from .middleware import RequestLoggingMiddleware
from .models import (
    AddPageTitleRequest,
    AuthRequest,
    AuthResponse,
    DocumentInfo,
    InitResponse,
    InsertResponse,
    StatusMessage,
    TitlePageResponse,
)
from .pdf_operations import DocumentRejected
from .utils import ensure_directory, remove_tree, sanitize_filename

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, str(settings.logging.level).upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="PDF Workbench API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.server.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

document_store = DocumentStore(
    page_width=settings.page.width,
    page_height=settings.page.height,
    title_font_size=settings.title.font_size,
    title_top_offset=settings.title.top_offset,
    default_title=settings.title.default_text,
    max_documents=int(settings.server.max_documents),
)
upload_root = ensure_directory(Path(settings.server.upload_dir))
max_upload_bytes = int(settings.server.max_upload_mb) * 1024 * 1024

PDF_MEDIA_TYPE = "application/pdf"


def get_document_store() -> DocumentStore:
    return document_store


def get_document_id(x_document_id: Optional[str] = Header(None)) -> str:
    return (x_document_id or "").strip() or DEFAULT_DOCUMENT_ID


@app.get("/healthz")
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/auth", response_model=AuthResponse)
def authenticate(payload: AuthRequest) -> JSONResponse:
    if not payload.password:
        return JSONResponse(status_code=400, content={"success": False, "message": "Password not provided"})
    if not check_password(payload.password, settings.auth.password):
        logger.info("Rejected login attempt")
        return JSONResponse(status_code=401, content={"success": False, "message": "Incorrect password"})
    return JSONResponse(content={"success": True, "message": "Authentication successful"})


@app.post("/pdf/init", response_model=InitResponse)
def init_document(
    store: DocumentStore = Depends(get_document_store),
    document_id: str = Depends(get_document_id),
) -> InitResponse:
    created = store.ensure_exists(document_id)
    message = "PDF initialized." if created else "PDF already initialized."
    return InitResponse(message=message, created=created)


@app.post("/pdf/reset", response_model=StatusMessage)
def reset_document(
    store: DocumentStore = Depends(get_document_store),
    document_id: str = Depends(get_document_id),
) -> StatusMessage:
    store.reset(document_id)
    return StatusMessage(message="PDF reset.")


@app.get("/pdf/info", response_model=DocumentInfo)
def document_info(
    store: DocumentStore = Depends(get_document_store),
    document_id: str = Depends(get_document_id),
) -> DocumentInfo:
    return store.describe(document_id)


@app.post("/pdf/addPageTitle", response_model=TitlePageResponse)
def add_page_title(
    payload: AddPageTitleRequest,
    store: DocumentStore = Depends(get_document_store),
    document_id: str = Depends(get_document_id),
) -> TitlePageResponse:
    result, page_count = store.add_title_page(
        title=payload.title,
        position=payload.position,
        font=payload.font,
        document_id=document_id,
    )
    return TitlePageResponse(
        message=(
            f'Page with title "{result.title}" added at position {result.position.index} '
            f'using font "{result.font.value}".'
        ),
        title=result.title,
        position=result.position.index,
        position_outcome=result.position.outcome,
        font=result.font,
        page_count=page_count,
    )


async def _store_upload(file: UploadFile) -> Path:
    upload_dir = ensure_directory(upload_root / uuid4().hex)
    destination = upload_dir / sanitize_filename(file.filename or "document.pdf")

    written = 0
    try:
        with destination.open("wb") as buffer:
            while chunk := await file.read(1024 * 1024):
                written += len(chunk)
                if written > max_upload_bytes:
                    raise HTTPException(status_code=413, detail=f"Upload exceeds {settings.server.max_upload_mb} MB")
                buffer.write(chunk)
    except Exception:
        remove_tree(upload_dir)
        raise
    finally:
        await file.close()
    return destination


@app.post("/pdf/insert", response_model=InsertResponse)
async def insert_pdf(
    file: Optional[UploadFile] = File(None),
    position: Optional[str] = Form(None),
    store: DocumentStore = Depends(get_document_store),
    document_id: str = Depends(get_document_id),
) -> InsertResponse:
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    stored_path = await _store_upload(file)
    try:
        data = stored_path.read_bytes()
        result, page_count = await run_in_threadpool(store.insert_document, data, position, document_id)
    except DocumentRejected as exc:
        logger.warning(f"Rejected upload '{file.filename}': {exc}")
        raise HTTPException(status_code=400, detail=f"Error inserting PDF: {exc}") from exc
    finally:
        remove_tree(stored_path.parent)

    return InsertResponse(
        message=f"PDF inserted at position {result.position.index}.",
        position=result.position.index,
        position_outcome=result.position.outcome,
        inserted_pages=result.inserted_pages,
        page_count=page_count,
    )


def _export_or_404(store: DocumentStore, document_id: str) -> bytes:
    try:
        return store.export(document_id)
    except DocumentNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/pdf")
def view_pdf(
    store: DocumentStore = Depends(get_document_store),
    document_id: str = Depends(get_document_id),
) -> Response:
    data = _export_or_404(store, document_id)
    return Response(
        content=data,
        media_type=PDF_MEDIA_TYPE,
        headers={"Content-Disposition": f'inline; filename="{settings.export.filename}"'},
    )


@app.get("/download")
def download_pdf(
    store: DocumentStore = Depends(get_document_store),
    document_id: str = Depends(get_document_id),
) -> Response:
    data = _export_or_404(store, document_id)
    return Response(
        content=data,
        media_type=PDF_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{settings.export.filename}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Expires": "0",
        },
    )


# Must stay below the API routes; the UI bundle catches every other path.
_static_dir = Path(settings.server.static_dir)
if _static_dir.is_dir():
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="ui")
