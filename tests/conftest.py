"""
Pytest configuration and fixtures for PDF Workbench Backend tests.
"""

import os
import shutil
import tempfile
from pathlib import Path

import fitz  # PyMuPDF
import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing the app
os.environ["AUTH_PASSWORD"] = "test-secret-12345"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="pdf_workbench_test_uploads_")
os.environ["STATIC_DIR"] = str(Path(tempfile.gettempdir()) / "pdf_workbench_no_static_bundle")

from pdf_workbench_backend.document_store import DocumentStore
from pdf_workbench_backend.main import app, document_store, upload_root


def build_pdf(labels, width=595, height=842) -> bytes:
    """Create a PDF with one page per label, each page showing its label."""
    doc = fitz.open()
    for label in labels:
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), label, fontname="helv", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def page_texts(data: bytes) -> list:
    """Return the stripped text of every page of a serialized PDF."""
    with fitz.open(stream=data, filetype="pdf") as doc:
        return [page.get_text().strip() for page in doc]


@pytest.fixture(scope="session", autouse=True)
def test_dirs():
    """Cleanup the upload directory after all tests."""
    yield {"upload": upload_root}
    shutil.rmtree(upload_root, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_store():
    """Every test starts without any document."""
    document_store.clear()
    yield
    document_store.clear()


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def store():
    """A standalone store with default letter-size settings."""
    fresh = DocumentStore()
    yield fresh
    fresh.clear()


@pytest.fixture
def three_page_pdf():
    return build_pdf(["orig0", "orig1", "orig2"])


@pytest.fixture
def two_page_pdf():
    return build_pdf(["new0", "new1"])


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def read_pages():
    return page_texts
