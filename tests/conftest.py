"""
Pytest configuration and fixtures for the image-to-PDF web app tests.
"""

import os
import shutil
import tempfile

import fitz
import pytest

# Set test environment variables before importing the app
os.environ["IMG2PDF_UPLOAD_DIR"] = tempfile.mkdtemp(prefix="img2pdf_test_uploads_")
os.environ["IMG2PDF_BRAND"] = "pypdf-pro"

from app import app, IMAGE_STORE, CONVERSION_STATE


def make_image(width, height, fmt="png", alpha=False, value=180):
    """Render a flat-colour test image with PyMuPDF."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), alpha)
    pix.clear_with(value)
    return pix.tobytes(fmt)


@pytest.fixture(scope="session", autouse=True)
def upload_dir():
    """Remove the upload directory after the session."""
    path = os.environ["IMG2PDF_UPLOAD_DIR"]
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_state():
    """Every test starts with an empty image list and the default brand."""
    IMAGE_STORE.clear()
    CONVERSION_STATE.update(progress=0, generating=False)
    app.config["BRAND"] = "pypdf-pro"
    yield
    IMAGE_STORE.clear()


@pytest.fixture
def client():
    """Create a Flask test client."""
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def png_bytes():
    return make_image(200, 100, "png")


@pytest.fixture
def png_alpha_bytes():
    return make_image(120, 120, "png", alpha=True)


@pytest.fixture
def jpeg_bytes():
    return make_image(100, 400, "jpeg")
