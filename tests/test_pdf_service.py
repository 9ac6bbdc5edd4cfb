"""
Tests for PDF assembly: option parsing, validation, page layout and encryption.
"""

import io
from types import SimpleNamespace

import fitz
import pytest

from conftest import make_image
from image_store import ImageStore
from pdf_service import (
    A4_LONG,
    A4_SHORT,
    MAX_PAGE_POINTS,
    ConversionError,
    PDFOptions,
    ValidationError,
    fit_to_page,
    generate_pdf_from_images,
    original_page_size,
    validate_request,
)


@pytest.fixture
def store(tmp_path):
    return ImageStore(str(tmp_path))


def add_image(store, name, data):
    return store.add(name, io.BytesIO(data))


def open_pdf(pdf_bytes):
    return fitz.open(stream=pdf_bytes, filetype="pdf")


class TestPDFOptions:
    """Tests for parsing conversion options from request JSON."""

    def test_defaults(self):
        options = PDFOptions.from_dict({}, default_quality=0.9)
        assert options.page_size == "A4"
        assert options.password_protected is False
        assert options.password is None
        assert options.quality == 0.9

    def test_camel_case_keys(self):
        options = PDFOptions.from_dict({
            "pageSize": "original",
            "passwordProtected": True,
            "password": "hunter22",
            "quality": 0.5,
        })
        assert options.page_size == "Original"
        assert options.password_protected is True
        assert options.password == "hunter22"
        assert options.quality == 0.5

    def test_snake_case_keys(self):
        options = PDFOptions.from_dict({"page_size": "A4", "password_protected": True, "password": "x"})
        assert options.password_protected is True

    def test_empty_password_becomes_none(self):
        assert PDFOptions.from_dict({"password": ""}).password is None

    def test_unknown_page_size_rejected(self):
        with pytest.raises(ValidationError) as exc:
            PDFOptions.from_dict({"pageSize": "Letter"})
        assert exc.value.code == "bad_page_size"

    @pytest.mark.parametrize("quality", [-0.1, 1.5, "high", None])
    def test_bad_quality_rejected(self, quality):
        with pytest.raises(ValidationError) as exc:
            PDFOptions.from_dict({"quality": quality})
        assert exc.value.code == "bad_quality"

    @pytest.mark.parametrize("data", [[1], "x", 3])
    def test_non_object_rejected(self, data):
        with pytest.raises(ValidationError) as exc:
            PDFOptions.from_dict(data)
        assert exc.value.code == "bad_options"

    @pytest.mark.parametrize("protected", ["false", "true", 1, 0])
    def test_password_protected_must_be_boolean(self, protected):
        with pytest.raises(ValidationError) as exc:
            PDFOptions.from_dict({"passwordProtected": protected, "password": "x"})
        assert exc.value.code == "bad_options"

    def test_password_must_be_string(self):
        with pytest.raises(ValidationError) as exc:
            PDFOptions.from_dict({"passwordProtected": True, "password": 123})
        assert exc.value.code == "bad_options"

    @pytest.mark.parametrize("quality,expected", [(0.8, 80), (1.0, 100), (0.1, 10), (0.0, 1)])
    def test_jpeg_quality(self, quality, expected):
        assert PDFOptions(quality=quality).jpeg_quality == expected


class TestValidateRequest:
    """Tests for checks that run before conversion starts."""

    def test_no_images(self):
        with pytest.raises(ValidationError) as exc:
            validate_request([], PDFOptions())
        assert exc.value.code == "no_images"

    def test_password_required_when_protected(self, store, png_bytes):
        image = add_image(store, "a.png", png_bytes)
        with pytest.raises(ValidationError) as exc:
            validate_request([image], PDFOptions(password_protected=True))
        assert exc.value.code == "no_password"

    def test_password_ignored_when_not_protected(self, store, png_bytes):
        image = add_image(store, "a.png", png_bytes)
        validate_request([image], PDFOptions(password_protected=False))


class TestLayout:
    """Tests for placing images on pages."""

    def test_wide_image_fills_page_width(self):
        width, height = fit_to_page(200, 100, A4_SHORT, A4_LONG)
        assert width == A4_SHORT
        assert height == pytest.approx(A4_SHORT / 2)

    def test_tall_image_limited_by_page_height(self):
        width, height = fit_to_page(100, 400, A4_SHORT, A4_LONG)
        assert height == A4_LONG
        assert width == pytest.approx(A4_LONG / 4)

    def test_original_size_uses_resolution(self):
        pix = SimpleNamespace(width=300, height=150, xres=72, yres=72)
        assert original_page_size(pix) == (300, 150)

    def test_original_size_defaults_to_96_dpi(self):
        pix = SimpleNamespace(width=960, height=480, xres=0, yres=0)
        assert original_page_size(pix) == (720, 360)

    def test_original_size_capped(self):
        pix = SimpleNamespace(width=40000, height=20000, xres=72, yres=72)
        width, height = original_page_size(pix)
        assert width == pytest.approx(MAX_PAGE_POINTS)
        assert height == pytest.approx(MAX_PAGE_POINTS / 2)


class TestGeneratePDF:
    """Tests for assembling the document."""

    def test_one_page_per_image(self, store, png_bytes, jpeg_bytes, png_alpha_bytes):
        images = [
            add_image(store, "wide.png", png_bytes),
            add_image(store, "tall.jpg", jpeg_bytes),
            add_image(store, "alpha.png", png_alpha_bytes),
        ]
        pdf_bytes = generate_pdf_from_images(images, PDFOptions())

        with open_pdf(pdf_bytes) as doc:
            assert len(doc) == 3
            for page in doc:
                assert page.rect.width == pytest.approx(A4_SHORT)
                assert page.rect.height == pytest.approx(A4_LONG)
                assert len(page.get_images()) == 1

    def test_image_placed_at_top_left(self, store, png_bytes):
        image = add_image(store, "wide.png", png_bytes)
        pdf_bytes = generate_pdf_from_images([image], PDFOptions())

        with open_pdf(pdf_bytes) as doc:
            bbox = fitz.Rect(doc[0].get_image_info()[0]["bbox"])
            assert bbox.x0 == pytest.approx(0, abs=0.5)
            assert bbox.y0 == pytest.approx(0, abs=0.5)
            assert bbox.width == pytest.approx(A4_SHORT, abs=0.5)
            assert bbox.height == pytest.approx(A4_SHORT / 2, abs=0.5)

    def test_original_page_size_keeps_aspect_ratio(self, store):
        image = add_image(store, "wide.png", make_image(300, 100))
        pdf_bytes = generate_pdf_from_images([image], PDFOptions(page_size="Original"))

        with open_pdf(pdf_bytes) as doc:
            rect = doc[0].rect
            assert rect.width / rect.height == pytest.approx(3.0, rel=0.01)
            assert rect.width != pytest.approx(A4_SHORT)

    def test_progress_reaches_100_after_last_image(self, store, png_bytes):
        images = [add_image(store, f"{i}.png", png_bytes) for i in range(4)]
        seen = []
        generate_pdf_from_images(images, PDFOptions(), on_progress=seen.append)
        assert seen == [25, 50, 75, 100]

    def test_progress_rounds_down(self, store, png_bytes):
        images = [add_image(store, f"{i}.png", png_bytes) for i in range(3)]
        seen = []
        generate_pdf_from_images(images, PDFOptions(), on_progress=seen.append)
        assert seen == [33, 66, 100]

    def test_100_only_after_last_of_many_images(self, store):
        tiny = make_image(4, 4)
        images = [add_image(store, f"{i}.png", tiny) for i in range(200)]
        seen = []
        generate_pdf_from_images(images, PDFOptions(), on_progress=seen.append)
        assert len(seen) == 200
        assert seen[-2] == 99
        assert seen.count(100) == 1
        assert seen[-1] == 100
        assert seen == sorted(seen)

    def test_password_protection(self, store, png_bytes):
        image = add_image(store, "a.png", png_bytes)
        options = PDFOptions(password_protected=True, password="s3cret-pass")
        pdf_bytes = generate_pdf_from_images([image], options)

        with open_pdf(pdf_bytes) as doc:
            assert doc.needs_pass
            assert not doc.authenticate("wrong")
            assert doc.authenticate("s3cret-pass")
            assert len(doc) == 1

    def test_unprotected_output_opens_without_password(self, store, png_bytes):
        image = add_image(store, "a.png", png_bytes)
        pdf_bytes = generate_pdf_from_images([image], PDFOptions())
        with open_pdf(pdf_bytes) as doc:
            assert not doc.needs_pass

    def test_metadata_title(self, store, png_bytes):
        image = add_image(store, "a.png", png_bytes)
        pdf_bytes = generate_pdf_from_images([image], PDFOptions(), title="PyPDF Pro")
        with open_pdf(pdf_bytes) as doc:
            assert doc.metadata["title"] == "PyPDF Pro"
            assert doc.metadata["creator"] == "PyPDF Pro"

    def test_unreadable_image_names_file(self, store, png_bytes):
        good = add_image(store, "good.png", png_bytes)
        bad = add_image(store, "broken.jpg", b"this is not a jpeg")
        seen = []
        with pytest.raises(ConversionError, match="broken.jpg"):
            generate_pdf_from_images([good, bad], PDFOptions(), on_progress=seen.append)
        assert seen == [50]

    def test_validation_runs_first(self):
        with pytest.raises(ValidationError):
            generate_pdf_from_images([], PDFOptions())
