import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import fitz  # PyMuPDF

from image_store import SelectedImage

logger = logging.getLogger(__name__)

A4_SHORT, A4_LONG = 595, 842
PAGE_SIZES = ('A4', 'Original')
DEFAULT_DPI = 96
MAX_PAGE_POINTS = 14400  # PDF user-space limit per side
PRODUCER = "img2pdf-web (PyMuPDF)"

ProgressCallback = Callable[[int], None]


class ValidationError(ValueError):
    """Request was rejected before any image was touched."""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(message or code)
        self.code = code


class ConversionError(RuntimeError):
    pass


@dataclass
class PDFOptions:
    page_size: str = 'A4'
    password_protected: bool = False
    password: Optional[str] = None
    quality: float = 0.8

    @classmethod
    def from_dict(cls, data: Optional[dict], default_quality: float = 0.8) -> "PDFOptions":
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValidationError('bad_options', f"Options must be a JSON object, got {type(data).__name__}")

        page_size = str(data.get('pageSize', data.get('page_size', 'A4')))
        matches = [p for p in PAGE_SIZES if p.lower() == page_size.lower()]
        if not matches:
            raise ValidationError('bad_page_size', f"Unknown page size '{page_size}', expected A4 or Original")

        raw_quality = data.get('quality', default_quality)
        try:
            quality = float(raw_quality)
        except (TypeError, ValueError):
            raise ValidationError('bad_quality', f"Quality must be a number, got {raw_quality!r}") from None
        if not 0.0 <= quality <= 1.0:
            raise ValidationError('bad_quality', f"Quality must be between 0.0 and 1.0, got {quality}")

        protected = data.get('passwordProtected', data.get('password_protected', False))
        if not isinstance(protected, bool):
            raise ValidationError('bad_options', f"passwordProtected must be true or false, got {protected!r}")

        password = data.get('password')
        if password is not None and not isinstance(password, str):
            raise ValidationError('bad_options', f"Password must be a string, got {type(password).__name__}")

        return cls(
            page_size=matches[0],
            password_protected=protected,
            password=password or None,
            quality=quality,
        )

    @property
    def jpeg_quality(self) -> int:
        return max(1, round(self.quality * 100))


def validate_request(images: Sequence[SelectedImage], options: PDFOptions) -> None:
    if not images:
        raise ValidationError('no_images')
    if options.password_protected and not options.password:
        raise ValidationError('no_password')


def fit_to_page(img_w: float, img_h: float, page_w: float, page_h: float) -> Tuple[float, float]:
    """Scale to the page width; fall back to the page height if the result is too tall."""
    width = page_w
    height = img_h * width / img_w
    if height > page_h:
        height = page_h
        width = img_w * height / img_h
    return width, height


def original_page_size(pix: "fitz.Pixmap") -> Tuple[float, float]:
    xres = pix.xres or DEFAULT_DPI
    yres = pix.yres or DEFAULT_DPI
    pw = pix.width * 72 / xres
    ph = pix.height * 72 / yres
    scale = min(1.0, MAX_PAGE_POINTS / max(pw, ph))
    return pw * scale, ph * scale


def encode_page_image(data: bytes, quality: int) -> Tuple[bytes, "fitz.Pixmap"]:
    pix = fitz.Pixmap(data)
    if pix.alpha:
        pix = fitz.Pixmap(pix, 0)
    if pix.colorspace is None or pix.colorspace.n != 3:
        pix = fitz.Pixmap(fitz.csRGB, pix)
    return pix.tobytes("jpeg", jpg_quality=quality), pix


def generate_pdf_from_images(
    images: Sequence[SelectedImage],
    options: PDFOptions,
    on_progress: Optional[ProgressCallback] = None,
    title: Optional[str] = None,
) -> bytes:
    validate_request(images, options)

    total = len(images)
    quality = options.jpeg_quality
    logger.info(f"Building PDF from {total} images (page size {options.page_size}, jpeg quality {quality})")

    doc = fitz.open()
    try:
        for i, image in enumerate(images):
            try:
                img_data, pix = encode_page_image(image.read_bytes(), quality)
            except Exception as e:
                raise ConversionError(f"Could not read image '{image.name}': {e}") from e

            if options.page_size == 'A4':
                pw, ph = A4_SHORT, A4_LONG
                width, height = fit_to_page(pix.width, pix.height, pw, ph)
            else:
                pw, ph = original_page_size(pix)
                width, height = pw, ph
            pix = None

            page = doc.new_page(width=pw, height=ph)
            page.insert_image(fitz.Rect(0, 0, width, height), stream=img_data)

            if on_progress:
                on_progress((i + 1) * 100 // total)

        doc.set_metadata({
            'title': title or "Combined images",
            'creator': title or PRODUCER,
            'producer': PRODUCER,
        })
        return doc.tobytes(garbage=3, deflate=True, **_save_options(options))
    finally:
        doc.close()


def _save_options(options: PDFOptions) -> dict:
    if not options.password_protected:
        return {}
    permissions = (
        fitz.PDF_PERM_ACCESSIBILITY
        | fitz.PDF_PERM_PRINT
        | fitz.PDF_PERM_PRINT_HQ
        | fitz.PDF_PERM_COPY
    )
    return {
        'encryption': fitz.PDF_ENCRYPT_AES_256,
        'owner_pw': options.password,
        'user_pw': options.password,
        'permissions': int(permissions),
    }

