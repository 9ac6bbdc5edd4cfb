import os
import uuid
import logging
import tempfile
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Optional

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.jpg': 'image/jpeg', '.jpeg': 'image/jpeg', '.png': 'image/png'}
FILE_PREFIX = "img2pdf_"


class UnsupportedImageError(ValueError):
    pass


def is_supported(filename: str) -> bool:
    return os.path.splitext(filename or "")[1].lower() in ALLOWED_EXTENSIONS


@dataclass
class SelectedImage:
    id: str
    name: str
    path: str
    size: int
    content_type: str

    @property
    def preview_url(self) -> str:
        return f"/preview/{self.id}"

    def read_bytes(self) -> bytes:
        with open(self.path, 'rb') as f:
            return f.read()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'size': self.size,
            'contentType': self.content_type,
            'preview': self.preview_url,
        }


class ImageStore:
    """Images picked for the current editing session, in selection order.

    Files live in ``upload_dir`` until removed. Removing an image deletes its
    file, which is what revokes the preview URL.
    """

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = upload_dir or tempfile.gettempdir()
        self._images: Dict[str, SelectedImage] = {}

    def __len__(self) -> int:
        return len(self._images)

    def __contains__(self, image_id: str) -> bool:
        return image_id in self._images

    def add(self, filename: str, stream: BinaryIO, content_type: Optional[str] = None) -> SelectedImage:
        if not is_supported(filename):
            raise UnsupportedImageError(f"Unsupported file type for '{filename}': only JPG, JPEG and PNG are accepted")

        ext = os.path.splitext(filename)[1].lower()
        image_id = uuid.uuid4().hex[:12]
        os.makedirs(self.upload_dir, exist_ok=True)
        path = os.path.join(self.upload_dir, f"{FILE_PREFIX}{image_id}{ext}")
        with open(path, 'wb') as out:
            data = stream.read()
            out.write(data)

        image = SelectedImage(
            id=image_id,
            name=os.path.basename(filename),
            path=path,
            size=len(data),
            content_type=content_type or ALLOWED_EXTENSIONS[ext],
        )
        self._images[image_id] = image
        logger.info(f"Stored {image.name} as {image_id} ({image.size} bytes)")
        return image

    def get(self, image_id: str) -> Optional[SelectedImage]:
        return self._images.get(image_id)

    def list(self) -> List[SelectedImage]:
        return list(self._images.values())

    def remove(self, image_id: str) -> bool:
        image = self._images.pop(image_id, None)
        if image is None:
            return False
        self._delete_file(image)
        logger.info(f"Removed {image.name} ({image_id})")
        return True

    def clear(self) -> int:
        images = self.list()
        self._images.clear()
        for image in images:
            self._delete_file(image)
        logger.info(f"Cleared {len(images)} images")
        return len(images)

    @staticmethod
    def _delete_file(image: SelectedImage) -> None:
        try:
            os.remove(image.path)
        except FileNotFoundError:
            logger.warning(f"Preview file for {image.id} was already gone: {image.path}")
        except OSError as e:
            logger.warning(f"Could not delete preview file for {image.id}: {e}")
