# zerowaste/core/uploads.py
from dataclasses import dataclass

from fastapi import Request, status
from starlette.datastructures import UploadFile

from zerowaste.core.errors import ApiError

MB = 1024 * 1024

PRODUCT_IMAGE_MAX_BYTES = 10 * MB
PROFILE_PICTURE_MAX_BYTES = 5 * MB
MAX_PRODUCT_IMAGES = 5

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}

# Machine-readable upload error codes
FILE_TOO_LARGE = "FILE_TOO_LARGE"
TOO_MANY_FILES = "TOO_MANY_FILES"
UNEXPECTED_FIELD = "UNEXPECTED_FIELD"
INVALID_FILE_TYPE = "INVALID_FILE_TYPE"


@dataclass
class ImageFile:
    """An uploaded image that passed validation, held in memory."""

    filename: str
    content_type: str
    ext: str
    data: bytes


def _extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


class ImageUpload:
    """
    FastAPI dependency that validates image files from a multipart form.

    Rules:
      - files are accepted only under `field` (else UNEXPECTED_FIELD)
      - at most `max_files` files (else TOO_MANY_FILES)
      - MIME type must be image/* and extension in the allow-list
        (else INVALID_FILE_TYPE)
      - each file <= `max_bytes` (else FILE_TOO_LARGE)

    Usage:

        product_images = ImageUpload("images", max_files=5, max_bytes=10 * MB)

        @router.post("")
        def create(images: list[ImageFile] = Depends(product_images)):
            ...
    """

    def __init__(self, field: str, max_files: int, max_bytes: int):
        self.field = field
        self.max_files = max_files
        self.max_bytes = max_bytes

    async def __call__(self, request: Request) -> list[ImageFile]:
        content_type = request.headers.get("content-type", "")
        if not content_type.startswith("multipart/form-data"):
            return []

        form = await request.form()

        uploads: list[UploadFile] = []
        for key, value in form.multi_items():
            if not isinstance(value, UploadFile):
                continue
            if key != self.field:
                raise ApiError(
                    status.HTTP_400_BAD_REQUEST,
                    f"Unexpected file field '{key}'. Use '{self.field}'.",
                    UNEXPECTED_FIELD,
                )
            # Browsers send an empty part for an untouched file input
            if not value.filename:
                continue
            uploads.append(value)

        if len(uploads) > self.max_files:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                f"Too many files. Maximum {self.max_files} files.",
                TOO_MANY_FILES,
            )

        images: list[ImageFile] = []
        for upload in uploads:
            mime = upload.content_type or ""
            ext = _extension(upload.filename)
            if not mime.startswith("image/") or ext not in ALLOWED_IMAGE_EXTENSIONS:
                raise ApiError(
                    status.HTTP_400_BAD_REQUEST,
                    "Only image files are allowed (jpg, jpeg, png, gif, webp).",
                    INVALID_FILE_TYPE,
                )

            data = await upload.read()
            if len(data) > self.max_bytes:
                raise ApiError(
                    status.HTTP_400_BAD_REQUEST,
                    f"File too large. Maximum {self.max_bytes // MB}MB per file.",
                    FILE_TOO_LARGE,
                )

            images.append(
                ImageFile(
                    filename=upload.filename,
                    content_type=mime,
                    ext=ext,
                    data=data,
                )
            )

        return images


product_images = ImageUpload(
    "images",
    max_files=MAX_PRODUCT_IMAGES,
    max_bytes=PRODUCT_IMAGE_MAX_BYTES,
)

profile_picture = ImageUpload(
    "profilePicture",
    max_files=1,
    max_bytes=PROFILE_PICTURE_MAX_BYTES,
)
