"""Image upload to Cloudinary with backend-signed parameters."""

from __future__ import annotations

import logging
import re
from typing import IO, TYPE_CHECKING, Any, Mapping, Union

from .models import AuthMode, RequestDescriptor

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud}/image/upload"
SIGNED_FIELDS = ("signature", "timestamp")

_DATA_URI_NAME = re.compile(r"name=.*;")

Image = Union[bytes, str, IO[bytes]]


class CloudinaryUploader:
    """Uploads images straight to Cloudinary.

    The upload never carries the backend's bearer token: it is sent as an
    anonymous request to a foreign host, and any Authorization header set on
    the shared HTTP session is stripped by the executor.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    @property
    def upload_url(self) -> str:
        return CLOUDINARY_UPLOAD_URL.format(cloud=self.session.config.cloudinary_cloud)

    def build_descriptor(self, image: Image, signed_params: Mapping[str, Any]) -> RequestDescriptor:
        config = self.session.config
        if not config.cloudinary_cloud or not config.cloudinary_api_key:
            raise ValueError("cloudinary_cloud and cloudinary_api_key must be configured to upload images")
        missing = [name for name in SIGNED_FIELDS if signed_params.get(name) in (None, "")]
        if missing:
            raise ValueError(f"Signed parameters are missing: {', '.join(missing)}")

        form = {
            "api_key": config.cloudinary_api_key,
            "signature": str(signed_params["signature"]),
            "timestamp": str(signed_params["timestamp"]),
        }
        if isinstance(image, str):
            # Data URIs and remote URLs go in as a plain multipart field.
            files: dict[str, Any] = {"file": (None, _DATA_URI_NAME.sub("", image))}
        else:
            files = {"file": ("image", image)}
        return RequestDescriptor(
            method="POST",
            path=self.upload_url,
            form=form,
            files=files,
            auth=AuthMode.NONE,
        )

    def upload(self, image: Image, signed_params: Mapping[str, Any]) -> Any:
        descriptor = self.build_descriptor(image, signed_params)
        logger.info("Uploading image to Cloudinary cloud %s", self.session.config.cloudinary_cloud)
        return self.session.executor.execute(descriptor, self.session)
