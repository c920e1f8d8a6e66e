"""
CatRouter - Single File Upload Middleware
=========================================

What:  Parses a multipart form and hands exactly one uploaded file to the
       route handler.
How:   A callable FastAPI dependency. It runs before the handler body, so a
       rejected form never reaches storage.
Who:   Attached to POST on the cat router (`Depends(SingleFileUpload("image"))`).

Rejected forms (HTTP 400 via UploadRejectedError):
    - no value under the expected field
    - more than one value under the expected field
    - a plain form value where a file was expected
    - a file with an empty filename
    - a file under any other field name
"""

import logging

from starlette.datastructures import UploadFile
from starlette.requests import Request

from catrouter.exceptions import UploadRejectedError

logger = logging.getLogger(__name__)


class SingleFileUpload:
    """Dependency that accepts one file under `field_name` and nothing else."""

    def __init__(self, field_name: str = "image"):
        self.field_name = field_name

    async def __call__(self, request: Request) -> UploadFile:
        form = await request.form()

        for key, value in form.multi_items():
            if key != self.field_name and isinstance(value, UploadFile):
                raise UploadRejectedError(
                    message=f"Unexpected field '{key}'",
                    field=key,
                    context={"expected": self.field_name},
                )

        values = form.getlist(self.field_name)
        if not values:
            raise UploadRejectedError(
                message=f"Missing file field '{self.field_name}'",
                field=self.field_name,
            )
        if len(values) > 1:
            raise UploadRejectedError(
                message=f"Expected a single file under '{self.field_name}', got {len(values)}",
                field=self.field_name,
                context={"count": len(values)},
            )

        upload = values[0]
        if not isinstance(upload, UploadFile):
            raise UploadRejectedError(
                message=f"Field '{self.field_name}' must be a file",
                field=self.field_name,
            )
        if not upload.filename:
            raise UploadRejectedError(
                message="Uploaded file has no filename",
                field=self.field_name,
            )

        logger.debug("Accepted upload '%s' under field '%s'", upload.filename, self.field_name)
        return upload
