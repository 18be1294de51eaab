"""Proxy for files generated by the assistant (images, exports)."""

import logging
import mimetypes

from fastapi import APIRouter, HTTPException, Request, Response, status

from empleabot.assistant.backend import FileStore
from empleabot.errors import RemoteResourceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.get("/{file_id}")
async def get_file(file_id: str, request: Request) -> Response:
    """Return the content of a generated file, referenced by chat links."""
    files: FileStore | None = request.app.state.files
    if files is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="File access is not available",
        )

    try:
        generated = await files.get_file(file_id)
    except RemoteResourceError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    media_type, _ = mimetypes.guess_type(generated.filename or "")
    headers = {}
    if generated.filename:
        headers["Content-Disposition"] = f'inline; filename="{generated.filename}"'
    return Response(
        content=generated.content,
        media_type=media_type or "application/octet-stream",
        headers=headers,
    )
