"""
Purpose:
- /upload, /resized and /guess: the endpoints the page calls, e.g.
  /resized?imgid=y71q&pixelwidth=8 or /guess?sample=samples/sample18.jpg&pixelwidth=8
- Map service errors to HTTP status codes; everything else lives in PictureService.
"""

import asyncio
import logging
import threading
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from starlette.concurrency import run_in_threadpool

from ..core.errors import (
    ClientError,
    DecodeError,
    InferenceCancelled,
    InferenceError,
    PixelGuessError,
)
from ..services.pictures import PictureService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pictures"])

# nginx's "client closed request"
CLIENT_CLOSED_REQUEST = 499

def get_picture_service(request: Request) -> PictureService:
    return request.app.state.pictures

def _http_error(e: PixelGuessError) -> HTTPException:
    if isinstance(e, ClientError):
        return HTTPException(status_code=400, detail=e.message)
    return HTTPException(status_code=500, detail=e.message)

async def _cancel_on_disconnect(request: Request, cancel: threading.Event, poll: float = 0.1) -> None:
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling caption request")
            cancel.set()
            return
        await asyncio.sleep(poll)

@router.post("/upload")
async def upload(request: Request, service: PictureService = Depends(get_picture_service)):
    """
    Raw image bytes in the request body. Image ID + original size is enough
    for the page to then call /resized and /guess with growing pixel widths.
    """
    data = await request.body()
    try:
        result = await run_in_threadpool(service.upload, data)
    except DecodeError:
        raise HTTPException(status_code=400, detail="we're very sorry, but we were unable to decode this image :(")
    return result.as_response()

@router.api_route("/resized", methods=["GET", "POST"])
def resized(
    imgid: Optional[str] = Query(default=None, description="ID returned by /upload"),
    sample: Optional[str] = Query(default=None, description="Bundled sample, e.g. samples/sample18.jpg"),
    ratio: Optional[str] = Query(default=None, description="Scale factor in (0, 1]"),
    pixelwidth: Optional[str] = Query(default=None, description="Target width in pixels"),
    service: PictureService = Depends(get_picture_service),
):
    try:
        jpeg_data = service.resized_jpeg(image_id=imgid, sample=sample, ratio=ratio, pixel_width=pixelwidth)
    except PixelGuessError as e:
        raise _http_error(e)
    return Response(content=jpeg_data, media_type="image/jpeg")

@router.api_route("/guess", methods=["GET", "POST"])
async def guess(
    request: Request,
    imgid: Optional[str] = Query(default=None),
    sample: Optional[str] = Query(default=None),
    ratio: Optional[str] = Query(default=None),
    pixelwidth: Optional[str] = Query(default=None),
    service: PictureService = Depends(get_picture_service),
):
    """
    Same parameters as /resized; answers with what the model thinks the
    pixelated picture looks like.
    """
    cancel = threading.Event()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, cancel))
    try:
        answer = await run_in_threadpool(
            service.guess, image_id=imgid, sample=sample, ratio=ratio, pixel_width=pixelwidth, cancel=cancel,
        )
    except InferenceCancelled:
        raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="client closed request")
    except InferenceError as e:
        logger.error("unable to generate contents: %s", e.__cause__ or e)
        raise HTTPException(status_code=500, detail="error accessing Vertex AI")
    except PixelGuessError as e:
        raise _http_error(e)
    finally:
        watcher.cancel()
    return {"answer": answer}
