"""
Purpose:
- Serve the single-page UI (index.html). /samples and /static are mounted in main.
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

router = APIRouter(tags=["pages"])

@router.get("/", include_in_schema=False)
def index(request: Request):
    index_path = request.app.state.settings.index_path
    if not index_path.is_file():
        raise HTTPException(status_code=404, detail="index.html not found")
    return FileResponse(index_path, media_type="text/html")
