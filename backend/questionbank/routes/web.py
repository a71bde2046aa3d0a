"""
Index page.

GET / and GET /index.html render `templates/index.html` with one random
question and mount the client view (`static/question_view.js`), which takes
over from there through the JSON API.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from questionbank.config import settings
from questionbank.database import get_db_session
from questionbank.services.question_service import question_service

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["Web"], include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
@router.get("/index.html", response_class=HTMLResponse)
async def index(request: Request, db: AsyncSession = Depends(get_db_session)):
    question = await question_service.get_random(db)
    if question is None:
        return PlainTextResponse("404 Not Found", status_code=404)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "question": question,
            "api_prefix": settings.api_prefix,
            "page_size": settings.default_page_size,
        },
    )
