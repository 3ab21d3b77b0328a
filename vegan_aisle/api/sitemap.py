"""Sitemap endpoint for search engines."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from vegan_aisle.database import get_db
from vegan_aisle.services.sitemap import build_sitemap

router = APIRouter(tags=["sitemap"])


@router.get("/api/sitemap.xml", include_in_schema=False)
@router.get("/sitemap.xml", include_in_schema=False)
async def sitemap(db: Annotated[Session, Depends(get_db)]):
    return Response(content=build_sitemap(db), media_type="application/xml")
