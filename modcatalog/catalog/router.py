"""
Route definitions for the catalogue API.

Endpoints under /api/catalog:
- GET    /mods                  : browse; state comes from tags, q, view and mod
- GET    /mods/{mod_id}         : one mod
- POST   /mods                  : create a mod
- PATCH  /mods/{mod_id}         : partial update
- DELETE /mods/{mod_id}         : delete
- POST   /mods/{mod_id}/downloads : count one download
- GET    /tags                  : every tag in the collection
- GET    /stats                 : landing page counters
- POST   /view/actions          : apply a view action to a location
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from ..exceptions import CatalogStoreError, ModNotFoundError
from ..models import DownloadCount, ModInput, ModUpdate, ViewActionRequest
from .formatting import hero_stats
from .query import tag_universe
from .schemas import CatalogPage, HeroStat, Mod
from .session import CatalogState, ViewSession
from .view_state import apply_action


router = APIRouter(prefix="/api/catalog", tags=["catalog"])


def get_catalog(request: Request) -> CatalogState:
    return request.app.state.catalog


@router.get("/mods", response_model=CatalogPage)
def browse_mods(request: Request, catalog: CatalogState = Depends(get_catalog)) -> CatalogPage:
    """
    Render the catalogue for a shareable URL.

    The raw query string is parsed as the browser would: ``tags`` (comma
    separated, all required), ``q``, ``view`` ('discover' or 'home') and
    ``mod``. A repeated parameter counts by its first occurrence.

    The response's ``location`` is the canonical query string for the same
    state; clients should replace their URL with it.
    """
    session = ViewSession.from_location(request.url.query)
    try:
        return session.render(catalog)
    finally:
        session.stop()


@router.post("/view/actions", response_model=CatalogPage)
def view_action(
    req: ViewActionRequest,
    catalog: CatalogState = Depends(get_catalog),
) -> CatalogPage:
    session = ViewSession.from_location(req.location, content_top=req.content_top)
    try:
        apply_action(session.controller, req.action, req.value, catalog.collection)
        return session.render(catalog)
    except LookupError:
        raise HTTPException(status_code=404, detail="Mod not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    finally:
        session.stop()


@router.get("/mods/{mod_id}", response_model=Mod)
def get_mod(mod_id: str, catalog: CatalogState = Depends(get_catalog)) -> Mod:
    mod = catalog.get(mod_id)
    if mod is None:
        raise HTTPException(status_code=404, detail="Mod not found")
    return mod


@router.post("/mods", response_model=Mod, status_code=201)
def create_mod(req: ModInput, catalog: CatalogState = Depends(get_catalog)) -> Mod:
    try:
        slug = catalog.create_mod(req)
    except CatalogStoreError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return catalog.get(slug)


@router.patch("/mods/{mod_id}", response_model=Mod)
def update_mod(mod_id: str, req: ModUpdate, catalog: CatalogState = Depends(get_catalog)) -> Mod:
    try:
        catalog.update_mod(mod_id, req)
    except ModNotFoundError:
        raise HTTPException(status_code=404, detail="Mod not found")
    except CatalogStoreError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return catalog.get(mod_id)


@router.delete("/mods/{mod_id}")
def delete_mod(mod_id: str, catalog: CatalogState = Depends(get_catalog)):
    try:
        deleted = catalog.delete_mod(mod_id)
    except CatalogStoreError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Mod not found")
    return {"status": "ok"}


@router.post("/mods/{mod_id}/downloads", response_model=DownloadCount)
def record_download(mod_id: str, catalog: CatalogState = Depends(get_catalog)) -> DownloadCount:
    if catalog.get(mod_id) is None:
        raise HTTPException(status_code=404, detail="Mod not found")
    count = catalog.increment_download(mod_id)
    return DownloadCount(id=mod_id, downloads=count)


@router.get("/tags", response_model=List[str])
def list_tags(catalog: CatalogState = Depends(get_catalog)) -> List[str]:
    return sorted(tag_universe(catalog.collection), key=str.lower)


@router.get("/stats", response_model=List[HeroStat])
def stats(catalog: CatalogState = Depends(get_catalog)) -> List[HeroStat]:
    return hero_stats(catalog.collection)
