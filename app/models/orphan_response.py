from typing import List

from pydantic import BaseModel

from app.models.scan import ScanConfiguration, UrlCollision


class PageDetails(BaseModel):
    id: int
    type: str
    url: str = ""
    title: str
    published: str
    modified: str
    categories: str = ""
    tags: str = ""
    author: str


class OrphanResponse(BaseModel):
    site_url: str
    configuration: ScanConfiguration
    orphans_found: int
    page: int
    per_page: int
    total_pages: int
    orphans: List[PageDetails]
    collisions: List[UrlCollision]


class InvalidateResponse(BaseModel):
    site_url: str
    invalidated_keys: List[str]
