from typing import Dict, List, Literal

from pydantic import BaseModel, Field

# "post" pages are listable (blog entries), "page" pages are structural.
PageType = Literal["post", "page"]


class Page(BaseModel):
    """One piece of ingested site content."""

    id: int
    type: PageType = "page"
    status: str = "publish"
    link: str = ""  # canonical permalink
    title: str = ""
    content: str = ""  # rendered body markup
    meta: Dict[str, str] = Field(default_factory=dict)
    date: str = ""  # ISO-8601, as delivered by the CMS
    modified: str = ""
    author: str = ""
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class NavigationEntry(BaseModel):
    url: str
    order: int = 0


class NavigationCollection(BaseModel):
    name: str
    entries: List[NavigationEntry] = Field(default_factory=list)


class SiteSnapshot(BaseModel):
    """Read-only copy of a site's content, navigation and identity."""

    home_url: str
    pages: List[Page] = Field(default_factory=list)
    navigation: List[NavigationCollection] = Field(default_factory=list)
