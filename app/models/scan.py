from typing import Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

ProtocolMode = Literal["none", "to_https", "to_http"]

DEFAULT_REDIRECT_KEY = "redirect_url"


class ScanConfiguration(BaseModel):
    """Options that shape one orphan scan.

    The tuple of fields is also the identity of a cached scan result.
    """

    model_config = ConfigDict(frozen=True)

    exclude_posts: bool = False
    redirect_key: str = DEFAULT_REDIRECT_KEY
    protocol_mode: ProtocolMode = "none"

    @property
    def include_listable(self) -> bool:
        return not self.exclude_posts


class UrlCollision(BaseModel):
    """Several published pages normalize to the same URL; the last one wins."""

    model_config = ConfigDict(frozen=True)

    url: str
    page_ids: List[int]


class OrphanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    orphans: Dict[str, int] = Field(default_factory=dict)
    collisions: List[UrlCollision] = Field(default_factory=list)
