from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, SecretStr

from app.models.scan import DEFAULT_REDIRECT_KEY, ProtocolMode, ScanConfiguration


class OrphanRequest(BaseModel):
    url: HttpUrl
    exclude_posts: bool = False
    redirect_key: str = Field(
        default=DEFAULT_REDIRECT_KEY,
        max_length=255,
        description="Custom field holding a redirect target. Blank falls back to 'redirect_url'.",
    )
    protocol_mode: ProtocolMode = "none"
    max_duration: float = Field(
        default=300,
        ge=1,
        le=3600,
        description="Wall-clock budget in seconds for the link scan (1–3600).",
    )
    page: int = Field(default=1, ge=1, description="Result page to return (1-based).")
    per_page: int = Field(default=20, ge=1, le=100, description="Orphans per result page (1–100).")
    username: Optional[str] = Field(
        default=None,
        description="WordPress user for application-password auth (needed to read menus).",
    )
    app_password: Optional[SecretStr] = None

    def to_config(self) -> ScanConfiguration:
        return ScanConfiguration(
            exclude_posts=self.exclude_posts,
            redirect_key=self.redirect_key,
            protocol_mode=self.protocol_mode,
        )


class InvalidateRequest(BaseModel):
    """Content-mutation notification for a site.

    Omitted fields fall back to the site's active scan configuration.
    """

    url: HttpUrl
    redirect_key: Optional[str] = None
    protocol_mode: Optional[ProtocolMode] = None
