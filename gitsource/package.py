"""Package descriptor consumed by the source downloader."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class PackageDescriptor(BaseModel):
    """
    What to fetch: candidate source URLs, a content reference and version labels.

    Descriptors are built by the dependency resolver and never modified by
    the downloader. A missing source reference is accepted here and rejected
    when an operation is attempted.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field("", description="Package name, used in notices")
    source_reference: Optional[str] = Field(
        None, description="Commit hash, branch or tag to check out"
    )
    source_urls: List[str] = Field(
        default_factory=list, description="Candidate URLs, preferred first"
    )
    source_url: Optional[str] = Field(None, description="Preferred source URL")
    version: str = Field("", description="Normalized version, e.g. 1.0.0.0")
    pretty_version: Optional[str] = Field(None, description="Display version")

    @field_validator("source_urls")
    @classmethod
    def validate_source_urls(cls, v: List[str]) -> List[str]:
        return [url.strip() for url in v if url and url.strip()]

    @model_validator(mode="after")
    def fill_defaults(self) -> "PackageDescriptor":
        # frozen model: defaults are filled through object.__setattr__
        if self.source_url is None and self.source_urls:
            object.__setattr__(self, "source_url", self.source_urls[0])
        if self.source_url and not self.source_urls:
            object.__setattr__(self, "source_urls", [self.source_url])
        if self.pretty_version is None:
            object.__setattr__(self, "pretty_version", self.version)
        return self

    @property
    def full_pretty_version(self) -> str:
        """Display version, with the short reference appended for floating versions."""
        pretty = self.pretty_version or ""
        if pretty.startswith("dev-") or pretty.endswith("-dev"):
            if self.source_reference and len(self.source_reference) == 40:
                return f"{pretty} {self.source_reference[:7]}"
        return pretty
