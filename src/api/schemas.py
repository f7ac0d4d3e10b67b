"""Request/response Pydantic models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ScrapeRequest(BaseModel):
    url: str
    refresh: bool = False


class ScrapedContent(BaseModel):
    """The extraction pipeline's only output.

    Built once per extraction and never mutated; serialised with camelCase
    keys (``publishDate``, ``wordCount`` ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str = "Untitled"
    author: str = "Unknown Author"
    publish_date: str | None = None
    featured_image: str | None = None
    images: list[str] = []
    content: str
    paragraphs: list[str]
    word_count: int
    estimated_read_time: str
    platform: str
    url: str


class ScrapeResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    data: ScrapedContent


class ErrorDetail(BaseModel):
    error: str
    message: str
