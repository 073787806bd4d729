import math

from pydantic import BaseModel, Field

from agent_directory.config import settings


class PageParams(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=settings.default_page_size, ge=1, le=settings.max_page_size)


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


def page_meta(total: int, params: PageParams) -> PageMeta:
    return PageMeta(
        total=total,
        page=params.page,
        limit=params.limit,
        total_pages=math.ceil(total / params.limit),
    )
