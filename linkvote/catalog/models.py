"""Data models for stored articles."""

from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Article(BaseModel):
    """A posted link with its vote counters.

    Built from the article hash; the hash stores the creation time under
    ``time``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Annotated[str, Field(min_length=1, description="Numeric article id")]
    key: Annotated[str, Field(min_length=1, description="Redis key of the article")]
    title: str
    link: str
    poster: str
    created_at: float = Field(
        validation_alias=AliasChoices("created_at", "time"),
        description="Creation time in epoch seconds",
    )
    votes: int = Field(default=0, ge=0)
    disvotes: int = Field(default=0, ge=0)

    @classmethod
    def from_record(
        cls, key: str, article_id: str, record: dict[str, str]
    ) -> "Article":
        """Build an article from its raw hash fields."""
        return cls.model_validate({**record, "id": article_id, "key": key})

    def to_dict(self) -> dict[str, str | float | int]:
        """Convert to a JSON-friendly dictionary."""
        return self.model_dump()
