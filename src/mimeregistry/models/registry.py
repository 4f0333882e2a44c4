from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class MimeTypeRecord(BaseModel):
    """Mapping form of one content type, as stored in data files and caches.

    Keys use the hyphenated spelling of the data files (``content-type``,
    ``preferred-extension``, ``use-instead``). Fields left at their default
    are omitted by ``to_mapping()``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    content_type: str = Field(alias="content-type")
    docs: str | None = None
    friendly: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("friendly", "friendly-names"),
        serialization_alias="friendly",
    )
    encoding: str | None = None
    extensions: list[str] = Field(default_factory=list)
    preferred_extension: str | None = Field(default=None, alias="preferred-extension")
    obsolete: bool = False
    use_instead: str | None = Field(default=None, alias="use-instead")
    xrefs: dict[str, list[str]] = Field(default_factory=dict)
    registered: bool = False
    signature: bool = False

    @field_validator("docs")
    @classmethod
    def empty_docs_to_none(cls, v: str | None) -> str | None:
        return v or None

    def to_mapping(self) -> dict[str, object]:
        return {
            key: value
            for key, value in self.model_dump(by_alias=True).items()
            if value not in (None, False, "", [], {})
        }
