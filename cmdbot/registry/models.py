from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import MalformedRecord


class CommandRecord(BaseModel):
    """Stored metadata for one custom command trigger."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    output: str
    # Records written before the rename use ``user_id`` and ``invocations``.
    author_id: str = Field(validation_alias=AliasChoices("author_id", "user_id"))
    invocation_count: int = Field(default=0, ge=0, validation_alias=AliasChoices("invocation_count", "invocations"))

    def increment(self) -> "CommandRecord":
        return self.model_copy(update={"invocation_count": self.invocation_count + 1})

    def serialize(self) -> str:
        return self.model_dump_json()

    @classmethod
    def deserialize(cls, raw: str | bytes) -> "CommandRecord":
        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return cls.model_validate_json(raw)
        except (UnicodeDecodeError, ValidationError) as e:
            raise MalformedRecord(str(e)) from e
