"""Internal account domain model."""

from uuid import UUID

from pydantic import BaseModel, Field


class InternalAccount(BaseModel):
    """A bank account or card owned by the organization itself."""

    id: UUID
    name: str
    account_number: str | None = None
    aliases: list[str] = Field(default_factory=list)

    @property
    def identifiers(self) -> list[str]:
        """Names that may appear in statement descriptions."""
        return [self.name, *self.aliases]
