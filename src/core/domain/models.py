"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Normaliza los registros que devuelve Salesforce (PascalCase, campos
  ausentes, `attributes` extra) a una forma estable para los templates.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import AliasChoices, BaseModel, Field
from pydantic.config import ConfigDict


class UserRecord(BaseModel):
    """Un usuario remoto del CRM.

    Por qué inmutable:
    - Se obtiene una vez por build y solo se lee desde los templates.

    Acepta tanto los nombres de Salesforce (`FirstName`) como los de
    serialización (`firstName`) y los atributos Python (`first_name`).
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("Id", "id"),
        serialization_alias="id",
        description="Id de Salesforce (18 caracteres).",
    )
    first_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FirstName", "firstName", "first_name"),
        serialization_alias="firstName",
    )
    last_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LastName", "lastName", "last_name"),
        serialization_alias="lastName",
    )
    email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("Email", "email"),
        serialization_alias="email",
    )
    small_photo_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SmallPhotoUrl", "smallPhotoUrl", "small_photo_url"),
        serialization_alias="smallPhotoUrl",
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class SessionInfo(BaseModel):
    """Identificadores que devuelve un login correcto."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1, repr=False)
    instance_url: str = Field(..., min_length=8)
    user_id: str = Field(..., min_length=1)
    organization_id: str = Field(..., min_length=1)
    authenticated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
