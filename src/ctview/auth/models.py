"""
Pydantic models for the /auth HTTP contracts.

The server speaks camelCase; models accept either the wire alias or the
Python field name and serialize back with aliases.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

FALLBACK_DISPLAY_NAME = "ContainerView User"
FALLBACK_ROLE = "Collaborator"


class WireModel(BaseModel):
    """Base for models exchanged with the API."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ─── Requests ────────────────────────────────────────────────────────


class LoginRequest(WireModel):
    """POST /auth/login request body."""

    cpf: str
    password: str


class VerifyRequest(WireModel):
    """POST /auth/verify request body."""

    code: str


class RegisterUserPayload(WireModel):
    """POST /auth/register request body."""

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    cpf: str
    email: str
    password: str
    role: str
    two_factor_enabled: bool = Field(default=False, alias="twoFactorEnabled")


class TwoFactorSetupRequest(WireModel):
    """POST /auth/2fa/setup request body."""

    cpf: str


# ─── Responses ───────────────────────────────────────────────────────


class LoginResponse(WireModel):
    """
    POST /auth/login response.

    ``token`` is a temporary ticket when a second factor is still required,
    otherwise the final session token. The server has been seen signalling
    the second factor under three different flags; any of them counts.
    """

    cpf: str | None = None
    token: str | None = None
    two_factor_enabled: bool | None = Field(default=None, alias="twoFactorEnabled")
    requires_two_factor: bool | None = Field(default=None, alias="requiresTwoFactor")
    two_factor_required: bool | None = Field(default=None, alias="twoFactorRequired")

    @property
    def second_factor_required(self) -> bool:
        return bool(
            self.two_factor_enabled
            or self.requires_two_factor
            or self.two_factor_required
        )


class VerifyResponse(WireModel):
    """POST /auth/verify response."""

    cpf: str | None = None
    token: str | None = None
    status: str | None = None


class RegisterResponse(WireModel):
    """POST /auth/register response (the server may also answer with plain text)."""

    message: str | None = None
    totp_secret: str | None = Field(default=None, alias="totpSecret")
    qr_code_data_uri: str | None = Field(default=None, alias="qrCodeDataUri")


class TotpSetup(WireModel):
    """POST /auth/2fa/setup response."""

    secret: str
    qr_code_data_uri: str = Field(alias="qrCodeDataUri")
    message: str | None = None


class UserProfile(WireModel):
    """
    The authenticated user as returned by GET /auth/me.

    Unknown fields are kept so consumers can read server additions without
    a model change.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str | None = None
    cpf: str | None = None
    name: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    email: str | None = None
    role: str | None = None
    phone: str | None = None
    avatar_url: str | None = Field(default=None, alias="avatarUrl")
    two_factor_enabled: bool = Field(default=False, alias="twoFactorEnabled")
    created_at: str | None = Field(default=None, alias="createdAt")
    last_login_at: str | None = Field(default=None, alias="lastLoginAt")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def display_name(self) -> str:
        """Best human-readable name, falling back through name parts, email and CPF."""
        if self.name and self.name.strip():
            return self.name.strip()

        first, last = self.first_name, self.last_name
        full = " ".join(part for part in (first, last) if part).strip()
        return full or self.email or self.cpf or FALLBACK_DISPLAY_NAME

    @property
    def role_label(self) -> str:
        return self.role or FALLBACK_ROLE

    def merged(self, partial: dict[str, Any]) -> "UserProfile":
        """Return a copy with ``partial`` (wire or field names) applied on top."""
        base = self.model_dump(by_alias=True, exclude_none=True)
        aliases = {
            name: field.alias
            for name, field in type(self).model_fields.items()
            if field.alias
        }
        for key, value in partial.items():
            base[aliases.get(key, key)] = value
        return type(self).model_validate(base)
