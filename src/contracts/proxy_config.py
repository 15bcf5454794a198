from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contracts.http_status import HttpStatus


class ProxyConfig(BaseModel):
    """
    Immutable configuration held for the lifetime of the proxy process.
    """

    model_config = ConfigDict(frozen=True)

    port: int = Field(ge=0, le=65535)
    host: str = "0.0.0.0"
    backend_scheme: str = "https"
    backend_host: str
    error_status: HttpStatus
    error_mod: int = Field(ge=1)
    backend_timeout: Optional[float] = 5.0
    embedded: bool = False

    @field_validator("backend_host")
    @classmethod
    def _host_has_no_path(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError(f"backend host must be host[:port] without a path: {value!r}")
        return value

    @property
    def backend_root(self) -> str:
        return f"{self.backend_scheme}://{self.backend_host}"
