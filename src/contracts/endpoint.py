from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def split_host_port(identity: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` identity into its host and numeric port.

    Raises:
        ValueError: If the identity has no port or the port is not in 1..65535.
    """
    host, sep, port = identity.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"'{identity}' is not in host:port form")
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"port {port_number} out of range in '{identity}'")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, port_number


class EndpointDescriptor(BaseModel):
    """
    A network endpoint to probe, together with its transport-security settings.

    The JSON aliases match the probe job wire format:
    ``{"server": "host:port", "secure": bool, "skip-verification": bool}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identity: str = Field(alias="server")
    use_secure_transport: bool = Field(False, alias="secure")
    skip_certificate_validation: bool = Field(False, alias="skip-verification")

    @field_validator("identity")
    @classmethod
    def _validate_identity(cls, value: str) -> str:
        split_host_port(value)
        return value

    @property
    def host(self) -> str:
        return split_host_port(self.identity)[0]

    @property
    def port(self) -> int:
        return split_host_port(self.identity)[1]

    def to_job_payload(self) -> dict:
        """Return the probe job wire representation of this endpoint."""
        return self.model_dump(by_alias=True)

    def __str__(self):
        return self.identity
