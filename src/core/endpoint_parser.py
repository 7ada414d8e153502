import logging
from typing import List

from pydantic import ValidationError

from contracts.endpoint import EndpointDescriptor
from contracts.errors import EndpointSpecError

logger = logging.getLogger(__name__)

ENTRY_SEPARATOR = ";"
HOST_PORT_SEPARATOR = "/"
SECURE_PREFIX = "+"
SKIP_VERIFICATION_PREFIX = "?"


def parse_endpoint(entry: str) -> EndpointDescriptor:
    """
    Parse one ``host/port`` entry.

    The port may be prefixed with ``+`` to enable TLS and then ``?`` to also skip
    certificate validation, e.g. ``irc.example.com/+?6697``.

    Raises:
        EndpointSpecError: If the entry is malformed.
    """
    host, sep, port = entry.rpartition(HOST_PORT_SEPARATOR)
    if not sep or not host:
        raise EndpointSpecError(f"Endpoint entry '{entry}' is not in host/port form")

    secure = False
    skip_verification = False
    if port.startswith(SECURE_PREFIX):
        secure = True
        port = port[len(SECURE_PREFIX):]
        if port.startswith(SKIP_VERIFICATION_PREFIX):
            skip_verification = True
            port = port[len(SKIP_VERIFICATION_PREFIX):]

    try:
        return EndpointDescriptor(
            identity=f"{host}:{port}",
            use_secure_transport=secure,
            skip_certificate_validation=skip_verification,
        )
    except ValidationError as e:
        raise EndpointSpecError(f"Invalid endpoint entry '{entry}': {e}") from e


def parse_endpoints(spec: str) -> List[EndpointDescriptor]:
    """
    Parse a ``;``-separated endpoint list. Blank entries are ignored and
    duplicates are kept.

    Args:
        spec (str): e.g. ``irc.example.com/6667;irc.example.com/+6697``.

    Returns:
        List[EndpointDescriptor]: Descriptors in the order given.
    """
    endpoints = [
        parse_endpoint(entry.strip())
        for entry in spec.split(ENTRY_SEPARATOR)
        if entry.strip()
    ]
    logger.debug(f"Parsed {len(endpoints)} endpoint(s) from '{spec}'")
    return endpoints
