"""Service account credential parsing for the Earth Engine collaborator.

The credential input is a single environment value holding either inline
service account JSON or a filesystem path to a JSON key file. This module
only reads and validates that value; signing in to Earth Engine is left to
Earth Engine's own client library.

Example:
    Parse an inline key:
        >>> key = parse_service_account(
        ...     '{"client_email": "a@b.com", "private_key": "k"}'
        ... )
        >>> key.client_email
        'a@b.com'

    Parse a key file path:
        >>> key = parse_service_account("/secrets/ee-key.json")
"""

from __future__ import annotations

import dataclasses
import json
import pathlib


class ServiceAccountError(ValueError):
    """Raised when the credential JSON lacks client_email or private_key."""


@dataclasses.dataclass(frozen=True)
class ServiceAccountKey:
    """Fields of a service account key the Earth Engine client needs.

    Attributes:
        client_email: Service account e-mail address.
        private_key: PEM private key.
        project_id: Optional Google Cloud project to initialize against.
    """

    client_email: str
    private_key: str
    project_id: str | None = None

    def __repr__(self) -> str:
        return (
            f"ServiceAccountKey(client_email={self.client_email!r}, "
            f"project_id={self.project_id!r})"
        )


def _read_key_text(value: str) -> str | None:
    """Return inline JSON as-is, or the contents of the file it names."""
    if value.startswith("{"):
        return value

    path = pathlib.Path(value)
    if not path.is_file():
        return None

    return path.read_text(encoding="utf-8")


def parse_service_account(value: str | None) -> ServiceAccountKey | None:
    """Parse the service account credential input.

    Args:
        value: Raw environment value. Inline JSON when it starts with ``{``
            after trimming, otherwise treated as a path to a JSON key file.

    Returns:
        ServiceAccountKey, or None when the value is unset, blank, or names
        a file that does not exist.

    Raises:
        ServiceAccountError: If the JSON lacks client_email or private_key.
        json.JSONDecodeError: If the key text is not valid JSON.
    """
    if not value or not value.strip():
        return None

    raw = _read_key_text(value.strip())
    if raw is None:
        return None

    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ServiceAccountError("Service account JSON must be an object")

    client_email = parsed.get("client_email")
    private_key = parsed.get("private_key")
    if not client_email or not private_key:
        raise ServiceAccountError(
            "Service account JSON must include client_email and private_key"
        )

    return ServiceAccountKey(
        client_email=str(client_email),
        private_key=str(private_key),
        project_id=parsed.get("project_id"),
    )
