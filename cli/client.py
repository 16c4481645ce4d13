from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Dict, NoReturn

import httpx
import typer

from cli.config import CLIConfig

_IMAGE_SUBTYPES = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".webp": "webp",
    ".heic": "heic",
    ".heif": "heif",
}


def encode_image(path: Path) -> str:
    """Build the base64 data URI the upload endpoint expects."""
    subtype = _IMAGE_SUBTYPES.get(path.suffix.lower())
    if subtype is None:
        raise typer.BadParameter(
            f"Unsupported image type {path.suffix!r}; expected one of "
            f"{', '.join(sorted(_IMAGE_SUBTYPES))}."
        )
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:image/{subtype};base64,{payload}"


class ApiClient:
    """Minimal HTTP client for the meter reading service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def upload(
        self,
        path: Path,
        customer_code: str,
        measure_datetime: str,
        measure_type: str,
    ) -> Dict[str, Any]:
        if not path.is_file():
            raise typer.BadParameter(f"Path {path} is not a file.")

        body = {
            "image": encode_image(path),
            "customer_code": customer_code,
            "measure_datetime": measure_datetime,
            "measure_type": measure_type,
        }
        return self._request("POST", "/upload", json=body)

    def confirm(self, measure_uuid: str, confirmed_value: int) -> Dict[str, Any]:
        body = {"measure_uuid": measure_uuid, "confirmed_value": confirmed_value}
        return self._request("PATCH", "/confirm", json=body)

    def list_measures(self, customer_code: str, measure_type: str) -> Dict[str, Any]:
        return self._request(
            "GET",
            f"/{customer_code}/list",
            params={"measure_type": measure_type},
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        code: str | None = None
        description: str | None = None
        try:
            data = exc.response.json()
            code = data.get("error_code")
            description = data.get("error_description")
        except ValueError:
            description = exc.response.text.strip()
        message = f"Request failed with status {exc.response.status_code}"
        if code:
            message += f" [{code}]"
        message += f": {description or 'no detail provided.'}"
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
