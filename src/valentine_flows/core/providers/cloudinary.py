"""Cloudinary media upload.

Uploads audio through Cloudinary's signed upload API. Audio assets use the
``video`` resource type, as Cloudinary requires.

Signing: every upload parameter except ``file``, ``api_key``,
``resource_type`` and ``cloud_name`` is sorted by name, joined as
``k=v&k=v``, suffixed with the API secret and hashed with SHA-1.

Card previews are delivery URLs, not uploads: the memory photo is cropped
to 1080x1350 and the card message is overlaid as white text near the bottom.
"""

import base64
import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import quote

from valentine_flows.config.providers import CloudinaryConfig
from valentine_flows.core.errors import config_missing
from valentine_flows.core.providers.base import AdapterOptions, ProviderAdapter
from valentine_flows.core.providers.shared import read_json, verify_webhook_signature

logger = logging.getLogger(__name__)

_UNSIGNED_PARAMS = frozenset({"file", "api_key", "resource_type", "cloud_name"})

CARD_WIDTH = 1080
CARD_HEIGHT = 1350
CARD_TEXT_MAX_CHARS = 90
CARD_TEXT_FONT = "Arial_56_bold"


@dataclass(frozen=True)
class UploadedMedia:
    """A stored media asset."""

    url: str
    provider_id: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class UploadSignature:
    """Parameters a browser needs for a direct signed upload."""

    timestamp: int
    signature: str
    cloud_name: str
    api_key: str
    folder: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "signature": self.signature,
            "cloudName": self.cloud_name,
            "apiKey": self.api_key,
            "folder": self.folder,
        }


def escape_overlay_text(text: str) -> str:
    """URL-encode *text* for a text layer; commas and slashes are double-encoded."""
    return quote(text, safe="").replace("%2C", "%252C").replace("%2F", "%252F")


def sign_params(params: Mapping[str, Any], api_secret: str) -> str:
    """Return the hex SHA-1 upload signature for *params*."""
    to_sign = "&".join(
        f"{key}={value}"
        for key, value in sorted(params.items())
        if key not in _UNSIGNED_PARAMS and value is not None and value != ""
    )
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class MediaUploadAdapter(ProviderAdapter):
    """Media upload capability backed by Cloudinary.

    Best-effort fallback: ``None``.
    """

    provider = "cloudinary"
    breaker_key = "cloudinary-upload"
    failure_message = "Cloudinary upload failed"
    default_timeout = 6.0

    def __init__(
        self,
        config: Optional[CloudinaryConfig] = None,
        registry=None,
        *,
        clock: Optional[Callable[[], float]] = None,
        **kwargs: Any,
    ):
        super().__init__(config or CloudinaryConfig(), registry, **kwargs)
        self._clock = clock or time.time

    async def upload_audio(
        self,
        data: bytes,
        public_id: str,
        options: Optional[AdapterOptions] = None,
    ) -> Optional[UploadedMedia]:
        """Upload MP3 *data* under *public_id*, overwriting any existing asset.

        Raises:
            FlowError: In strict mode, on any failure
        """

        async def call() -> UploadedMedia:
            self._require_config(self._config.is_configured, "Cloudinary is not configured")
            params: dict[str, Any] = {
                "folder": self._config.folder,
                "public_id": public_id,
                "overwrite": "true",
                "timestamp": int(self._clock()),
            }
            form = {
                **params,
                "file": f"data:audio/mpeg;base64,{base64.b64encode(data).decode('ascii')}",
                "api_key": self._config.api_key,
                "signature": sign_params(params, self._config.api_secret),
            }
            response = await self._request(
                "POST",
                f"{self._config.base_url.rstrip('/')}/v1_1/{self._config.cloud_name}/video/upload",
                options,
                data=form,
            )
            body = read_json(response, {})
            if not isinstance(body, dict):
                body = {}
            secure_url = body.get("secure_url")
            asset_id = body.get("public_id")
            if not secure_url or not asset_id:
                raise self._invalid("Cloudinary returned incomplete upload payload")

            logger.debug("Cloudinary stored %s", asset_id)
            return UploadedMedia(url=secure_url, provider_id=asset_id, raw=body)

        return await self._run(call, fallback=None)

    def create_upload_signature(self, folder: Optional[str] = None) -> UploadSignature:
        """Sign a direct browser upload into *folder*.

        Raises:
            FlowError: ``PROVIDER_CONFIG_MISSING`` if Cloudinary is not configured
        """
        self._require_config(self._config.is_configured, "Cloudinary is not configured")
        target = folder or self._config.folder
        timestamp = int(self._clock())
        return UploadSignature(
            timestamp=timestamp,
            signature=sign_params({"timestamp": timestamp, "folder": target}, self._config.api_secret),
            cloud_name=self._config.cloud_name,
            api_key=self._config.api_key,
            folder=target,
        )

    def build_card_preview_url(self, source_public_id: str, message_text: str) -> Optional[str]:
        """Return a delivery URL rendering *message_text* over a memory photo.

        Only the first 90 characters of the message are drawn. No request is
        made. Unconfigured: strict mode raises, best-effort returns ``None``.

        Raises:
            FlowError: ``PROVIDER_CONFIG_MISSING`` in strict mode if Cloudinary is
                not configured
        """
        if not self._config.is_configured:
            if self.is_strict:
                raise config_missing(self.provider, "Cloudinary is not configured")
            return None

        overlay = escape_overlay_text(message_text[:CARD_TEXT_MAX_CHARS])
        transformation = "/".join(
            (
                f"c_fill,h_{CARD_HEIGHT},w_{CARD_WIDTH}",
                f"co_white,g_south,l_text:{CARD_TEXT_FONT}:{overlay},y_90",
                "e_shadow:60",
            )
        )
        return (
            f"{self._config.delivery_url.rstrip('/')}/{self._config.cloud_name}/image/upload/"
            f"{transformation}/{quote(source_public_id, safe='/')}"
        )

    def verify_webhook(self, body: Union[str, bytes], signature: Optional[str]) -> bool:
        """Check a Cloudinary notification against the webhook secret."""
        return verify_webhook_signature(body, signature, self._config.webhook_secret)
