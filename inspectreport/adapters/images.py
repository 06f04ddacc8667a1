from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from pathlib import Path

import httpx


logger = logging.getLogger(__name__)

_FORMAT_BY_MIME = {
    'image/png': 'PNG',
    'image/jpeg': 'JPEG',
    'image/jpg': 'JPEG',
    'image/gif': 'GIF',
    'image/webp': 'WEBP',
}


class ImageDecodeError(ValueError):
    pass


@dataclass(frozen=True)
class DecodedImage:
    data: bytes
    fmt: str


@dataclass(frozen=True)
class ReportAssets:
    logo: bytes | None = None
    watermark: bytes | None = None


def sniff_format(header: str) -> str:
    """Pillow format name declared by a data-URI header; JPEG when unrecognised."""
    lowered = str(header or '').lower()
    for mime, fmt in _FORMAT_BY_MIME.items():
        if mime in lowered:
            return fmt
    return 'JPEG'


def decode_data_uri(value: str | None) -> DecodedImage:
    """Split a ``data:<mime>;base64,<payload>`` string into raw bytes.

    Raises ImageDecodeError when the marker is missing, the payload is not
    valid base64, or nothing is left after decoding.
    """
    text = str(value or '').strip()
    marker = 'base64,'
    index = text.find(marker)
    if index < 0:
        raise ImageDecodeError('missing base64 marker')

    header = text[:index]
    payload = ''.join(text[index + len(marker):].split())
    fmt = sniff_format(header)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError(f'invalid base64 payload: {exc}') from exc
    if not data:
        raise ImageDecodeError('empty image payload')
    return DecodedImage(data=data, fmt=fmt)


@dataclass
class AssetFetcherConfig:
    logo_url: str | None
    logo_path: Path | None
    timeout_seconds: float


class AssetFetcher:
    def __init__(self, cfg: AssetFetcherConfig, *, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = cfg
        self._transport = transport

    async def fetch(self, url: str) -> bytes | None:
        try:
            async with httpx.AsyncClient(
                timeout=max(1.0, float(self.cfg.timeout_seconds)),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning('Could not load image %s: %s', url, exc)
            return None
        return response.content or None

    async def resolve(self) -> ReportAssets:
        logo: bytes | None = None
        if self.cfg.logo_path is not None:
            path = Path(self.cfg.logo_path)
            if path.is_file():
                logo = await asyncio.to_thread(path.read_bytes)
            else:
                logger.warning('Logo path %s does not exist', path)
        if logo is None and self.cfg.logo_url:
            logo = await self.fetch(self.cfg.logo_url)
        # The watermark reuses the logo artwork.
        return ReportAssets(logo=logo, watermark=logo)
