import base64
import binascii
import logging
import mimetypes
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union

import httpx

from recraft_mcp.errors import DiskSaveError, ImageSourceError
from recraft_mcp.models import DATA_URI_RE, BytesSource, FileSource, PathSource

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "png"
_URL_EXTENSION_RE = re.compile(r"\.([a-zA-Z0-9]+)$")

SourceVariant = Union[BytesSource, FileSource, PathSource]


def sanitize_filename(name: str) -> str:
    """Keep a caller supplied name inside its target directory."""
    name = re.sub(r'[<>:"/\\|?*\x00-\x1F]', "_", name)
    name = name.strip(". ")
    return name[:100] or "image"


def split_b64_image(image_b64: str) -> Tuple[str, str]:
    """Return ``(extension, payload)`` for raw base64 or a ``data:image/...`` URI."""
    match = DATA_URI_RE.match(image_b64)
    if not match:
        return DEFAULT_EXTENSION, image_b64
    # svg+xml -> svg
    extension = match.group(1).split("+")[0].lower()
    return extension, image_b64[match.end():]


def get_url_extension(image_url: str) -> str:
    path = httpx.URL(image_url).path
    match = _URL_EXTENSION_RE.search(path.rsplit("/", 1)[-1])
    if match:
        return match.group(1).lower()
    return DEFAULT_EXTENSION


def read_image_source(source: SourceVariant) -> Tuple[str, bytes, str]:
    """Load a validated image source as an ``(filename, content, content_type)`` upload."""
    if isinstance(source, BytesSource):
        filename, content = source.filename, source.data
    elif isinstance(source, FileSource):
        filename, content = source.filename, source.handle.read()
        if isinstance(content, str):
            content = content.encode()
    else:
        path = Path(source.path).expanduser()
        try:
            content = path.read_bytes()
        except OSError as e:
            raise ImageSourceError(f"Cannot read image file {path}: {e}") from e
        filename = path.name
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return filename, content, content_type


def _remove_partial(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


async def save_image_from_url(
    image_url: str,
    output_dir: Path,
    filename: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Path:
    output_file = output_dir / f"{sanitize_filename(filename)}.{get_url_extension(image_url)}"
    owns_client = client is None
    client = client or httpx.AsyncClient(follow_redirects=True)
    try:
        async with client.stream("GET", image_url) as response:
            if not response.is_success:
                raise DiskSaveError(f"Failed to download image: {response.status_code}")
            with open(output_file, "wb") as f:
                async for chunk in response.aiter_bytes():
                    f.write(chunk)
    except httpx.HTTPError as e:
        _remove_partial(output_file)
        logger.error(f"Error downloading image {image_url}: {e}")
        raise DiskSaveError(f"Error downloading image: {e}") from e
    except OSError as e:
        _remove_partial(output_file)
        logger.error(f"Error saving image {image_url} to {output_file}: {e}")
        raise DiskSaveError(f"Error saving file: {e}") from e
    finally:
        if owns_client:
            await client.aclose()
    logger.info(f"Image saved to {output_file}")
    return output_file


async def save_image_from_b64(image_b64: str, output_dir: Path, filename: str) -> Path:
    extension, payload = split_b64_image(image_b64)
    try:
        image_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DiskSaveError(f"Error decoding base64 image: {e}") from e
    output_file = output_dir / f"{sanitize_filename(filename)}.{extension}"
    try:
        output_file.write_bytes(image_bytes)
    except OSError as e:
        logger.error(f"Error saving base64 image to {output_file}: {e}")
        raise DiskSaveError(f"Error saving file: {e}") from e
    logger.info(f"Image saved to {output_file}")
    return output_file


async def save_image(
    output_path: Union[str, Path],
    filename: str,
    image_url: Optional[str] = None,
    image_b64: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Path:
    """Write an image to ``output_path/filename.<ext>`` and return the final path.

    The URL wins when both sources are given. The extension comes from the
    data URI prefix, then from the URL, then defaults to ``png``.
    """
    output_dir = Path(output_path)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DiskSaveError(f"Failed to create directory {output_dir}: {e}") from e
    if image_url:
        return await save_image_from_url(str(image_url), output_dir, filename, client)
    if image_b64 is not None:
        return await save_image_from_b64(image_b64, output_dir, filename)
    raise DiskSaveError("Either image_url or image_b64 must be provided")


def generate_filename(prompt: Optional[str] = None) -> str:
    """Build an extensionless file name from a prompt and the current time."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if prompt:
        sane_prompt = "".join(
            c if c.isalnum() or c in (" ", "-") else "_" for c in prompt[:30]
        ).rstrip()
        sane_prompt = sane_prompt.replace(" ", "_")
        return f"{sane_prompt}_{timestamp}"
    return f"image_{timestamp}"
