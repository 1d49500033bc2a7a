import io

import httpx
import pytest

from recraft_mcp.errors import DiskSaveError, ImageSourceError
from recraft_mcp.models import BytesSource, FileSource, PathSource
from recraft_mcp.utils import (
    generate_filename,
    get_url_extension,
    read_image_source,
    sanitize_filename,
    save_image,
    split_b64_image,
)

from .conftest import PNG_B64, PNG_BYTES


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestNames:
    def test_sanitize_filename(self):
        assert sanitize_filename("../evil") == "_evil"
        assert sanitize_filename('a<b>c:d"e') == "a_b_c_d_e"
        assert sanitize_filename("...") == "image"
        assert len(sanitize_filename("x" * 300)) == 100

    def test_split_b64_image(self):
        assert split_b64_image(f"data:image/jpeg;base64,{PNG_B64}") == ("jpeg", PNG_B64)
        assert split_b64_image("data:image/svg+xml;base64,PHN2Zz4=") == ("svg", "PHN2Zz4=")
        assert split_b64_image(PNG_B64) == ("png", PNG_B64)

    def test_get_url_extension(self):
        assert get_url_extension("https://cdn.test/a/b/photo.webp") == "webp"
        assert get_url_extension("https://cdn.test/a/photo.JPG?sig=abc.png") == "jpg"
        assert get_url_extension("https://cdn.test/a/photo") == "png"

    def test_generate_filename(self):
        name = generate_filename("a cat, sitting")
        assert name.startswith("a_cat__sitting_")
        assert "." not in name
        assert generate_filename().startswith("image_")


class TestReadImageSource:
    def test_bytes(self):
        assert read_image_source(BytesSource(data=PNG_BYTES)) == ("image.png", PNG_BYTES, "image/png")

    def test_file_handle(self):
        source = FileSource(handle=io.BytesIO(b"abc"), filename="photo.jpg")
        assert read_image_source(source) == ("photo.jpg", b"abc", "image/jpeg")

    def test_path(self, tmp_path):
        image = tmp_path / "pic.png"
        image.write_bytes(PNG_BYTES)
        assert read_image_source(PathSource(path=str(image))) == ("pic.png", PNG_BYTES, "image/png")

    def test_missing_path(self, tmp_path):
        with pytest.raises(ImageSourceError, match="Cannot read image file"):
            read_image_source(PathSource(path=str(tmp_path / "nope.png")))


@pytest.mark.asyncio
async def test_save_b64_uses_data_uri_extension(tmp_path):
    saved = await save_image(tmp_path, "shot", image_b64=f"data:image/jpeg;base64,{PNG_B64}")

    assert saved == tmp_path / "shot.jpeg"
    assert saved.read_bytes() == PNG_BYTES


@pytest.mark.asyncio
async def test_save_raw_b64_defaults_to_png(tmp_path):
    saved = await save_image(str(tmp_path), "shot", image_b64=PNG_B64)

    assert saved == tmp_path / "shot.png"


@pytest.mark.asyncio
async def test_save_creates_missing_directories(tmp_path):
    target = tmp_path / "a" / "b" / "c"

    saved = await save_image(target, "shot", image_b64=PNG_B64)

    assert saved.parent == target
    assert saved.exists()


@pytest.mark.asyncio
async def test_save_invalid_b64(tmp_path):
    with pytest.raises(DiskSaveError, match="Error decoding base64 image"):
        await save_image(tmp_path, "shot", image_b64="not base64!!")
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_save_from_url(tmp_path):
    client = mock_client(lambda request: httpx.Response(200, content=b"svg-data"))

    saved = await save_image(tmp_path, "logo", image_url="https://cdn.test/logo.svg?x=1", client=client)
    await client.aclose()

    assert saved == tmp_path / "logo.svg"
    assert saved.read_bytes() == b"svg-data"


@pytest.mark.asyncio
async def test_save_from_url_http_error_leaves_no_file(tmp_path):
    client = mock_client(lambda request: httpx.Response(404))

    with pytest.raises(DiskSaveError, match="Failed to download image: 404"):
        await save_image(tmp_path, "logo", image_url="https://cdn.test/logo.png", client=client)
    await client.aclose()

    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_save_from_url_network_error(tmp_path):
    def fail(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = mock_client(fail)

    with pytest.raises(DiskSaveError, match="Error downloading image"):
        await save_image(tmp_path, "logo", image_url="https://cdn.test/logo.png", client=client)
    await client.aclose()

    assert not (tmp_path / "logo.png").exists()


@pytest.mark.asyncio
async def test_save_needs_a_source(tmp_path):
    with pytest.raises(DiskSaveError, match="Either image_url or image_b64 must be provided"):
        await save_image(tmp_path, "logo")


@pytest.mark.asyncio
async def test_save_into_a_file_path_fails(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")

    with pytest.raises(DiskSaveError, match="Failed to create directory"):
        await save_image(blocker / "sub", "logo", image_b64=PNG_B64)


class BrokenDownload(httpx.AsyncByteStream):
    """Sends part of the body, then drops the connection."""

    async def __aiter__(self):
        yield b"partial"
        raise httpx.ReadError("connection reset")


@pytest.mark.asyncio
async def test_save_from_url_removes_partial_file(tmp_path):
    client = mock_client(lambda request: httpx.Response(200, stream=BrokenDownload()))

    with pytest.raises(DiskSaveError, match="Error downloading image: connection reset"):
        await save_image(tmp_path, "logo", image_url="https://cdn.test/logo.png", client=client)
    await client.aclose()

    assert list(tmp_path.iterdir()) == []
