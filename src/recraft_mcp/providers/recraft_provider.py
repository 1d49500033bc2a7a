import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from recraft_mcp.config import Settings
from recraft_mcp.errors import MissingDataError, UpstreamError
from recraft_mcp.models import (
    Controls,
    CreateStyleArgs,
    CreativeUpscaleArgs,
    CrispUpscaleArgs,
    FileArgs,
    GenerateImageArgs,
    ImageResponse,
    ImagesResponse,
    ImageToImageArgs,
    InpaintImageArgs,
    RemoveBackgroundArgs,
    ReplaceBackgroundArgs,
    StyleResponse,
    UserInfoResponse,
    VectorizeImageArgs,
)
from recraft_mcp.providers.base_provider import BaseImageProvider
from recraft_mcp.utils import read_image_source

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

BINARY_FIELDS = frozenset({"image", "mask", "file"})

Upload = Tuple[str, Tuple[str, bytes, str]]


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_form(
    args: BaseModel, exclude: Iterable[str] = ()
) -> Tuple[Dict[str, str], List[Upload]]:
    """Split validated arguments into multipart text fields and binary parts.

    Absent values are left out, ``controls`` travels as a JSON string.
    """
    data: Dict[str, str] = {}
    files: List[Upload] = []
    for name in type(args).model_fields:
        value = getattr(args, name)
        if value is None or name in exclude:
            continue
        if name in BINARY_FIELDS:
            files.append((name, read_image_source(value)))
        elif isinstance(value, Controls):
            data[name] = json.dumps(value.model_dump(mode="json", exclude_none=True))
        else:
            data[name] = _form_value(value)
    return data, files


class RecraftProvider(BaseImageProvider):
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        # No timeout: generations routinely outlast httpx's 5s default.
        self.client = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={"Authorization": f"Bearer {settings.api_key}"},
            timeout=None,
            transport=transport,
        )

    async def __aenter__(self) -> "RecraftProvider":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, path: str, action: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Request to {path} failed: {e}")
            raise UpstreamError(f"Failed to {action}: {e}") from e
        if not response.is_success:
            logger.error(f"Recraft API {path} returned {response.status_code}: {response.text}")
            raise UpstreamError(
                f"Failed to {action}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return response.json()
        except ValueError as e:
            raise MissingDataError(f"Failed to {action}: response is not JSON") from e

    @staticmethod
    def _parse(model: Type[T], payload: Any, action: str) -> T:
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            raise MissingDataError(f"Failed to {action}: unexpected response {e}") from e

    async def _post_form(
        self,
        path: str,
        args: BaseModel,
        action: str,
        model: Type[T],
        exclude: Iterable[str] = (),
    ) -> T:
        data, files = build_form(args, exclude)
        payload = await self._request("POST", path, action, data=data, files=files)
        return self._parse(model, payload, action)

    async def _post_file(self, path: str, args: FileArgs, action: str) -> ImageResponse:
        return await self._post_form(path, args, action, ImageResponse, exclude={"model"})

    async def generate_image(self, args: GenerateImageArgs) -> ImagesResponse:
        payload = await self._request(
            "POST", "/v1/images/generations", "generate image", json=args.upstream_payload()
        )
        return self._parse(ImagesResponse, payload, "generate image")

    async def image_to_image(self, args: ImageToImageArgs) -> ImagesResponse:
        return await self._post_form(
            "/v1/images/imageToImage", args, "transform image", ImagesResponse
        )

    async def inpaint_image(self, args: InpaintImageArgs) -> ImagesResponse:
        return await self._post_form("/v1/images/inpaint", args, "inpaint image", ImagesResponse)

    async def replace_background(self, args: ReplaceBackgroundArgs) -> ImagesResponse:
        return await self._post_form(
            "/v1/images/replaceBackground", args, "replace background", ImagesResponse
        )

    async def vectorize_image(self, args: VectorizeImageArgs) -> ImageResponse:
        return await self._post_file("/v1/images/vectorize", args, "vectorize image")

    async def remove_background(self, args: RemoveBackgroundArgs) -> ImageResponse:
        return await self._post_file("/v1/images/removeBackground", args, "remove background")

    async def crisp_upscale(self, args: CrispUpscaleArgs) -> ImageResponse:
        return await self._post_file("/v1/images/crispUpscale", args, "apply crisp upscale")

    async def creative_upscale(self, args: CreativeUpscaleArgs) -> ImageResponse:
        return await self._post_file(
            "/v1/images/creativeUpscale", args, "apply creative upscale"
        )

    async def create_style(self, args: CreateStyleArgs) -> StyleResponse:
        files = [
            (f"file{index}", read_image_source(source))
            for index, source in enumerate(args.files, start=1)
        ]
        payload = await self._request(
            "POST", "/v1/styles", "create style", data={"style": args.style}, files=files
        )
        return self._parse(StyleResponse, payload, "create style")

    async def get_user_info(self) -> UserInfoResponse:
        payload = await self._request("GET", "/v1/users/me", "get user information")
        return self._parse(UserInfoResponse, payload, "get user information")

    async def close(self) -> None:
        await self.client.aclose()
