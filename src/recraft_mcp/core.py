import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from recraft_mcp.errors import DiskSaveError, MissingDataError, UnknownToolError
from recraft_mcp.models import (
    CreateStyleArgs,
    FileArgs,
    GenerateImageArgs,
    GetUserInfoArgs,
    ImageData,
    ImageSegment,
    ImagesResponse,
    SaveImageToDiskArgs,
    TextSegment,
    ToolResult,
)
from recraft_mcp.providers.base_provider import BaseImageProvider
from recraft_mcp.tools import TOOLS_BY_NAME
from recraft_mcp.utils import save_image, split_b64_image
from recraft_mcp.validation import validate_schema

logger = logging.getLogger(__name__)

ImageSaver = Callable[..., Awaitable[Path]]

IMAGE_MIME_TYPE = "image/png"


def first_image(response: ImagesResponse, action: str) -> ImageData:
    if not response.data:
        raise MissingDataError(f"Failed to {action}: No image data received")
    return response.data[0]


def decode_image(image: ImageData) -> bytes:
    _, payload = split_b64_image(image.b64_json or "")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MissingDataError(f"Image data is not valid base64: {e}") from e


def image_result(image: Optional[ImageData], action: str) -> ToolResult:
    """Inline the image when the API sent base64, otherwise hand back its URL."""
    if image is None:
        raise MissingDataError(f"Failed to {action}: No image data received")
    if image.b64_json:
        return ToolResult(content=[ImageSegment(data=decode_image(image), mime_type=IMAGE_MIME_TYPE)])
    if image.url:
        return ToolResult.text(image.url)
    raise MissingDataError(f"Failed to {action}: No image data received")


class ToolDispatcher:
    """Validate tool arguments, call the provider and shape its answer as tool content."""

    def __init__(self, provider: BaseImageProvider, saver: ImageSaver = save_image):
        self.provider = provider
        self.saver = saver
        self._handlers: Dict[str, Callable[[Any], Awaitable[ToolResult]]] = {
            "generate_image": self.generate_image,
            "image_to_image": self._images_handler(provider.image_to_image, "transform image"),
            "inpaint_image": self._images_handler(provider.inpaint_image, "inpaint image"),
            "replace_background": self._images_handler(
                provider.replace_background, "replace background"
            ),
            "vectorize_image": self._image_handler(provider.vectorize_image, "vectorize image"),
            "remove_background": self._image_handler(
                provider.remove_background, "remove background"
            ),
            "crisp_upscale": self._image_handler(provider.crisp_upscale, "apply crisp upscale"),
            "creative_upscale": self._image_handler(
                provider.creative_upscale, "apply creative upscale"
            ),
            "create_style": self.create_style,
            "get_user_info": self.get_user_info,
            "save_image_to_disk": self.save_image_to_disk,
        }

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownToolError(f"Unknown tool: {name}")
        tool = TOOLS_BY_NAME[name]
        args = validate_schema(tool.args_model, arguments or {}, tool.error_prefix)
        logger.info(f"Running tool {name}")
        return await handler(args)

    @staticmethod
    def _images_handler(call, action: str):
        async def handle(args) -> ToolResult:
            response = await call(args)
            return image_result(first_image(response, action), action)

        return handle

    @staticmethod
    def _image_handler(call, action: str):
        async def handle(args: FileArgs) -> ToolResult:
            response = await call(args)
            return image_result(response.image, action)

        return handle

    async def generate_image(self, args: GenerateImageArgs) -> ToolResult:
        response = await self.provider.generate_image(args)
        image = first_image(response, "generate image")

        message = "Image generated successfully"
        if args.save_to_disk:
            logger.info(f"Saving generated image to {args.output_path}/{args.filename}")
            try:
                saved_path = await self.saver(
                    args.output_path,
                    args.filename,
                    image_url=image.url,
                    image_b64=image.b64_json,
                )
            except (DiskSaveError, OSError) as e:
                raise DiskSaveError(f"Failed to save image: {e}") from e
            message = f"Image generated and saved to: {saved_path}"

        if image.b64_json:
            return ToolResult(
                content=[
                    TextSegment(text=message),
                    ImageSegment(data=decode_image(image), mime_type=IMAGE_MIME_TYPE),
                ]
            )
        return ToolResult.text(f"{message}\nImage URL: {image.url}")

    async def create_style(self, args: CreateStyleArgs) -> ToolResult:
        response = await self.provider.create_style(args)
        return ToolResult.text(f"Style created with ID: {response.id}")

    async def get_user_info(self, args: GetUserInfoArgs) -> ToolResult:
        response = await self.provider.get_user_info()
        return ToolResult.text(f"User: {response.name} ({response.email})\nCredits: {response.credits}")

    async def save_image_to_disk(self, args: SaveImageToDiskArgs) -> ToolResult:
        saved_path = await self.saver(
            args.output_path,
            args.filename,
            image_url=str(args.image_url) if args.image_url else None,
            image_b64=args.image_b64,
        )
        return ToolResult.text(f"Image saved to: {saved_path}")

    async def close(self) -> None:
        await self.provider.close()
