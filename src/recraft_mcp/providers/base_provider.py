from abc import ABC, abstractmethod

from recraft_mcp.models import (
    CreateStyleArgs,
    CreativeUpscaleArgs,
    CrispUpscaleArgs,
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


class BaseImageProvider(ABC):
    """Upstream image API, one coroutine per operation.

    Every method receives already validated arguments and raises
    ``UpstreamError`` when the service rejects the request.
    """

    @abstractmethod
    async def generate_image(self, args: GenerateImageArgs) -> ImagesResponse:
        pass

    @abstractmethod
    async def image_to_image(self, args: ImageToImageArgs) -> ImagesResponse:
        pass

    @abstractmethod
    async def inpaint_image(self, args: InpaintImageArgs) -> ImagesResponse:
        pass

    @abstractmethod
    async def replace_background(self, args: ReplaceBackgroundArgs) -> ImagesResponse:
        pass

    @abstractmethod
    async def vectorize_image(self, args: VectorizeImageArgs) -> ImageResponse:
        pass

    @abstractmethod
    async def remove_background(self, args: RemoveBackgroundArgs) -> ImageResponse:
        pass

    @abstractmethod
    async def crisp_upscale(self, args: CrispUpscaleArgs) -> ImageResponse:
        pass

    @abstractmethod
    async def creative_upscale(self, args: CreativeUpscaleArgs) -> ImageResponse:
        pass

    @abstractmethod
    async def create_style(self, args: CreateStyleArgs) -> StyleResponse:
        pass

    @abstractmethod
    async def get_user_info(self) -> UserInfoResponse:
        pass

    async def close(self) -> None:
        pass
