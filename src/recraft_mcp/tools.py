from dataclasses import dataclass
from typing import Any, Dict, List, Type

from pydantic import BaseModel

from recraft_mcp.models import (
    CreateStyleArgs,
    CreativeUpscaleArgs,
    CrispUpscaleArgs,
    GenerateImageArgs,
    GetUserInfoArgs,
    ImageToImageArgs,
    InpaintImageArgs,
    RemoveBackgroundArgs,
    ReplaceBackgroundArgs,
    SaveImageToDiskArgs,
    VectorizeImageArgs,
)

Json = Dict[str, Any]


@dataclass(frozen=True)
class ToolDef:
    name: str
    description: str
    args_model: Type[BaseModel]
    error_prefix: str = "Validation error"

    @property
    def input_schema(self) -> Json:
        # Generated from the same model the dispatcher validates with.
        return self.args_model.model_json_schema()

    def to_json(self) -> Json:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


TOOLS: List[ToolDef] = [
    ToolDef(
        name="generate_image",
        description="Generate an image from a text prompt with optional saving to disk",
        args_model=GenerateImageArgs,
        error_prefix="Invalid image generation parameters",
    ),
    ToolDef(
        name="image_to_image",
        description="Transform an existing image based on a text prompt",
        args_model=ImageToImageArgs,
        error_prefix="Invalid image-to-image parameters",
    ),
    ToolDef(
        name="inpaint_image",
        description="Inpaint (edit) parts of an image using a mask",
        args_model=InpaintImageArgs,
        error_prefix="Invalid inpainting parameters",
    ),
    ToolDef(
        name="replace_background",
        description="Replace the background of an image",
        args_model=ReplaceBackgroundArgs,
        error_prefix="Invalid background replacement parameters",
    ),
    ToolDef(
        name="vectorize_image",
        description="Vectorize an image to SVG format",
        args_model=VectorizeImageArgs,
        error_prefix="Invalid vectorization parameters",
    ),
    ToolDef(
        name="remove_background",
        description="Remove the background from an image",
        args_model=RemoveBackgroundArgs,
        error_prefix="Invalid background removal parameters",
    ),
    ToolDef(
        name="crisp_upscale",
        description="Enhance image resolution with crisp upscale",
        args_model=CrispUpscaleArgs,
        error_prefix="Invalid crisp upscale parameters",
    ),
    ToolDef(
        name="creative_upscale",
        description="Enhance image with creative upscale for improved details",
        args_model=CreativeUpscaleArgs,
        error_prefix="Invalid creative upscale parameters",
    ),
    ToolDef(
        name="create_style",
        description="Create a style by uploading reference images",
        args_model=CreateStyleArgs,
        error_prefix="Invalid style creation parameters",
    ),
    ToolDef(
        name="get_user_info",
        description="Get information about the current user",
        args_model=GetUserInfoArgs,
        error_prefix="Invalid user info parameters",
    ),
    ToolDef(
        name="save_image_to_disk",
        description="Save an image response to disk in a specified folder",
        args_model=SaveImageToDiskArgs,
        error_prefix="Invalid save image parameters",
    ),
]

TOOLS_BY_NAME: Dict[str, ToolDef] = {tool.name: tool for tool in TOOLS}


def list_tool_definitions() -> List[Json]:
    return [tool.to_json() for tool in TOOLS]
