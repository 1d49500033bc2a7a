import base64
import binascii
import os
import re
from typing import Any, ClassVar, Dict, FrozenSet, List, Literal, Optional, Tuple, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated

from recraft_mcp.styles import ALL_SUBSTYLES_V3, IMAGE_SIZES, MODELS, RESPONSE_FORMATS, STYLES

NUMERIC_PATTERN = r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?\s*$"
_NUMERIC_RE = re.compile(NUMERIC_PATTERN)
DATA_URI_RE = re.compile(r"^data:image/([a-zA-Z0-9.+-]+);base64,")


class _AdvertiseNumericString:
    """Advertise the numeric-string form of a number field next to the number itself."""

    def __get_pydantic_json_schema__(self, core_schema, handler):
        json_schema = handler(core_schema)
        return {"anyOf": [json_schema, {"type": "string", "pattern": NUMERIC_PATTERN}]}


class _AdvertiseConstraints:
    """Merge JSON schema keywords enforced by a custom validator."""

    def __init__(self, **keywords: Any):
        self.keywords = keywords

    def __get_pydantic_json_schema__(self, core_schema, handler):
        json_schema = handler(core_schema)
        json_schema.update(self.keywords)
        return json_schema


def parse_numeric_string(value: Any) -> Any:
    """Turn ``"3"`` into ``3`` and ``"0.5"`` into ``0.5``; other types pass through."""
    if not isinstance(value, str):
        return value
    if not _NUMERIC_RE.match(value):
        raise PydanticCustomError(
            "number_parsing",
            "Expected a number or numeric string, received '{value}'",
            {"value": value},
        )
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def _non_empty(message: str):
    def check(value: str) -> str:
        if value == "":
            raise PydanticCustomError("string_empty", message)
        return value

    return check


def _absolute_path(value: str) -> str:
    if value == "":
        raise PydanticCustomError("string_empty", "File path cannot be empty")
    if not value.startswith("/"):
        raise PydanticCustomError(
            "path_not_absolute", "File path must be absolute (start with '/')"
        )
    return value


ImageCount = Annotated[
    int,
    Field(ge=1, le=6),
    BeforeValidator(parse_numeric_string),
    _AdvertiseNumericString(),
]
Strength = Annotated[
    float,
    Field(ge=0.0, le=1.0),
    BeforeValidator(parse_numeric_string),
    _AdvertiseNumericString(),
]
Prompt = Annotated[
    str, AfterValidator(_non_empty("Prompt cannot be empty")), _AdvertiseConstraints(minLength=1)
]
StyleName = Annotated[
    str,
    AfterValidator(_non_empty("Style name cannot be empty")),
    _AdvertiseConstraints(minLength=1),
]
Filename = Annotated[
    str,
    AfterValidator(_non_empty("Filename cannot be empty")),
    _AdvertiseConstraints(minLength=1),
]
AbsolutePath = Annotated[
    str, AfterValidator(_absolute_path), _AdvertiseConstraints(minLength=1, pattern="^/")
]

Model = Literal[MODELS]
ResponseFormat = Literal[RESPONSE_FORMATS]
Style = Literal[STYLES]
# Substyles are checked against the v3 vocabulary whatever model is requested.
Substyle = Literal[ALL_SUBSTYLES_V3]
ImageSize = Literal[IMAGE_SIZES]


class BytesSource(BaseModel):
    kind: Literal["bytes"] = "bytes"
    data: bytes = Field(description="Raw image bytes; base64 text when sent as JSON.")
    filename: str = "image.png"

    @field_validator("data", mode="before")
    @classmethod
    def _decode_base64_text(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        try:
            return base64.b64decode(DATA_URI_RE.sub("", value), validate=True)
        except (binascii.Error, ValueError):
            raise PydanticCustomError("base64_decode", "Image data is not valid base64")


class FileSource(BaseModel):
    kind: Literal["file"] = "file"
    handle: Any = Field(description="Object exposing read()")
    filename: str = "image.png"

    @field_validator("handle")
    @classmethod
    def _must_be_readable(cls, value: Any) -> Any:
        if not callable(getattr(value, "read", None)):
            raise PydanticCustomError("file_not_readable", "File source must provide read()")
        return value


class PathSource(BaseModel):
    kind: Literal["path"] = "path"
    path: Annotated[
        str,
        AfterValidator(_non_empty("Image path cannot be empty")),
        _AdvertiseConstraints(minLength=1),
    ]


def _tag_image_source(value: Any) -> Any:
    if isinstance(value, (BaseModel, dict)):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return {"kind": "bytes", "data": bytes(value)}
    if isinstance(value, str):
        return {"kind": "path", "path": value}
    if isinstance(value, os.PathLike):
        return {"kind": "path", "path": os.fspath(value)}
    if callable(getattr(value, "read", None)):
        name = os.path.basename(str(getattr(value, "name", "") or "")) or "image.png"
        return {"kind": "file", "handle": value, "filename": name}
    raise PydanticCustomError("image_source", "Must be bytes, a file-like object, or a string path")


class _AdvertiseImageSource:
    def __get_pydantic_json_schema__(self, core_schema, handler):
        variants = handler(core_schema)
        return {
            "anyOf": [
                {"type": "string", "minLength": 1, "description": "Path to a local image file"},
                variants,
            ]
        }


ImageSource = Annotated[
    Union[BytesSource, FileSource, PathSource],
    Field(discriminator="kind"),
    BeforeValidator(_tag_image_source),
    _AdvertiseImageSource(),
]


class Color(BaseModel):
    rgb: Tuple[
        Annotated[int, Field(ge=0, le=255)],
        Annotated[int, Field(ge=0, le=255)],
        Annotated[int, Field(ge=0, le=255)],
    ]


class Controls(BaseModel):
    artistic_level: Optional[Annotated[int, Field(ge=0, le=5)]] = None
    colors: Optional[List[Color]] = None
    background_color: Optional[Color] = None
    no_text: Optional[bool] = None


Point = Tuple[float, float]


class TextLayoutElement(BaseModel):
    text: str
    bbox: Tuple[Point, Point, Point, Point]


class RecraftBaseArgs(BaseModel):
    model: Optional[Model] = None
    response_format: Optional[ResponseFormat] = None


class GenerateImageArgs(RecraftBaseArgs):
    prompt: Prompt
    n: Optional[ImageCount] = None
    style_id: Optional[str] = None
    style: Optional[Style] = None
    substyle: Optional[Substyle] = None
    size: Optional[ImageSize] = None
    negative_prompt: Optional[str] = None
    controls: Optional[Controls] = None
    text_layout: Optional[List[TextLayoutElement]] = None
    output_path: Optional[AbsolutePath] = Field(
        None, description="Absolute directory to save the first image into."
    )
    filename: Optional[Filename] = Field(
        None, description="File name without extension for the saved image."
    )
    save_to_disk: Optional[bool] = Field(
        None, description="Also save the first image; requires output_path and filename."
    )

    # Fields consumed locally and never sent to the API.
    LOCAL_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"save_to_disk", "output_path", "filename"})

    @field_validator("save_to_disk")
    @classmethod
    def _save_target_required(cls, value: Optional[bool], info: ValidationInfo) -> Optional[bool]:
        if value and (info.data.get("output_path") is None or info.data.get("filename") is None):
            raise PydanticCustomError(
                "save_target_missing",
                "output_path and filename are required when save_to_disk is true",
            )
        return value

    def upstream_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, exclude=set(self.LOCAL_FIELDS))


class ImageToImageArgs(RecraftBaseArgs):
    image: ImageSource
    prompt: Prompt
    strength: Strength
    n: Optional[ImageCount] = None
    style_id: Optional[str] = None
    style: Optional[Style] = None
    substyle: Optional[Substyle] = None
    negative_prompt: Optional[str] = None
    controls: Optional[Controls] = None


class InpaintImageArgs(RecraftBaseArgs):
    image: ImageSource
    mask: ImageSource
    prompt: Prompt
    n: Optional[ImageCount] = None
    style_id: Optional[str] = None
    style: Optional[Style] = None
    substyle: Optional[Substyle] = None
    negative_prompt: Optional[str] = None


class ReplaceBackgroundArgs(RecraftBaseArgs):
    image: ImageSource
    prompt: Prompt
    n: Optional[ImageCount] = None
    style_id: Optional[str] = None
    style: Optional[Style] = None
    substyle: Optional[Substyle] = None
    negative_prompt: Optional[str] = None


class FileArgs(RecraftBaseArgs):
    file: ImageSource


class VectorizeImageArgs(FileArgs):
    pass


class RemoveBackgroundArgs(FileArgs):
    pass


class CrispUpscaleArgs(FileArgs):
    pass


class CreativeUpscaleArgs(FileArgs):
    pass


class CreateStyleArgs(BaseModel):
    style: StyleName
    files: Annotated[List[ImageSource], _AdvertiseConstraints(minItems=1)]

    @field_validator("files")
    @classmethod
    def _at_least_one(cls, value: List[Any]) -> List[Any]:
        if not value:
            raise PydanticCustomError("too_short", "At least one file is required")
        return value


class GetUserInfoArgs(BaseModel):
    pass


class SaveImageToDiskArgs(BaseModel):
    output_path: AbsolutePath = Field(..., description="Absolute directory to write into.")
    filename: Filename = Field(..., description="File name without extension.")
    image_url: Optional[HttpUrl] = None
    image_b64: Optional[str] = Field(
        None, description="Raw base64 or a data:image/<ext>;base64, URI."
    )

    @model_validator(mode="after")
    def _one_source_required(self) -> "SaveImageToDiskArgs":
        if self.image_url is None and self.image_b64 is None:
            raise PydanticCustomError(
                "image_source_missing",
                "Either image_url or image_b64 must be provided",
                {"field": "image_source"},
            )
        return self


class RecraftBaseResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_error: Optional[bool] = Field(None, alias="isError")
    error: Optional[str] = None


class ImageData(BaseModel):
    url: Optional[str] = None
    b64_json: Optional[str] = None


class ImagesResponse(RecraftBaseResponse):
    data: List[ImageData] = []


class ImageResponse(RecraftBaseResponse):
    image: Optional[ImageData] = None


class StyleResponse(RecraftBaseResponse):
    id: str


class UserInfoResponse(RecraftBaseResponse):
    id: Optional[str] = None
    name: str
    email: str
    credits: Union[int, float]


class TextSegment(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageSegment(BaseModel):
    type: Literal["image"] = "image"
    data: bytes
    mime_type: str = "image/png"


class ToolResult(BaseModel):
    content: List[Union[TextSegment, ImageSegment]]

    @classmethod
    def text(cls, text: str) -> "ToolResult":
        return cls(content=[TextSegment(text=text)])
