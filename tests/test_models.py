import io
import json
from pathlib import Path

import pytest

from recraft_mcp.errors import ValidationError
from recraft_mcp.models import (
    BytesSource,
    FileSource,
    GenerateImageArgs,
    ImageToImageArgs,
    ImagesResponse,
    PathSource,
    UserInfoResponse,
    VectorizeImageArgs,
    parse_numeric_string,
)
from recraft_mcp.validation import validate_schema

from .conftest import PNG_B64, PNG_BYTES


class TestImageSource:
    def test_bytes_become_bytes_source(self):
        args = validate_schema(VectorizeImageArgs, {"file": PNG_BYTES})
        assert isinstance(args.file, BytesSource)
        assert args.file.data == PNG_BYTES

    def test_string_becomes_path_source(self):
        args = validate_schema(VectorizeImageArgs, {"file": "/images/cat.png"})
        assert args.file == PathSource(path="/images/cat.png")

    def test_pathlib_path_becomes_path_source(self):
        args = validate_schema(VectorizeImageArgs, {"file": Path("/images/cat.png")})
        assert args.file.path == "/images/cat.png"

    def test_file_like_becomes_file_source(self):
        handle = io.BytesIO(PNG_BYTES)
        args = validate_schema(VectorizeImageArgs, {"file": handle})
        assert isinstance(args.file, FileSource)
        assert args.file.handle is handle

    def test_tagged_bytes_accept_base64_text(self):
        args = validate_schema(
            VectorizeImageArgs, {"file": {"kind": "bytes", "data": f"data:image/png;base64,{PNG_B64}"}}
        )
        assert args.file.data == PNG_BYTES

    def test_other_types_are_rejected(self):
        with pytest.raises(ValidationError, match="file: Must be bytes, a file-like object, or a string path"):
            validate_schema(VectorizeImageArgs, {"file": 42})

    def test_empty_path_is_rejected(self):
        with pytest.raises(ValidationError, match="Image path cannot be empty"):
            validate_schema(VectorizeImageArgs, {"file": ""})


def test_parse_numeric_string():
    assert parse_numeric_string("3") == 3
    assert parse_numeric_string(" 0.25 ") == 0.25
    assert parse_numeric_string(4) == 4
    assert parse_numeric_string(None) is None


def test_upstream_payload_drops_local_and_empty_fields():
    args = validate_schema(
        GenerateImageArgs,
        {
            "prompt": "cat",
            "n": "2",
            "style": "digital_illustration",
            "controls": {"colors": [{"rgb": [1, 2, 3]}]},
            "save_to_disk": True,
            "output_path": "/tmp/out",
            "filename": "cat",
        },
    )
    assert args.upstream_payload() == {
        "prompt": "cat",
        "n": 2,
        "style": "digital_illustration",
        "controls": {"colors": [{"rgb": [1, 2, 3]}]},
    }


def test_text_layout_passes_through():
    layout = [{"text": "Hi", "bbox": [[0.1, 0.1], [0.5, 0.1], [0.5, 0.3], [0.1, 0.3]]}]
    args = validate_schema(GenerateImageArgs, {"prompt": "cat", "text_layout": layout})
    assert args.upstream_payload()["text_layout"] == layout


class TestAdvertisedSchema:
    def test_numeric_fields_advertise_string_form(self):
        schema = json.dumps(GenerateImageArgs.model_json_schema()["properties"]["n"])
        assert '"integer"' in schema
        assert '"pattern"' in schema

    def test_required_fields(self):
        assert GenerateImageArgs.model_json_schema()["required"] == ["prompt"]
        assert set(ImageToImageArgs.model_json_schema()["required"]) == {"image", "prompt", "strength"}

    def test_style_enum_is_advertised(self):
        schema = json.dumps(GenerateImageArgs.model_json_schema()["properties"]["style"])
        assert '"logo_raster"' in schema

    def test_image_accepts_a_path_string(self):
        image = ImageToImageArgs.model_json_schema()["properties"]["image"]
        assert image["anyOf"][0]["type"] == "string"


def test_responses_tolerate_missing_fields():
    assert ImagesResponse.model_validate({}).data == []
    info = UserInfoResponse.model_validate({"name": "A", "email": "a@b.com", "credits": 10})
    assert info.id is None
    assert info.credits == 10
