from recraft_mcp.tools import TOOLS, TOOLS_BY_NAME, list_tool_definitions

EXPECTED_TOOLS = [
    "generate_image",
    "image_to_image",
    "inpaint_image",
    "replace_background",
    "vectorize_image",
    "remove_background",
    "crisp_upscale",
    "creative_upscale",
    "create_style",
    "get_user_info",
    "save_image_to_disk",
]


def test_tool_names_and_order():
    assert [tool.name for tool in TOOLS] == EXPECTED_TOOLS
    assert set(TOOLS_BY_NAME) == set(EXPECTED_TOOLS)


def test_definitions_are_object_schemas():
    for definition in list_tool_definitions():
        assert definition["description"]
        assert definition["inputSchema"]["type"] == "object"
        assert "properties" in definition["inputSchema"]


def test_get_user_info_takes_no_arguments():
    schema = TOOLS_BY_NAME["get_user_info"].input_schema
    assert schema["properties"] == {}
    assert "additionalProperties" not in schema


def test_save_image_to_disk_requires_a_target():
    schema = TOOLS_BY_NAME["save_image_to_disk"].input_schema
    assert set(schema["required"]) == {"output_path", "filename"}
    assert schema["properties"]["output_path"]["pattern"] == "^/"


def test_create_style_requires_files():
    schema = TOOLS_BY_NAME["create_style"].input_schema
    assert schema["properties"]["files"]["minItems"] == 1
