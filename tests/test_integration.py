"""集成测试。

通过 MCP 工具函数驱动全局会话，覆盖添加、设置、压缩和导出。
"""

import asyncio
from pathlib import Path

import pytest


@pytest.fixture
def server():
    """MCP 服务器模块，测试前后清空全局会话"""
    from pixelpress import mcp_server

    mcp_server.session.clear()
    mcp_server.session.update_settings(
        quality=0.8, output_format="original", max_width=None, keep_original_name=False
    )
    yield mcp_server
    mcp_server.session.clear()


@pytest.fixture
def sample_paths(temp_dir: Path, make_image) -> list[str]:
    """写入磁盘的测试图片"""
    files = {
        "photo.png": make_image("PNG", (600, 300)),
        "scan.jpg": make_image("JPEG", (300, 300)),
        "notes.txt": b"plain text",
    }
    for name, data in files.items():
        (temp_dir / name).write_bytes(data)
    return [str(temp_dir / name) for name in files]


class TestMCPServer:
    """MCP服务器功能测试"""

    def test_mcp_server_imports(self):
        """测试MCP服务器模块导入"""
        from pixelpress.mcp_server import mcp

        assert mcp is not None

    def test_mcp_tools(self):
        """测试 MCP 工具注册"""
        from pixelpress import mcp_server

        for name in (
            "add_images",
            "list_images",
            "update_settings",
            "compress_images",
            "remove_image",
            "clear_images",
            "export_images",
        ):
            tool = getattr(mcp_server, name)
            assert hasattr(tool, "name")
            assert tool.name == name


class TestEndToEnd:
    """端到端核心测试"""

    def test_complete_workflow(self, server, sample_paths, temp_dir):
        """添加 → 设置 → 压缩 → 导出"""
        added = server.add_images.fn(sample_paths)
        assert added["success"]
        assert [item["name"] for item in added["added"]] == ["photo.png", "scan.jpg"]

        settings = server.update_settings.fn(output_format="webp", max_width=300)
        assert settings["success"]
        assert settings["settings"]["output_format"] == "image/webp"

        result = asyncio.run(server.compress_images.fn())
        assert result["success"]
        assert len(result["completed"]) == 2
        assert result["stats"]["all_completed"]

        output_dir = temp_dir / "out"
        exported = server.export_images.fn(str(output_dir))
        assert exported["success"]
        assert sorted(Path(p).name for p in exported["files"]) == [
            "photo-min.webp",
            "scan-min.webp",
        ]

    def test_invalid_settings(self, server):
        result = server.update_settings.fn(quality=2.0)

        assert not result["success"]
        assert result["error_type"] == "validation"
        assert server.session.settings.quality == 0.8

    def test_clear_max_width(self, server):
        server.update_settings.fn(max_width=500)
        result = server.update_settings.fn(clear_max_width=True)

        assert result["settings"]["max_width"] is None

    def test_remove_unknown_image(self, server):
        result = server.remove_image.fn("missing")

        assert not result["success"]
        assert "missing" in result["error"]

    def test_list_and_clear(self, server, sample_paths):
        server.add_images.fn(sample_paths)

        listed = server.list_images.fn()
        assert listed["stats"]["total"] == 2
        assert {item["status"] for item in listed["items"]} == {"IDLE"}

        item_id = listed["items"][0]["id"]
        assert server.remove_image.fn(item_id)["success"]
        assert server.clear_images.fn()["removed"] == 1

    def test_force_recompress(self, server, sample_paths):
        server.add_images.fn(sample_paths[:1])
        asyncio.run(server.compress_images.fn())
        item_id = server.list_images.fn()["items"][0]["id"]

        noop = asyncio.run(server.compress_images.fn())
        assert noop["completed"] == []

        server.update_settings.fn(output_format="jpeg")
        forced = asyncio.run(server.compress_images.fn([item_id]))
        assert forced["completed"] == [item_id]
        assert server.session.get(item_id).result.mime_type == "image/jpeg"

    def test_export_selected_images(self, server, sample_paths, temp_dir):
        """只导出指定的图片"""
        added = server.add_images.fn(sample_paths)["added"]
        asyncio.run(server.compress_images.fn())
        scan_id = added[1]["id"]

        output_dir = temp_dir / "single"
        exported = server.export_images.fn(str(output_dir), item_ids=[scan_id])
        assert exported["success"]
        assert [Path(p).name for p in exported["files"]] == ["scan-min.jpg"]

        missing = server.export_images.fn(str(output_dir), item_ids=["missing"])
        assert not missing["success"]
        assert missing["details"]["item_ids"] == ["missing"]
