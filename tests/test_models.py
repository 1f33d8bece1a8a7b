"""数据模型与配置测试。"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from pixelpress.config import get_config, reset_config
from pixelpress.core import state_machine
from pixelpress.models import (
    CompressionSettings,
    CompressionStatus,
    EncodedBlob,
    EncodeOutcome,
    ImageFormats,
    ImageItem,
    OutputFormat,
    RunSummary,
    get_pillow_format,
    is_image_mime,
    item_to_view,
    normalize_mime,
    resolve_target_mime,
    to_pillow_quality,
)


class TestOutputFormat:
    """输出格式解析测试"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("original", OutputFormat.ORIGINAL),
            ("ORIGIN", OutputFormat.ORIGINAL),
            ("jpeg", OutputFormat.JPEG),
            ("JPG", OutputFormat.JPEG),
            ("image/jpeg", OutputFormat.JPEG),
            ("image/jpg", OutputFormat.JPEG),
            (" png ", OutputFormat.PNG),
            ("image/webp", OutputFormat.WEBP),
            (OutputFormat.WEBP, OutputFormat.WEBP),
        ],
    )
    def test_parse(self, value, expected):
        assert OutputFormat.parse(value) == expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            OutputFormat.parse("image/svg+xml")

    def test_extension(self):
        assert OutputFormat.JPEG.extension == "jpg"
        assert OutputFormat.PNG.extension == "png"
        assert OutputFormat.WEBP.extension == "webp"
        assert OutputFormat.ORIGINAL.extension is None


class TestCompressionSettings:
    """压缩设置测试"""

    def test_defaults(self):
        settings = CompressionSettings()
        assert settings.quality == 0.8
        assert settings.output_format == OutputFormat.ORIGINAL
        assert settings.max_width is None
        assert settings.keep_original_name is False

    @pytest.mark.parametrize("quality", [0, -0.1, 1.01, 80])
    def test_invalid_quality(self, quality):
        with pytest.raises(PydanticValidationError):
            CompressionSettings(quality=quality)

    def test_quality_upper_bound_inclusive(self):
        assert CompressionSettings(quality=1.0).pillow_quality == 100

    @pytest.mark.parametrize("max_width", [0, -10])
    def test_invalid_max_width(self, max_width):
        with pytest.raises(PydanticValidationError):
            CompressionSettings(max_width=max_width)

    def test_output_format_from_string(self):
        settings = CompressionSettings(output_format="webp")
        assert settings.output_format == OutputFormat.WEBP

    def test_invalid_output_format(self):
        with pytest.raises(PydanticValidationError):
            CompressionSettings(output_format="tiff-ish")

    def test_frozen(self):
        settings = CompressionSettings()
        with pytest.raises(PydanticValidationError):
            settings.quality = 0.5

    def test_snapshot_is_equal_copy(self):
        settings = CompressionSettings(quality=0.6, max_width=800)
        snapshot = settings.snapshot()
        assert snapshot == settings

    def test_resolve_mime_type(self):
        assert CompressionSettings().resolve_mime_type("image/jpg") == "image/jpeg"
        settings = CompressionSettings(output_format=OutputFormat.PNG)
        assert settings.resolve_mime_type("image/jpeg") == "image/png"


class TestQualityMapping:
    """质量换算测试"""

    @pytest.mark.parametrize(
        "quality,expected",
        [(0.8, 80), (0.75, 75), (1.0, 100), (0.001, 1), (1.5, 100), (0.126, 13)],
    )
    def test_to_pillow_quality(self, quality, expected):
        assert to_pillow_quality(quality) == expected


class TestMimeHelpers:
    """MIME 工具测试"""

    def test_normalize_aliases(self):
        assert normalize_mime("image/jpg") == "image/jpeg"
        assert normalize_mime("IMAGE/PNG") == "image/png"
        assert normalize_mime("image/x-png") == "image/png"

    def test_is_image_mime(self):
        assert is_image_mime("image/png")
        assert is_image_mime("image/svg+xml")
        assert not is_image_mime("text/plain")
        assert not is_image_mime(None)
        assert not is_image_mime("")

    def test_pillow_format_lookup(self):
        assert get_pillow_format("image/jpeg") == "JPEG"
        assert get_pillow_format("image/webp") == "WEBP"
        assert get_pillow_format("image/jpg") == "JPEG"
        assert get_pillow_format("image/svg+xml") is None

    def test_mime_from_format(self):
        assert ImageFormats.get_mime_from_format("PNG") == "image/png"
        assert ImageFormats.get_mime_from_format("JPEG") == "image/jpeg"

    def test_resolve_target_mime(self):
        assert resolve_target_mime("image/gif", OutputFormat.ORIGINAL) == "image/gif"
        assert resolve_target_mime("image/gif", OutputFormat.WEBP) == "image/webp"


class TestImageItem:
    """图片条目展示测试"""

    def _completed(self, item, size: int):
        return state_machine.mark_completed(
            state_machine.begin_processing(item),
            EncodedBlob(
                data=b"x" * size, mime_type="image/png", output_format=OutputFormat.PNG
            ),
        )

    def test_new_item(self, make_item):
        item = make_item(name="a.png", data=b"\x89PNG-like" * 10)
        assert item.status == CompressionStatus.IDLE
        assert item.original_size == 90
        assert item.compressed_size == 0
        assert item.get_savings_percent() == 0
        assert "等待压缩" in item.get_summary()

    def test_unique_ids(self, make_item):
        ids = {make_item(data=b"same").id for _ in range(50)}
        assert len(ids) == 50

    def test_savings(self, make_item):
        completed = self._completed(make_item(data=b"y" * 2000), 500)
        assert completed.get_size_saved() == 1500
        assert completed.get_savings_percent() == 75
        assert "(-75%)" in completed.get_summary()

    def test_output_larger_than_input(self, make_item):
        completed = self._completed(make_item(data=b"y" * 100), 150)
        assert completed.get_size_saved() == -50
        assert completed.get_savings_percent() == -50
        assert "(+50%)" in completed.get_summary()

    def test_format_size(self):
        assert ImageItem.format_size(2048) == "2.0 KiB"

    def test_item_view(self, make_item):
        view = item_to_view(make_item(name="v.png", data=b"abc"))
        assert view["name"] == "v.png"
        assert view["status"] == "IDLE"
        assert view["original_size"] == 3
        assert view["error"] is None


class TestRunSummary:
    """批次统计测试"""

    def test_empty_summary(self):
        summary = RunSummary()
        assert summary.is_noop
        assert summary.get_summary() == "没有需要处理的图片"

    def test_counts(self):
        blob = EncodedBlob(
            data=b"1234", mime_type="image/png", output_format=OutputFormat.PNG
        )
        summary = RunSummary(
            selected_ids=["a", "b"],
            outcomes=[
                EncodeOutcome(item_id="a", status=CompressionStatus.COMPLETED, result=blob),
                EncodeOutcome(item_id="b", status=CompressionStatus.ERROR, error="坏图"),
            ],
        )
        assert summary.get_completed_ids() == ["a"]
        assert summary.get_failed() == {"b": "坏图"}
        assert summary.get_total_compressed_size() == 4
        assert "1/2" in summary.get_summary()

    def test_dropped_outcomes_not_counted(self):
        """回写时被丢弃的结果不计入完成和失败"""
        blob = EncodedBlob(
            data=b"1234", mime_type="image/png", output_format=OutputFormat.PNG
        )
        summary = RunSummary(
            selected_ids=["a", "b", "c"],
            outcomes=[
                EncodeOutcome(item_id="a", status=CompressionStatus.COMPLETED, result=blob),
                EncodeOutcome(item_id="b", status=CompressionStatus.COMPLETED, result=blob),
                EncodeOutcome(item_id="c", status=CompressionStatus.ERROR, error="坏图"),
            ],
            dropped_ids=["b", "c"],
        )
        assert summary.get_completed_ids() == ["a"]
        assert summary.get_failed() == {}
        assert summary.get_total_compressed_size() == 4
        assert "1/3" in summary.get_summary()
        assert "丢弃 2 张" in summary.get_summary()


class TestAppConfig:
    """配置测试"""

    def test_defaults(self):
        settings = get_config().default_settings()
        assert settings == CompressionSettings()
        assert get_config().processing.EXECUTOR_TYPE == "thread"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PIXELPRESS_QUALITY", "0.6")
        monkeypatch.setenv("PIXELPRESS_OUTPUT_FORMAT", "webp")
        monkeypatch.setenv("PIXELPRESS_MAX_WIDTH", "1280")
        monkeypatch.setenv("PIXELPRESS_KEEP_ORIGINAL_NAME", "true")
        monkeypatch.setenv("PIXELPRESS_MAX_CONCURRENCY", "2")
        monkeypatch.setenv("PIXELPRESS_LOG_LEVEL", "debug")
        reset_config()

        app_config = get_config()
        settings = app_config.default_settings()
        assert settings.quality == 0.6
        assert settings.output_format == OutputFormat.WEBP
        assert settings.max_width == 1280
        assert settings.keep_original_name is True
        assert app_config.processing.MAX_CONCURRENCY == 2
        assert app_config.logging.LOG_LEVEL == "DEBUG"

    def test_zero_concurrency_means_unlimited(self, monkeypatch):
        monkeypatch.setenv("PIXELPRESS_MAX_CONCURRENCY", "0")
        reset_config()

        assert get_config().processing.MAX_CONCURRENCY is None
