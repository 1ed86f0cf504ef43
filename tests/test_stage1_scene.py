"""Tests for the Stage 1 scene catalog."""
import pytest

from pipeline.stage1_scene import available_scenes, resolve


class TestResolve:
    @pytest.mark.parametrize("scene_id", ["default", "harrypotter", "zhenhuanchuan"])
    def test_presets_are_non_empty(self, scene_id):
        setting = resolve(scene_id)
        assert setting.background
        assert setting.description

    def test_default_scene(self):
        assert resolve("default").background == "现代日常生活"

    def test_named_preset(self):
        assert resolve("harrypotter").background == "哈利波特魔法世界"

    def test_case_and_whitespace_insensitive(self):
        assert resolve("  ZhenHuanChuan ") == resolve("zhenhuanchuan")

    def test_unknown_id_falls_back_to_default(self):
        assert resolve("narnia") == resolve("default")

    def test_none_falls_back_to_default(self):
        assert resolve(None) == resolve("default")


class TestCustomScene:
    def test_custom_text_builds_setting(self):
        setting = resolve("custom", "星际迷航")
        assert setting.background == "星际迷航"
        assert setting.description == "在星际迷航中展现该单词的含义"

    def test_custom_text_is_trimmed(self):
        assert resolve("custom", "  西游记 ").background == "西游记"

    @pytest.mark.parametrize("text", [None, "", "   \n"])
    def test_blank_custom_falls_back_to_default(self, text):
        assert resolve("custom", text) == resolve("default")

    def test_custom_text_ignored_for_presets(self):
        assert resolve("harrypotter", "星际迷航") == resolve("harrypotter")


def test_every_listed_scene_resolves_to_valid_setting():
    for scene_id in available_scenes():
        setting = resolve(scene_id, "自定义场景")
        assert setting.background and setting.description


def test_available_scenes_ends_with_custom():
    scenes = available_scenes()
    assert scenes[0] == "default"
    assert scenes[-1] == "custom"
