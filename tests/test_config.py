import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from config import YamlConfig


def test_missing_file_loads_empty(tmp_path):
    assert YamlConfig(str(tmp_path / "none.yaml")).load() == {}


def test_save_and_load(tmp_path):
    config = YamlConfig(str(tmp_path / "settings.yaml"))
    config.save({"daily_set_goal": 7, "theme_override": "dark"})
    assert config.load() == {"daily_set_goal": 7, "theme_override": "dark"}


def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        YamlConfig(str(path)).load()
