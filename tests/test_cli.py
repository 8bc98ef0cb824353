"""Tests for the command-line interface."""

import pytest
from PIL import Image

from islandgen.cli import main


class TestCli:
    """Tests for islandgen main()."""

    def test_generates_preview(self, tmp_path) -> None:
        path = tmp_path / "island.png"
        main(["--resolution", "16", "--seed", "3", "--preview", str(path)])
        with Image.open(path) as image:
            assert image.size == (16, 16)

    def test_shape_override(self, tmp_path) -> None:
        path = tmp_path / "donut.png"
        main(["--resolution", "16", "--shape", "donut", "--preview", str(path)])
        assert path.exists()

    def test_invalid_resolution_exits(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--resolution", "1"])
        assert exc_info.value.code == 1

    def test_missing_config_exits(self, tmp_path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "missing.toml")])
        assert exc_info.value.code == 1

    def test_config_directory_exits(self, tmp_path) -> None:
        """Unreadable config paths exit cleanly instead of raising."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path)])
        assert exc_info.value.code == 1

    def test_config_with_unknown_kind(self, tmp_path) -> None:
        """Unknown shape kinds in a config file fall back to a circle."""
        config_path = tmp_path / "island.toml"
        config_path.write_text('resolution = 12\n\n[shape]\nkind = "hexagon"\nradius = 0.8\n')
        preview_path = tmp_path / "island.png"
        main(["--config", str(config_path), "--preview", str(preview_path)])
        assert preview_path.exists()
