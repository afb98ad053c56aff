"""
Tests for configuration and colour palette.
"""

import pytest
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from phantomas_viewer.common.config import Config, GeometryConfig, MeshConstraints, RefreshPolicy
from phantomas_viewer.common.palette import PaletteColors, COLORS, hex_to_rgba


class TestConfig:

    def test_default_values(self):
        config = Config()

        assert config.geometry.skeleton_segment_factor == 1.5
        assert config.geometry.tube_axial_segments == 256
        assert config.geometry.tube_radial_segments == 64
        assert config.geometry.region_width_segments == 128
        assert config.geometry.marker_width_segments == 32
        assert config.geometry.default_tube_radius == 0.5
        assert config.geometry.skeleton_refresh_policy is RefreshPolicy.FIXED
        assert config.use_constraints is False

    def test_save_and_load(self, tmp_path):
        config = Config(
            geometry=GeometryConfig(skeleton_refresh_policy=RefreshPolicy.RESAMPLE, tube_axial_segments=64),
            use_constraints=True,
            color_seed=7
        )
        path = tmp_path / "config.json"
        config.save(path)

        loaded = Config.from_json(path)
        assert loaded.geometry.skeleton_refresh_policy is RefreshPolicy.RESAMPLE
        assert loaded.geometry.tube_axial_segments == 64
        assert loaded.use_constraints is True
        assert loaded.color_seed == 7
        assert loaded.constraints == MeshConstraints()

    def test_round_to_precision(self):
        assert Config(precision=1).round_to_precision(1.26) == 1.3
        assert Config(precision=2).round_to_precision("3.14159") == 3.14


class TestMeshConstraints:

    def test_per_mesh_caps(self):
        constraints = MeshConstraints()
        # min(256, 128, 1440 // 20)
        assert constraints.per_mesh("axial", 256, 20) == 72
        # min(64, 32, 480 // 2)
        assert constraints.per_mesh("radial", 64, 2) == 32
        assert constraints.per_mesh("line", 10, 1) == 10

    def test_minimum(self):
        constraints = MeshConstraints()
        assert constraints.per_mesh("isotropic_region", 128, 10000, minimum=3) == 3

    def test_no_items(self):
        assert MeshConstraints().per_mesh("axial", 256, 0) == 128


class TestPalette:

    def test_palette_size(self):
        assert len(COLORS) == 40

    def test_seeded_sequence(self):
        a = PaletteColors(seed=11)
        b = PaletteColors(seed=11)
        assert [a.next() for _ in range(10)] == [b.next() for _ in range(10)]

    def test_custom_palette(self):
        colors = PaletteColors(seed=2, palette=[0x123456])
        assert {colors.next() for _ in range(5)} == {0x123456}

    def test_empty_palette(self):
        with pytest.raises(ValueError):
            PaletteColors(palette=[])

    def test_hex_to_rgba(self):
        assert hex_to_rgba(0x1533AD) == (0x15, 0x33, 0xAD, 255)
        assert hex_to_rgba(0xFFFFFF, alpha=0.0) == (255, 255, 255, 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
