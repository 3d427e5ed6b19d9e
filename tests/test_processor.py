"""Tests for the processing pipeline and the ImageProcessor request runner."""

import numpy as np
import pytest
from PIL import Image

from conftest import ScriptedRng, make_buffer
from image_processing import ImageProcessor, process_image
from image_processing.pixelation import pixelate
from image_processing.quantization import quantize_colors
from models import EffectSettings, ImageBuffer, RenderRequest


def rgb_set(buffer):
    return {tuple(int(v) for v in px) for px in buffer.data.reshape(-1, 4)[:, :3]}


class TestProcessImage:
    def test_no_effects_returns_identical_copy(self, random_buffer):
        result = process_image(random_buffer, False, 8, False, 8)

        assert result == random_buffer
        assert result is not random_buffer
        assert result.data is not random_buffer.data

    @pytest.mark.parametrize(
        "pixelate_on, quantize_on", [(True, False), (False, True), (True, True)]
    )
    def test_source_never_mutated(self, random_buffer, rng, pixelate_on, quantize_on):
        before = random_buffer.to_bytes()

        process_image(random_buffer, pixelate_on, 4, quantize_on, 6, rng=rng)

        assert random_buffer.to_bytes() == before

    def test_quantize_runs_before_pixelate(self, random_buffer):
        result = process_image(
            random_buffer, True, 6, True, 4, rng=np.random.default_rng(5)
        )

        expected = random_buffer.copy()
        quantize_colors(expected, 4, rng=np.random.default_rng(5))
        pixelate(expected, 6)

        assert result == expected

    def test_quantized_pixels_stay_in_palette_after_pixelation(self, random_buffer, rng):
        result = process_image(random_buffer, True, 3, True, 5, rng=rng)
        assert len(rgb_set(result)) <= 5

    def test_same_seed_same_output(self, random_buffer):
        a = process_image(random_buffer, True, 4, True, 8, rng=np.random.default_rng(9))
        b = process_image(random_buffer, True, 4, True, 8, rng=np.random.default_rng(9))
        assert a == b

    def test_scenario_two_tone_strip(self):
        source = make_buffer(
            [(0, 0, 0), (10, 0, 0), (200, 200, 200), (210, 200, 200)], 4, 1
        )
        result = process_image(source, False, 1, True, 2, rng=ScriptedRng([0, 3]))

        assert rgb_set(result) == {(5, 0, 0), (205, 200, 200)}

    def test_scenario_flat_block(self, rng):
        data = rng.integers(0, 256, size=64, dtype=np.uint8)
        source = ImageBuffer(4, 4, data)

        result = process_image(source, True, 4, False, 8)

        center = tuple(source.rgba()[2, 2])
        assert {tuple(px) for px in result.data.reshape(-1, 4)} == {center}

    @pytest.mark.parametrize("palette_size", [1, 2, 64, 256])
    def test_scenario_single_pixel(self, palette_size, rng):
        source = make_buffer([(12, 34, 56, 78)], 1, 1)

        result = process_image(source, True, 8, True, palette_size, rng=rng)

        assert (result.width, result.height) == (1, 1)
        assert list(result.data) == [12, 34, 56, 78]

    def test_single_pixel_palette_collapses_to_one_color(self):
        source = make_buffer([(12, 34, 56)], 1, 1)
        request = RenderRequest(1, source, do_quantize=True, palette_size=16, seed=0)

        response = ImageProcessor().handle_request(request)

        assert set(response.palette) == {(12, 34, 56)}

    def test_empty_image_with_quantization(self):
        result = process_image(ImageBuffer(0, 0), True, 4, True, 8)
        assert result.pixel_count == 0


class TestImageProcessor:
    def test_handle_request_reports_palette(self, random_buffer):
        request = RenderRequest(
            sequence=3,
            buffer=random_buffer,
            do_quantize=True,
            palette_size=4,
            seed=11,
        )
        response = ImageProcessor().handle_request(request)

        assert response.sequence == 3
        assert (response.width, response.height) == (37, 23)
        assert len(response.palette) == 4
        assert rgb_set(response.buffer) <= set(response.palette)
        assert response.elapsed >= 0.0

    def test_seeded_requests_are_reproducible(self, random_buffer):
        settings = EffectSettings(palette_size=6, block_size=3, seed=21)
        processor = ImageProcessor(settings)

        first = processor.process(random_buffer)
        second = processor.process(random_buffer)

        assert first.buffer == second.buffer
        assert first.palette == second.palette

    def test_no_palette_without_quantization(self, random_buffer):
        settings = EffectSettings(do_quantize=False, do_pixelate=True, block_size=4)
        response = ImageProcessor(settings).process(random_buffer)

        assert response.palette == []

    def test_response_bytes_match_transport_shape(self, random_buffer):
        request = RenderRequest.from_bytes(
            1, 37, 23, random_buffer.to_bytes(), False, 2, False, 2
        )
        response = ImageProcessor().handle_request(request)

        assert response.to_bytes() == random_buffer.to_bytes()
        assert len(response.to_bytes()) == 37 * 23 * 4

    def test_load_image(self, tmp_path):
        path = tmp_path / "tiny.png"
        Image.new("RGB", (5, 3), (1, 2, 3)).save(path)

        buffer = ImageProcessor().load_image(path)

        assert (buffer.width, buffer.height) == (5, 3)
        assert tuple(buffer.rgba()[0, 0]) == (1, 2, 3, 255)

    def test_load_image_failure(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")

        with pytest.raises(ValueError, match="Failed to load image"):
            ImageProcessor().load_image(path)
