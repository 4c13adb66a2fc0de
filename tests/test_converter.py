import asyncio
import io
import os
import tempfile
import time
import unittest

from PIL import Image

from ascii_art.converter import (
    GLYPH_RAMP,
    ASCIIConverter,
    GlyphGrid,
    GlyphMapper,
    PixelBuffer,
    Rasterizer,
    brightness_to_index,
    luminance,
)
from ascii_art.errors import DecodeError, InvalidImageError


def image_bytes(size, color, mode="RGB", fmt="PNG"):
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def gradient_bytes(width=200, height=120):
    img = Image.new("RGB", (width, height))
    px = img.load()
    for y in range(height):
        for x in range(width):
            v = int(255 * x / (width - 1))
            px[x, y] = (v, (v + y) % 256, 255 - v)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class GlyphRampTests(unittest.TestCase):
    def test_ramp_shape(self):
        self.assertEqual(len(GLYPH_RAMP), 12)
        self.assertEqual(GLYPH_RAMP[0], "@")
        self.assertEqual(GLYPH_RAMP[-1], " ")

    def test_boundary_values(self):
        self.assertEqual(brightness_to_index(0), 0)
        self.assertEqual(brightness_to_index(255), 11)

    def test_monotonic_over_all_brightness_values(self):
        indices = [brightness_to_index(b) for b in range(256)]
        for darker, brighter in zip(indices, indices[1:]):
            self.assertLessEqual(darker, brighter)
        self.assertTrue(all(0 <= i < len(GLYPH_RAMP) for i in indices))

    def test_luminance_weights(self):
        self.assertEqual(luminance(0, 0, 0), 0)
        self.assertEqual(luminance(255, 255, 255), 255)
        self.assertEqual(luminance(255, 0, 0), 76)
        self.assertEqual(luminance(0, 255, 0), 150)
        self.assertEqual(luminance(0, 0, 255), 29)


class GlyphMapperTests(unittest.TestCase):
    def setUp(self):
        self.mapper = GlyphMapper()

    def test_single_samples(self):
        self.assertEqual(self.mapper.glyph_for(0, 0, 0), "@")
        self.assertEqual(self.mapper.glyph_for(255, 255, 255), " ")

    def test_alpha_ignored(self):
        data = bytes([0, 0, 0, 255, 255, 255, 255, 255, 0, 0, 0, 0, 255, 255, 255, 0])
        grid = self.mapper.map_to_glyphs(PixelBuffer(width=2, height=2, data=data))
        self.assertEqual(grid.rows, ("@ ", "@ "))

    def test_vectorized_matches_scalar_for_every_gray(self):
        data = b"".join(bytes([v, v, v, 255]) for v in range(256))
        grid = self.mapper.map_to_glyphs(PixelBuffer(width=256, height=1, data=data))
        expected = "".join(GLYPH_RAMP[brightness_to_index(luminance(v, v, v))] for v in range(256))
        self.assertEqual(grid.rows[0], expected)

    def test_vectorized_matches_scalar_for_colors(self):
        samples = [(r, g, b) for r in range(0, 256, 51) for g in range(0, 256, 51) for b in range(0, 256, 85)]
        data = b"".join(bytes([r, g, b, 255]) for r, g, b in samples)
        grid = self.mapper.map_to_glyphs(PixelBuffer(width=len(samples), height=1, data=data))
        expected = "".join(self.mapper.glyph_for(r, g, b) for r, g, b in samples)
        self.assertEqual(grid.rows[0], expected)

    def test_grid_text_has_trailing_newline_per_row(self):
        data = bytes([0, 0, 0, 255]) * 6
        grid = self.mapper.map_to_glyphs(PixelBuffer(width=3, height=2, data=data))
        self.assertEqual(grid.text, "@@@\n@@@\n")
        self.assertEqual(str(grid), grid.text)
        self.assertEqual(GlyphGrid.from_text(grid.text), grid)


class PixelBufferTests(unittest.TestCase):
    def test_length_invariant(self):
        with self.assertRaises(ValueError):
            PixelBuffer(width=2, height=2, data=bytes(15))

    def test_array_shape(self):
        buf = PixelBuffer(width=3, height=2, data=bytes(24))
        self.assertEqual(buf.as_array().shape, (2, 3, 4))


class RasterizerTests(unittest.TestCase):
    def setUp(self):
        self.rasterizer = Rasterizer()

    def test_width_capping(self):
        buf = self.rasterizer.rasterize(image_bytes((1000, 500), (10, 20, 30)))
        self.assertEqual((buf.width, buf.height), (60, 12))
        self.assertEqual(len(buf.data), 60 * 12 * 4)

    def test_small_image_keeps_width(self):
        self.assertEqual(self.rasterizer.target_size(30, 30), (30, 12))

    def test_flat_image_clamps_height(self):
        self.assertEqual(self.rasterizer.target_size(600, 10), (60, 1))

    def test_zero_dimension_rejected(self):
        with self.assertRaises(InvalidImageError):
            self.rasterizer.target_size(0, 10)
        with self.assertRaises(InvalidImageError):
            self.rasterizer.rasterize_image(Image.new("RGB", (10, 0)))

    def test_non_image_bytes(self):
        with self.assertRaises(DecodeError):
            self.rasterizer.rasterize(b"definitely not an image")
        with self.assertRaises(DecodeError):
            self.rasterizer.rasterize(b"")

    def test_other_formats_and_modes(self):
        for mode, color, fmt in [("L", 0, "JPEG"), ("RGBA", (0, 0, 0, 128), "PNG"), ("P", 3, "GIF")]:
            buf = self.rasterizer.rasterize(image_bytes((120, 60), color, mode=mode, fmt=fmt))
            self.assertEqual((buf.width, buf.height), (60, 12))

    def test_exif_orientation_is_applied(self):
        exif = Image.Exif()
        exif[0x0112] = 6  # rotate 90 degrees clockwise on display
        buf = io.BytesIO()
        Image.new("RGB", (200, 100), (0, 0, 0)).save(buf, format="JPEG", exif=exif.tobytes())

        pixels = self.rasterizer.rasterize(buf.getvalue())
        self.assertEqual((pixels.width, pixels.height), (60, 48))

    def test_transparent_pixels_read_as_black(self):
        # One row no wider than the cap is not resampled at all
        pixels = self.rasterizer.rasterize(image_bytes((10, 1), (255, 255, 255, 0), mode="RGBA"))
        self.assertEqual((pixels.width, pixels.height), (10, 1))
        self.assertEqual(pixels.data, bytes(10 * 4))
        self.assertEqual(GlyphMapper().map_to_glyphs(pixels).rows, ("@" * 10,))

    def test_opaque_pixels_keep_color(self):
        pixels = self.rasterizer.rasterize(image_bytes((10, 1), (255, 255, 255, 255), mode="RGBA"))
        self.assertEqual(pixels.data, bytes([255, 255, 255, 255]) * 10)

    def test_custom_constants(self):
        rasterizer = Rasterizer(max_width=100, aspect_correction=0.5)
        self.assertEqual(rasterizer.target_size(1000, 500), (100, 25))

    def test_rasterize_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "img.png")
            with open(path, "wb") as f:
                f.write(image_bytes((10, 10), (255, 255, 255)))
            buf = self.rasterizer.rasterize_file(path)
            self.assertEqual((buf.width, buf.height), (10, 4))

            with self.assertRaises(DecodeError):
                self.rasterizer.rasterize_file(os.path.join(tmp, "missing.png"))


class ASCIIConverterTests(unittest.TestCase):
    def setUp(self):
        self.converter = ASCIIConverter()

    def test_deterministic(self):
        data = gradient_bytes()
        self.assertEqual(self.converter.convert(data).text, self.converter.convert(data).text)

    def test_dimension_and_ramp_invariants(self):
        grid = self.converter.convert(gradient_bytes())
        self.assertEqual((grid.width, grid.height), (60, 14))
        self.assertEqual(grid.text.count("\n"), grid.height)
        for row in grid.rows:
            self.assertEqual(len(row), grid.width)
            self.assertTrue(set(row) <= set(GLYPH_RAMP))

    def test_single_black_pixel(self):
        grid = self.converter.convert(image_bytes((1, 1), (0, 0, 0)))
        self.assertEqual(grid.rows, ("@",))
        self.assertEqual(grid.text, "@\n")

    def test_uniform_gray(self):
        grid = self.converter.convert(image_bytes((50, 50), (128, 128, 128)))
        self.assertEqual(set("".join(grid.rows)), {"*"})

    def test_white_is_blank(self):
        grid = self.converter.convert(image_bytes((20, 20), (255, 255, 255)))
        self.assertEqual(set("".join(grid.rows)), {" "})

    def test_convert_image(self):
        grid = self.converter.convert_image(Image.new("RGB", (1000, 500)))
        self.assertEqual((grid.width, grid.height), (60, 12))


class SlowRasterizer(Rasterizer):
    def rasterize(self, image_bytes):
        time.sleep(0.5)
        return super().rasterize(image_bytes)


class AsyncConversionTests(unittest.IsolatedAsyncioTestCase):
    async def test_async_matches_sync(self):
        converter = ASCIIConverter()
        data = gradient_bytes()
        grid = await converter.convert_async(data)
        self.assertEqual(grid, converter.convert(data))

    async def test_async_decode_error(self):
        with self.assertRaises(DecodeError):
            await ASCIIConverter().convert_async(b"\x89PNG garbage")

    async def test_timeout_raises_decode_error(self):
        converter = ASCIIConverter(rasterizer=SlowRasterizer())
        with self.assertRaises(DecodeError):
            await converter.convert_async(image_bytes((4, 4), (0, 0, 0)), timeout=0.01)

    async def test_independent_concurrent_conversions(self):
        converter = ASCIIConverter()
        black, white = await asyncio.gather(
            converter.convert_async(image_bytes((10, 10), (0, 0, 0))),
            converter.convert_async(image_bytes((10, 10), (255, 255, 255))),
        )
        self.assertEqual(set("".join(black.rows)), {"@"})
        self.assertEqual(set("".join(white.rows)), {" "})


if __name__ == "__main__":
    unittest.main()
