import contextlib
import io
import json
import os
import tempfile
import unittest

from PIL import Image

from spriteatlas.cli import collect_files, main

from .helpers import png_bytes


def write(path: str, data: bytes) -> str:
    with open(path, 'wb') as f:
        f.write(data)
    return path


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.td = self._td.name
        self.sprites = os.path.join(self.td, "sprites")
        os.makedirs(self.sprites)
        write(os.path.join(self.sprites, "a.png"), png_bytes(16, 16, seed=1))
        write(os.path.join(self.sprites, "b.png"), png_bytes(16, 16, seed=1))
        write(os.path.join(self.sprites, "c.png"), png_bytes(40, 24, seed=2))
        write(os.path.join(self.sprites, "notes.txt"), b"not a sprite")

    def tearDown(self) -> None:
        self._td.cleanup()

    def run_main(self, argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(argv)
        return code, out.getvalue()

    def test_collect_files_expands_directories(self) -> None:
        extra = write(os.path.join(self.td, "d.png"), png_bytes(4, 4))
        files = collect_files([self.sprites, extra])
        self.assertEqual([os.path.basename(f) for f in files], ["a.png", "b.png", "c.png", "d.png"])

    def test_builds_texture_and_sprite_sheet(self) -> None:
        texture = os.path.join(self.td, "out", "atlas.png")
        sheet_path = os.path.join(self.td, "out", "atlas.json")

        code, output = self.run_main(["-t", texture, "-s", sheet_path, "--size", "32", self.sprites])

        self.assertEqual(code, 0, output)
        self.assertIn("Packing efficiency", output)
        with open(sheet_path) as f:
            data = json.load(f)
        frames = data["frames"]
        a = frames[os.path.join(self.sprites, "a.png")]["frame"]
        b = frames[os.path.join(self.sprites, "b.png")]["frame"]
        c = frames[os.path.join(self.sprites, "c.png")]["frame"]
        self.assertEqual(a, b)
        self.assertEqual((c["w"], c["h"]), (40, 24))
        self.assertEqual(data["meta"]["image"], "atlas.png")
        with Image.open(texture) as img:
            self.assertEqual(img.size, (data["meta"]["size"]["w"], data["meta"]["size"]["h"]))
            self.assertEqual(img.size, (64, 64))

    def test_invalid_image_fails(self) -> None:
        bad = write(os.path.join(self.td, "bad.png"), b"garbage")
        texture = os.path.join(self.td, "atlas.png")
        sheet_path = os.path.join(self.td, "atlas.json")

        code, output = self.run_main(["-t", texture, "-s", sheet_path, bad])

        self.assertEqual(code, 1)
        self.assertIn("Error building atlas", output)
        self.assertFalse(os.path.exists(texture))
        self.assertFalse(os.path.exists(sheet_path))

    def test_empty_directory_fails(self) -> None:
        empty = os.path.join(self.td, "empty")
        os.makedirs(empty)
        code, output = self.run_main(["-t", "x.png", "-s", "x.json", empty])
        self.assertEqual(code, 1)
        self.assertIn("No sprite files found", output)


if __name__ == "__main__":
    unittest.main()
