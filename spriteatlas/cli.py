import argparse
import logging
import os
import sys
from typing import List, Optional

from .allocator import HeuristicType
from .builder import DEFAULT_SIZE, AtlasBuilder
from .errors import AtlasError

IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.bmp', '.gif')

PLACEMENT_MAP = {
    'shortside': HeuristicType.BEST_SHORT_SIDE_FIT,
    'longside': HeuristicType.BEST_LONG_SIDE_FIT,
    'area': HeuristicType.BEST_AREA_FIT,
    'bottomleft': HeuristicType.BOTTOM_LEFT,
}


def collect_files(paths: List[str]) -> List[str]:
    """Expand directories (non-recursively) into the image files they contain."""
    sprite_files = []
    for path in paths:
        if os.path.isdir(path):
            for file in sorted(os.listdir(path)):
                full_path = os.path.join(path, file)
                if os.path.isfile(full_path) and file.lower().endswith(IMAGE_EXTENSIONS):
                    sprite_files.append(full_path)
        else:
            sprite_files.append(path)
    return sprite_files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='spriteatlas', description='Pack images into a single texture atlas')
    parser.add_argument('files', nargs='+', help='Images (or directories of images) to put into the atlas')
    parser.add_argument('-t', '--output-texture', required=True, help='Output path for the atlas image')
    parser.add_argument('-s', '--output-sprite-sheet', required=True, help='Output path for the sprite sheet JSON')
    parser.add_argument('--size', type=int, default=DEFAULT_SIZE[0], help='Initial width and height of the atlas')
    parser.add_argument('--placement', type=str, default='shortside', choices=sorted(PLACEMENT_MAP),
                        help='Placement heuristic to use')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every placement and resize')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s: %(message)s")
    log = logging.getLogger("spriteatlas")

    if args.size <= 0:
        print(f"Invalid atlas size: {args.size}")
        return 1

    sprite_files = collect_files(args.files)
    if not sprite_files:
        print("No sprite files found")
        return 1
    print(f"Packing {len(sprite_files)} sprite files")

    builder = AtlasBuilder((args.size, args.size), PLACEMENT_MAP[args.placement])
    try:
        for path in sprite_files:
            log.debug(" - `%s`", path)
            builder.push_file(path)
        sprite_sheet, atlas_img = builder.build()
    except (AtlasError, OSError) as e:
        print(f"Error building atlas: {e}")
        return 1

    for path in (args.output_texture, args.output_sprite_sheet):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    atlas_img.save(args.output_texture)
    sprite_sheet.save(args.output_sprite_sheet, args.output_texture)

    print(f"Saved atlas: {args.output_texture} ({atlas_img.width}×{atlas_img.height}) "
          f"with {len(sprite_sheet)} sprites")
    print(f"Packing efficiency: {sprite_sheet.efficiency():.2f}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
