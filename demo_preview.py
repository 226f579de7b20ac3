#!/usr/bin/env python3
"""
Art Preview - Demo Renderer
Renders the main preview and every scene thumbnail for one selection and
writes them as PNG files
"""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from artpreview import create_preview
from artpreview.errors import ArtPreviewError, create_error_recovery_suggestions
from artpreview.utils import export_targets


async def render_selection(args) -> int:
    """Apply the requested selection, wait for every target and export them"""
    orchestrator = create_preview(args.env, args.catalog)
    catalog = orchestrator.catalog
    state = orchestrator.state

    if args.artwork:
        state.set_artwork(args.artwork)
    state.set_treatment(args.color)
    state.set_frame(catalog.frame_by_id(args.frame))
    state.set_matting(catalog.matting_by_label(args.matting))
    state.set_border(catalog.border_by_label(args.border))

    scene_index = catalog.scene_index(args.scene)
    if scene_index < 0:
        print(f"❌ Unknown scene: {args.scene}")
        print(f"   Available: {', '.join(scene.label for scene in catalog.scenes)}")
        return 1
    state.set_active_scene(scene_index)

    async with orchestrator:
        await orchestrator.wait_idle()
        written = export_targets(orchestrator.targets, Path(args.output_dir))

    print(f"\n🖼️  Wrote {len(written)} images to {args.output_dir}")
    for name, path in written.items():
        print(f"  • {name}: {path}")
    return 0


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Render art preview frames to PNG",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python demo_preview.py                                  # Plain artwork
  python demo_preview.py --frame walnut --matting Medium --color mono --scene Bedroom
  python demo_preview.py --border "Thin White" --color warm --output-dir out/
        """
    )

    parser.add_argument('--artwork', type=str, help='Artwork path or URL (default: catalog artwork)')
    parser.add_argument('--frame', type=str, default='none', help='Frame id')
    parser.add_argument('--matting', type=str, default='None', help='Matting label')
    parser.add_argument('--border', type=str, default='None', help='Border label')
    parser.add_argument('--color', type=str, default='original',
                        help='Color treatment: original, warm, cool, vintage, mono')
    parser.add_argument('--scene', type=str, default='Plain', help='Active scene label')
    parser.add_argument('--catalog', type=str, help='Catalog YAML (default: CATALOG_FILE setting)')
    parser.add_argument('--env', type=str, help='Configuration environment')
    parser.add_argument('--output-dir', type=str, default='previews', help='Output directory')

    args = parser.parse_args()

    try:
        return asyncio.run(render_selection(args))
    except ArtPreviewError as e:
        logger.error(f"Preview failed: {e.message}")
        print(f"❌ {e.message}")
        for suggestion in e.suggestions or create_error_recovery_suggestions(e):
            print(f"   - {suggestion}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
