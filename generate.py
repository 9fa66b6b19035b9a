from __future__ import annotations

import argparse
import json
from pathlib import Path

from deckforge.config import configure_logging
from deckforge.pipeline import extract, render_to_file


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Render a PPTX from a JSON slide list or an HTML page")
    parser.add_argument("input", help="JSON file ([slides] or {slides, options}) or HTML file with --html")
    parser.add_argument("--html", action="store_true",
                        help="Treat input as HTML and extract .slide elements first")
    parser.add_argument("--base-url", type=str, default=None,
                        help="Base URL for relative <img src> when using --html")
    parser.add_argument("--theme", type=str, default=None,
                        help="Deck theme (e.g., 'MASTER_SLIDE', 'DARK_MASTER', 'gradient')")
    parser.add_argument("--out", type=str, default=None,
                        help="Output directory (default: OUTPUT_DIR or ./output)")
    parser.add_argument("--dump-json", action="store_true",
                        help="With --html: print the extracted slides instead of rendering")
    args = parser.parse_args()

    configure_logging()
    text = Path(args.input).read_text(encoding="utf-8")

    options: dict = {}
    if args.html:
        slides = extract(text, base_url=args.base_url)
        if args.dump_json:
            payload = [s.model_dump(by_alias=True, exclude_none=True) for s in slides]
            print(json.dumps(payload, ensure_ascii=False, indent=2))
            return
    else:
        data = json.loads(text)
        if isinstance(data, dict):
            slides = data.get("slides")
            options = dict(data.get("options") or {})
        else:
            slides = data

    if args.theme:
        options["theme"] = args.theme

    path = render_to_file(slides, options, output_dir=args.out)
    print(str(Path(path).resolve()))


if __name__ == "__main__":
    main()
