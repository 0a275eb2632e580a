from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import os
import sys

from .config import settings
from .controller import PageController
from .errors import AnalysisError
from .validation import format_file_size


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Analyze one document with Azure Document Intelligence.")
    p.add_argument("--file", required=True, help="Path to a PDF, PNG or JPEG file.")
    p.add_argument("--mime-type", default=None, help="Override the type guessed from the file extension.")
    p.add_argument("--verbose", action="store_true", help="Log submit/poll progress to stderr.")
    args = p.parse_args(argv)

    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if args.verbose else logging.WARNING)

    mime_type = args.mime_type or mimetypes.guess_type(args.file)[0]
    try:
        with open(args.file, "rb") as f:
            data = f.read()
    except OSError as e:
        print(f"Cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
        return 1

    controller = PageController(settings)
    try:
        selected = controller.select_file(os.path.basename(args.file), len(data), mime_type, data)
        print(
            f"[docinsight] file={selected.name} size={format_file_size(selected.size_bytes)} type={selected.mime_type}",
            file=sys.stderr,
        )
        rendered = controller.analyze()
    except AnalysisError as e:
        print(e.message, file=sys.stderr)
        return 1

    out = rendered.to_dict()
    out.pop("html")
    print(json.dumps(out, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
