#!/usr/bin/env python3
"""
scripts/extract_invoice.py

Run the extraction pipeline on a local file and print the validated invoice
JSON. Nothing is loaded into a review session and nothing is exported; use the
HTTP API for review.

Usage:
  python scripts/extract_invoice.py invoice.pdf
  python scripts/extract_invoice.py scan.jpg --content-type image/jpeg
  python scripts/extract_invoice.py invoice.pdf --preview   # show the text sent, no AI call
"""

import argparse
import json
import mimetypes
import os
import sys

# add project root to path so we can import invoice_review.* modules
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)

from invoice_review.agents.extraction import build_messages, run_extraction
from invoice_review.agents.preprocess import prepare_payload
from invoice_review.utils.errors import ExtractionError


def main(path: str, content_type: str = None, preview: bool = False) -> int:
    with open(path, "rb") as fh:
        data = fh.read()
    name = os.path.basename(path)
    content_type = content_type or mimetypes.guess_type(name)[0] or "application/octet-stream"

    try:
        if preview:
            payload = prepare_payload(data, content_type, name)
            message = build_messages(payload)[0]["content"]
            print(message if isinstance(message, str) else f"[image payload, {len(payload.data_url)} chars]")
            return 0
        record = run_extraction(data, content_type, name)
    except ExtractionError as e:
        print(f"{e.code.value}: {e.detail}", file=sys.stderr)
        return 1

    print(json.dumps(record.model_dump(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("path", help="PDF or image file to extract")
    parser.add_argument("--content-type", default=None, help="Override the guessed MIME type")
    parser.add_argument("--preview", action="store_true", help="Print the prepared prompt text; do not call the extractor")
    args = parser.parse_args()
    sys.exit(main(args.path, content_type=args.content_type, preview=args.preview))
