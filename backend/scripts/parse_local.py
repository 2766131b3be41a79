#!/usr/bin/env python3
"""Parse a saved request body without a server. Run from backend/: python scripts/parse_local.py BODY CONTENT_TYPE

Example:
    (capture a multipart body, e.g. from a proxy or browser devtools, into body.bin)
    python scripts/parse_local.py body.bin "multipart/form-data; boundary=..."
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parents[1] / ".env")

# Ensure backend/src is on path when run from project root
backend = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(backend / "src"))

from formupload.config import get_settings
from formupload.core.logging import setup_logging
from formupload.services.form import IncomingForm


def main():
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    body_path, content_type = Path(sys.argv[1]), sys.argv[2]
    settings = get_settings()
    setup_logging(level="DEBUG")

    form = IncomingForm(settings.form_options())
    form.on("field", lambda name, value: print(f"field      {name} = {value!r}"))
    form.on("fileBegin", lambda name, file: print(f"fileBegin  {name} -> {file.path}"))
    form.on("file", lambda name, file: print(f"file       {name}: {file.name} ({file.type}, {file.size} bytes)"))
    form.on("error", lambda err: print(f"error      {err}"))
    form.on("end", lambda: print("end"))

    data = body_path.read_bytes()
    form.parse({"content-type": content_type, "content-length": str(len(data))})
    # feed in small pieces to exercise chunk boundaries
    for i in range(0, len(data), 4096):
        form.write(data[i : i + 4096])
    form.end()
    print("OK" if form.error is None else "FAILED")


if __name__ == "__main__":
    main()
