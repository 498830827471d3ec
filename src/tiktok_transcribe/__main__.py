from __future__ import annotations

import uvicorn
from transcribe_core.config import _parse_int, _parse_str


def main() -> None:
    uvicorn.run(
        "tiktok_transcribe.asgi:app",
        host=_parse_str("HOST", "0.0.0.0"),
        port=_parse_int("PORT", 3000),
        log_config=None,
        workers=1,
    )


if __name__ == "__main__":
    main()
