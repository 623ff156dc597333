"""credhash entrypoint.

Run with:
  python -m credhash
"""

import os
import uvicorn

def main() -> None:
    host = os.getenv("CREDHASH_HOST", "0.0.0.0")
    port = int(os.getenv("CREDHASH_PORT", "8000"))
    reload = os.getenv("CREDHASH_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("credhash.app:app", host=host, port=port, reload=reload, log_config=None)

if __name__ == "__main__":
    main()
