"""
Start the isotile HTTP API under Uvicorn on port 8000.

The server exposes the tiling type table, geometry, outline and region
fill endpoints under ``/api``, plus the saved-design store.  Log records
go to stderr at INFO.  Saved designs live in the SQLite file under
``ISOTILE_STORAGE_DIR`` unless ``ISOTILE_DATABASE_URL`` names another
database; set ``TILING_DEBUG`` to log fill slabs and iterator steps.
"""

from __future__ import annotations

import sys
from pathlib import Path

import logging
import uvicorn

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """Run the Uvicorn server hosting the tiling API."""
    # Determine the repository root relative to this file and ensure it is on
    # sys.path so that ``backend`` can be imported as a package.
    repo_root = Path(__file__).resolve().parent
    if str(repo_root) not in sys.path:
        sys.path.append(str(repo_root))

    # Import the FastAPI application.  We import inside main() to avoid
    # modifying sys.path at module import time.
    from backend.isotile.main import app  # type: ignore

    # Start Uvicorn.  Bind to all interfaces on port 8000 by default.
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()