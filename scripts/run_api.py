import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import uvicorn

from treasurer_dashboard.config import load_config


def main() -> None:
    # Fail here, before binding the port, when required settings are missing.
    cfg = load_config().validate()
    uvicorn.run(
        "treasurer_dashboard.api.server:create_app",
        factory=True,
        host=cfg.API_HOST,
        port=cfg.API_PORT,
        reload=False,
    )


if __name__ == "__main__":
    main()
