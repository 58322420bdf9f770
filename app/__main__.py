"""
Run the API server:

  python -m app

Binds to HOST:PORT from settings (default 0.0.0.0:4000).
"""

import logging

import uvicorn

from app.core.config import get_settings
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    logger.info("Picketly API listening on port %s", settings.PORT)
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        # Client IPs are resolved from X-Forwarded-For per TRUST_PROXY_HOPS.
        proxy_headers=False,
    )


if __name__ == "__main__":
    main()
