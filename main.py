"""
Kairos -- Application Entry Point.

Starts the FastAPI server via uvicorn.

Usage:
    python main.py              # Development (reload with KAIROS_DEV_MODE=1)
    uvicorn main:app --host 0.0.0.0 --port 8000  # Production
"""

from __future__ import annotations

import uvicorn

from kairos.api import create_app
from kairos.config.settings import get_settings
from kairos.lib.logging import setup_logging

settings = get_settings()
setup_logging(dev_mode=settings.dev_mode)

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.dev_mode,
        log_level="info",
    )
