"""
Tasklist service - main entry point.

Runs the API with uvicorn using host/port from settings:

    tasklist            # or: uvicorn tasklist.api.app:app --reload
"""

from __future__ import annotations

import uvicorn

from tasklist.config import get_settings


def main():
    """Main entry point."""
    settings = get_settings()
    uvicorn.run(
        "tasklist.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and not settings.is_production,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
