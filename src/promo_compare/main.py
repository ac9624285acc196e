"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn promo_compare.main:app --reload
"""

from promo_compare.factory import create_app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from promo_compare.core.config import get_settings

    settings = get_settings()

    uvicorn.run(
        "promo_compare.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )
