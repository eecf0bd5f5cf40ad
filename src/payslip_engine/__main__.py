"""Entry point for running the application with uvicorn."""

import uvicorn

from payslip_engine.config import get_settings
from payslip_engine.logging_utils import configure_logging


def main() -> None:
    """Run the application."""
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "payslip_engine.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
