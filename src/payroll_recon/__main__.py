"""Run the API server: ``python -m payroll_recon``."""

import uvicorn

from payroll_recon.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "payroll_recon.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
