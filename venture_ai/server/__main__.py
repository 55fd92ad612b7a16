"""Run the Venture-AI server with uvicorn: ``python -m venture_ai.server``."""

import uvicorn

from venture_ai.server.core.config import settings


def main() -> None:
    uvicorn.run(
        "venture_ai.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
