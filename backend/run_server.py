"""Development runner: `python run_server.py` from the backend directory."""
import os

import uvicorn

from pharmasales.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "pharmasales.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.DEBUG,
    )
