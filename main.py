"""
Run with:   python main.py
Or `uvicorn main:app --port 8000` if you prefer the CLI.
"""

import dotenv

# Load environment variables from .env file (overriding existing ones) before
# anything reads settings or configures logging.
dotenv.load_dotenv(override=True)

import uvicorn  # noqa: E402

from httpmetrics.config import get_settings  # noqa: E402
from httpmetrics.server import create_app  # noqa: E402

settings = get_settings()
app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
