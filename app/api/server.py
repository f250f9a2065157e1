import uvicorn

from app.config import HOST, LOG_LEVEL, PORT


def run() -> None:
    """Serve the FastAPI app on HOST:PORT (defaults to 0.0.0.0:8080)."""
    uvicorn.run(
        "app.api.fastapi_app:app",
        host=HOST,
        port=PORT,
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
