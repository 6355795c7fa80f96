import uvicorn

from bizense.config import Settings


def main() -> None:
    settings = Settings()
    uvicorn.run(
        "bizense.main:app",
        host="0.0.0.0",
        port=settings.BACKEND_PORT,
        reload=settings.ENV == "dev",
    )


if __name__ == "__main__":
    main()
