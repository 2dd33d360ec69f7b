import uvicorn

from .settings import settings


def main() -> None:
	uvicorn.run("constitution_ai.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
	main()
