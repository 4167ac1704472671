"""Run the API with uvicorn: ``python -m todo_api``."""
import uvicorn

from .main import create_app
from .settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
