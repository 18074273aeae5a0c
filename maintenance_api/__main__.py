"""
Run the API with uvicorn: `python -m maintenance_api`.
"""
import uvicorn

from maintenance_api.config import settings


def main():
    uvicorn.run("maintenance_api.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
