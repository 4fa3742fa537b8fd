import uvicorn

from mediatree.core.config import settings


def main():
    uvicorn.run("mediatree.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
