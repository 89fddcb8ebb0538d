# main.py

from uvicorn import run


def main() -> None:
    run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        log_level="info",
        reload=True,
        loop="uvloop",
        http="httptools",
    )


if __name__ == "__main__":
    main()
