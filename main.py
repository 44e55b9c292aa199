"""Development entrypoint: ``python main.py`` serves on 127.0.0.1:8000."""

from raffledesk import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=8000, debug=app.config.get("DEBUG", False))
