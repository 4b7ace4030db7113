import logging
import os

from fruitmachine import create_app

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.environ.get("FRUIT_HOST", "127.0.0.1"),
        port=int(os.environ.get("FRUIT_PORT", "5000")),
        debug=os.environ.get("FLASK_DEBUG", "0") == "1",
    )
