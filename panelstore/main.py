import logging

import uvicorn

from panelstore.config import settings
from panelstore.db.sqlite import init_db
from panelstore.web.main import app


def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    init_db()

    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
