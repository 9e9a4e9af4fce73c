import logging

from parkboard.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # SQL echo is noisy; only surface it when debugging.
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.debug else logging.WARNING
    )
