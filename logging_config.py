import logging
import logging.config


def get_logging_config(level="INFO"):
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
        "loggers": {
            "mysql.connector": {"level": "WARNING"},
            "werkzeug": {"level": "INFO"},
        },
    }


def configure_logging(app):
    level = app.config.get("LOG_LEVEL") or ("DEBUG" if app.debug else "INFO")
    logging.config.dictConfig(get_logging_config(level.upper()))
