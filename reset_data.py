"""
reset_data.py
-------------
Clear every collection (users, vehicles, rentals, reviews, reports,
notifications) from the pickle file the Store is configured with.

Usage:
    $ python reset_data.py

Then repopulate demo data with:
    $ python seeds.py
"""
import logging

from autounite.config import Config
from autounite.models.store import Store

logger = logging.getLogger("reset_data")


def main():
    logging.basicConfig(level=Config.LOG_LEVEL, format=Config.LOG_FORMAT)
    store = Store.instance()
    store.clear()
    logger.info("%s has been cleared. Run `python seeds.py` to regenerate demo data.", store.path)


if __name__ == "__main__":
    main()
