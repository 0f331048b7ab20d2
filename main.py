"""
Entry point: wire storage, notifier, ledger and UI together and run the Tk main loop.
"""

import logging
import tkinter as tk

from tixsuite.logging_config import setup_logging
from tixsuite.notify import Notifier
from tixsuite.repository import TicketLedger
from tixsuite.storage import JsonFileStore, get_data_path
from tixsuite.ui import AppUI

logger = logging.getLogger("tixsuite")


def main() -> None:
    setup_logging()
    path = get_data_path()
    logger.info("Using data file %s", path)

    notifier = Notifier()
    ledger = TicketLedger(JsonFileStore(path), notifier)

    root = tk.Tk()
    AppUI(root, ledger, notifier)
    root.mainloop()


if __name__ == "__main__":
    main()
