"""
Main application entry point. Creates the application context and displays the main window.
"""

import sys

from PyQt6.QtWidgets import QApplication

from appsync import config, helpers
from appsync.context import AppContext
from appsync.gui.viewmodel.rootview import RootView
from appsync.gui.viewmodel.threadedtasks import Dispatcher, LogRelay


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName(helpers.APP_NAME)
    config.bootstrap_settings()
    settings = config.load_settings()

    log_relay = LogRelay()
    helpers.setup_logging(settings['log_level'], log_stdout=True, func=log_relay)

    dispatcher = Dispatcher()
    context = AppContext.create(settings, dispatch=dispatcher)
    window = RootView(context, log_relay)
    window.show()
    window.restore_session()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
