"""
Configuration for AppSync. Deployment settings (which backend to use, Firebase project) come from the environment or
a ``.env`` file through `python-decouple <https://pypi.org/project/python-decouple/>`_. User settings are kept in
``conf.json`` in the settings folder.
"""

from __future__ import annotations

import copy
import json
import os

from decouple import config

from appsync import helpers

#: Either 'firestore' or 'memory'.
BACKEND: str = config('APPSYNC_BACKEND', default='memory')
#: Web API key of the Firebase project.
FIREBASE_API_KEY: str = config('FIREBASE_API_KEY', default='')
#: Id of the Firebase project.
FIREBASE_PROJECT_ID: str = config('FIREBASE_PROJECT_ID', default='')
#: Default logging level, used until the user chooses one.
LOG_LEVEL: str = config('APPSYNC_LOG_LEVEL', default='info')

#: User settings. ``log_level`` is one of 'debug', 'info', 'warning' or 'critical'; ``last_email`` pre-fills the log in
#: form.
DEFAULT_SETTINGS: dict = {
    'log_level': LOG_LEVEL,
    'last_email': ''
}


def settings_file():
    return helpers.settings_folder() / 'conf.json'


def bootstrap_settings() -> None:
    """
    Create the configuration file if it doesn't exist.
    """
    if not os.path.exists(settings_file()):
        with open(settings_file(), 'w') as fp:
            json.dump(DEFAULT_SETTINGS, fp)


def load_settings() -> dict:
    """
    Load settings from the configuration file. Missing keys are filled in from the defaults.
    """
    settings = copy.deepcopy(DEFAULT_SETTINGS)
    if not os.path.exists(settings_file()):
        return settings
    with open(settings_file()) as fp:
        settings.update(json.load(fp))
    return settings


def save_settings(settings: dict) -> None:
    """
    Save settings to the configuration file.
    """
    with open(settings_file(), 'w') as fp:
        json.dump(settings, fp)
