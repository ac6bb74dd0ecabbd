"""
The AppSync command line interface. Works on the same services as the GUI::

    appsync-cli signup --email me@example.com --username me
    appsync-cli login --email me@example.com
    appsync-cli folders list
    appsync-cli notes add --folder <folder id> --title "Title" --content "Content"

Passwords are prompted for. The session is restored from the keyring between runs when the Firestore backend
is used.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from getpass import getpass
from typing import Callable

from appsync import config, helpers
from appsync.context import AppContext
from appsync.errors import SubscriptionError, ValidationError
from appsync.notes.model.folder import Folder
from appsync.notes.model.note import Note
from appsync.notes.subscription import Subscription

EXIT_OK: int = 0
EXIT_VALIDATION: int = 2
EXIT_AUTH: int = 3
EXIT_MUTATION: int = 4
EXIT_NOT_LOGGED_IN: int = 5
EXIT_TIMEOUT: int = 6


class AppSyncCli:
    """
    Defines the functionality of the AppSync CLI.
    """

    #: Seconds to wait for the first snapshot of a list.
    SNAPSHOT_TIMEOUT: int = 30

    def __init__(self, args: argparse.Namespace, context: AppContext | None = None):
        """
        :param args: the parsed command line.
        :param context: the application context. Created from the environment if not given.
        """
        self.args: argparse.Namespace = args
        self.settings: dict = config.load_settings()
        if args.log_level:
            self.settings['log_level'] = args.log_level
        self.context: AppContext = context or AppContext.create(self.settings)

    def run(self) -> int:
        """
        Run the command given on the command line.

        :return: the exit code.
        """
        commands = {
            'signup': self.sign_up,
            'login': self.log_in,
            'logout': self.log_out,
            'whoami': self.who_am_i,
            'folders': self.folders,
            'notes': self.notes,
        }
        try:
            self.context.start()
            return commands[self.args.command]()
        finally:
            config.save_settings(self.context.settings)
            self.context.close()

    # AUTHENTICATION ---------------------------------------------------------------------------------------------------

    def sign_up(self) -> int:
        password = self.args.password if self.args.password is not None else getpass('Password: ')
        try:
            success, data = self.context.auth.sign_up(self.args.username, self.args.email, password)
        except ValidationError as e:
            logging.critical(str(e))
            return EXIT_VALIDATION
        if not success:
            logging.critical(data)
            return EXIT_AUTH
        logging.info('Account created for {}'.format(self.args.email))
        return EXIT_OK

    def log_in(self) -> int:
        email = self.args.email or self.context.settings.get('last_email', '')
        if not email:
            logging.critical('No email address given. Use --email to specify.')
            return EXIT_VALIDATION
        password = self.args.password if self.args.password is not None else getpass('Password: ')
        success, data = self.context.auth.log_in(email, password)
        if not success:
            logging.critical(data)
            return EXIT_AUTH
        logging.info('Logged in as {}'.format(email))
        return EXIT_OK

    def log_out(self) -> int:
        success, data = self.context.auth.log_out()
        if not success:
            logging.critical(data)
            return EXIT_AUTH
        logging.info(data)
        return EXIT_OK

    def who_am_i(self) -> int:
        session = self.context.auth.current_session
        if session is None:
            print('Not logged in.')
            return EXIT_NOT_LOGGED_IN
        print('{} ({})'.format(session.email, session.uid))
        return EXIT_OK

    # FOLDERS AND NOTES ------------------------------------------------------------------------------------------------

    def _wait_for_snapshot(self, opener: Callable[[], Subscription]) -> tuple | None:
        """
        Open a subscription, wait for its first snapshot, then close it.

        :return: the records in the snapshot, or None if it didn't arrive in time.
        """
        ready = threading.Event()
        result = {}
        subscription_box = []

        def observer(kind: str, records: tuple):
            if subscription_box and kind == subscription_box[0].kind and subscription_box[0].snapshots > 0:
                result['records'] = records
                ready.set()

        remove = self.context.notes.observe(observer)
        try:
            subscription_box.append(opener())
            if subscription_box[0].snapshots > 0:
                result['records'] = self.context.notes.notes \
                    if subscription_box[0].kind == Subscription.KIND_NOTES else self.context.notes.folders
                ready.set()
            if not ready.wait(AppSyncCli.SNAPSHOT_TIMEOUT):
                logging.critical('Timed out waiting for the backend.')
                return None
            return result['records']
        finally:
            remove()
            if subscription_box:
                self.context.notes.close(subscription_box[0])

    def _mutate(self, future, description: str) -> int:
        success, data = future.result()
        if not success:
            logging.critical(str(data))
            return EXIT_MUTATION
        logging.info('{}: {}'.format(description, data))
        return EXIT_OK

    def folders(self) -> int:
        session = self.context.auth.current_session
        if session is None:
            logging.critical('Not logged in. Use the login command first.')
            return EXIT_NOT_LOGGED_IN

        action = self.args.action
        if action == 'list':
            records = self._wait_for_snapshot(lambda: self.context.notes.open_folders(session.uid))
            if records is None:
                return EXIT_TIMEOUT
            for folder in records:
                print('{}  {}'.format(folder.id, folder.name))
            return EXIT_OK
        if action == 'add':
            if not self.args.name:
                logging.critical('A folder name is required.')
                return EXIT_VALIDATION
            return self._mutate(self.context.notes.add_folder(self.args.name, session.uid), 'Folder added')
        return self._mutate(self.context.notes.delete_folder(Folder(self.args.id, '')), 'Folder deleted')

    def notes(self) -> int:
        session = self.context.auth.current_session
        if session is None:
            logging.critical('Not logged in. Use the login command first.')
            return EXIT_NOT_LOGGED_IN

        folder = Folder(self.args.folder, '') if self.args.folder else None
        action = self.args.action
        if action == 'list':
            records = self._wait_for_snapshot(lambda: self.context.notes.open_notes(folder))
            if records is None:
                return EXIT_TIMEOUT
            for note in records:
                print('{}  {}  {}'.format(note.id, helpers.DateUtil.display(note.timestamp), note.title))
            return EXIT_OK
        if action == 'add':
            if not self.args.title or not self.args.content:
                logging.critical('Both a title and content are required.')
                return EXIT_VALIDATION
            return self._mutate(self.context.notes.add_note(self.args.title, self.args.content, folder),
                                'Note added')
        if action == 'edit':
            records = self._wait_for_snapshot(lambda: self.context.notes.open_notes(folder))
            if records is None:
                return EXIT_TIMEOUT
            current = next((note for note in records if note.id == self.args.id), None)
            if current is None:
                logging.critical('No note with id {}.'.format(self.args.id))
                return EXIT_VALIDATION
            edited = current.edited(self.args.title if self.args.title is not None else current.title,
                                    self.args.content if self.args.content is not None else current.content)
            if not edited.title or not edited.content:
                logging.critical('Both a title and content are required.')
                return EXIT_VALIDATION
            return self._mutate(self.context.notes.update_note(edited, folder), 'Note updated')
        return self._mutate(self.context.notes.delete_note(Note(id=self.args.id), folder), 'Note deleted')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='appsync-cli', description='AppSync notes from the command line.')
    parser.add_argument('--log-level', choices=list(helpers.LOG_LEVELS), help='Logging level.')
    commands = parser.add_subparsers(dest='command', required=True)

    sign_up = commands.add_parser('signup', help='Create an account.')
    sign_up.add_argument('--username', default='', help='Your user name.')
    sign_up.add_argument('--email', required=True, help='Your email address.')
    sign_up.add_argument('--password', help=argparse.SUPPRESS)

    log_in = commands.add_parser('login', help='Log in to an existing account.')
    log_in.add_argument('--email', help='Your email address. Defaults to the last one used.')
    log_in.add_argument('--password', help=argparse.SUPPRESS)

    commands.add_parser('logout', help='Log out.')
    commands.add_parser('whoami', help='Show the logged in user.')

    folders = commands.add_parser('folders', help='List, add or delete folders.')
    folder_actions = folders.add_subparsers(dest='action', required=True)
    folder_actions.add_parser('list', help='List your folders.')
    folder_add = folder_actions.add_parser('add', help='Add a folder.')
    folder_add.add_argument('name', help='Name of the folder.')
    folder_delete = folder_actions.add_parser('delete', help='Delete a folder.')
    folder_delete.add_argument('id', help='Id of the folder.')

    notes = commands.add_parser('notes', help='List, add, edit or delete notes.')
    notes.add_argument('--folder', help='Id of the folder. Omit for top-level notes.')
    note_actions = notes.add_subparsers(dest='action', required=True)
    note_actions.add_parser('list', help='List notes, oldest first.')
    note_add = note_actions.add_parser('add', help='Add a note.')
    note_add.add_argument('--title', required=True)
    note_add.add_argument('--content', required=True)
    note_edit = note_actions.add_parser('edit', help='Edit a note.')
    note_edit.add_argument('id', help='Id of the note.')
    note_edit.add_argument('--title')
    note_edit.add_argument('--content')
    note_delete = note_actions.add_parser('delete', help='Delete a note.')
    note_delete.add_argument('id', help='Id of the note.')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config.bootstrap_settings()
    settings = config.load_settings()
    helpers.setup_logging(args.log_level or settings['log_level'], log_stdout=True, log_file=False)
    try:
        return AppSyncCli(args).run()
    except SubscriptionError as e:
        logging.critical(str(e))
        return EXIT_NOT_LOGGED_IN


if __name__ == '__main__':
    sys.exit(main())
