"""
The AppSync command line interface.

- ``appcli.py`` - argument parsing and the commands.

"""
