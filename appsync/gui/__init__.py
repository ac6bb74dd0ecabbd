"""
This is the GUI package for AppSync.

- ``app.py`` - The entry point. Creates the application context and the main window.
- ``viewmodel`` - The windows and views.

"""
