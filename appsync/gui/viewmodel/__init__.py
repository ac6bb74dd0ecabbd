"""
This is the view model package for the GUI. Here, you'll find the following:

- ``rootview.py`` - Contains the ``RootView`` class - the main window, which switches between the views below.
- ``authviews.py`` - Contains the ``SignUpView`` and ``LogInView`` classes.
- ``folderlistview.py`` - Contains the ``FolderListView`` class which lists the user's folders.
- ``noteslistview.py`` - Contains the ``NotesListView`` class which lists the notes in a folder.
- ``threadedtasks.py`` - Contains the classes which move callbacks and log messages onto the Qt thread.
"""
