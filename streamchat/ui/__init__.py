"""NiceGUI interface - thin presentation layer over the conversation controller.

Responsibilities:
    - Transcript display, patched in place while a reply streams
    - Message input (Enter sends, Shift+Enter adds a newline)
    - Stop and clear controls
    - Notifications for failed or rejected turns

Contains no protocol or state logic. Reads controller snapshots only.
"""
