"""Message routing — formats entries and fans them out to every chat.

The dispatcher formats an entry once, decides whether it notifies, and
hands the text to a ``MessageSink`` for each configured destination.  A
failure for one chat does not prevent delivery to the others.
"""
