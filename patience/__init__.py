"""Synchronize the startup of an application under test with the test itself.

The test side uses `patience.listener.Listener`, the application side
`patience.notifier.notify` (or the `patience-notify` command).
"""
