"""Command line watcher for a TM field set.

`watcher.watcher` holds the runtime and one-shot listing modes, `watcher.cli`
the argument parser.
"""
