"""Sample application for the tag editor.

Import :mod:`taggable.demo.page` to register the NiceGUI route.
"""
