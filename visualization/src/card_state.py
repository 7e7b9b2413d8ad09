"""Expand/collapse state of the sample cards.

Each card is COLLAPSED, EXPANDED_MEDIA_PENDING (expanded, media not attached
yet) or EXPANDED_MEDIA_LOADED. Media is attached at most once per card: after
a collapse, expanding again goes straight to EXPANDED_MEDIA_LOADED.
"""

from enum import Enum


class CardState(Enum):
    COLLAPSED = "collapsed"
    EXPANDED_MEDIA_PENDING = "expanded_media_pending"
    EXPANDED_MEDIA_LOADED = "expanded_media_loaded"


class CardStates:
    """Card states keyed by (view label, sample index)."""

    def __init__(self):
        self._states = {}
        self._media_loaded = set()

    def state(self, key):
        return self._states.get(key, CardState.COLLAPSED)

    def is_expanded(self, key):
        return self.state(key) is not CardState.COLLAPSED

    def expand(self, key):
        if key in self._media_loaded:
            self._states[key] = CardState.EXPANDED_MEDIA_LOADED
        else:
            self._states[key] = CardState.EXPANDED_MEDIA_PENDING
        return self._states[key]

    def collapse(self, key):
        self._states[key] = CardState.COLLAPSED
        return CardState.COLLAPSED

    def toggle(self, key):
        if self.is_expanded(key):
            return self.collapse(key)
        return self.expand(key)

    def media_loaded(self, key):
        """Record that the media of an expanded card has been attached."""
        if self.state(key) is CardState.EXPANDED_MEDIA_PENDING:
            self._media_loaded.add(key)
            self._states[key] = CardState.EXPANDED_MEDIA_LOADED
        return self.state(key)

    def expand_all(self, keys):
        for key in keys:
            self.expand(key)

    def collapse_all(self, keys):
        for key in keys:
            self.collapse(key)
