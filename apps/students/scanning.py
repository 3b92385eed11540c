# apps/students/scanning.py
"""
Keystroke buffering for keyboard-wedge barcode scanners.

A scanner "types" the barcode within a few milliseconds and finishes with
Enter. Characters are collected until Enter arrives or the keyboard goes
quiet for longer than ``timeout`` seconds; the collected text is the barcode.
Cheap scanners often read a card twice, so the same barcode completed again
within ``repeat_window`` seconds is dropped.
"""

import time

ENTER_KEYS = ('\r', '\n')


class ScanBuffer:

    def __init__(self, timeout=0.1, repeat_window=2.0, clock=time.monotonic):
        self.timeout = timeout
        self.repeat_window = repeat_window
        self.clock = clock
        self._chars = []
        self._last_key_at = None
        self._last_code = None
        self._last_code_at = None

    def feed(self, char):
        """
        Add one keystroke. Returns a completed barcode or None.

        A keystroke arriving after a pause completes the pending barcode first
        and then starts a new one.
        """
        now = self.clock()
        completed = None
        if self._chars and now - self._last_key_at > self.timeout:
            completed = self._complete(now)

        if char in ENTER_KEYS:
            return self._complete(now) or completed

        if char.strip():
            self._chars.append(char)
            self._last_key_at = now
        return completed

    def feed_text(self, text):
        """Feed several keystrokes; returns every barcode completed along the way."""
        codes = []
        for char in text:
            code = self.feed(char)
            if code:
                codes.append(code)
        return codes

    def poll(self):
        """Complete the pending barcode if the scanner has gone quiet."""
        if self._chars and self.clock() - self._last_key_at > self.timeout:
            return self._complete(self.clock())
        return None

    def reset(self):
        self._chars = []
        self._last_key_at = None

    def _complete(self, now):
        code = ''.join(self._chars)
        self.reset()
        if not code:
            return None

        if (
            code == self._last_code
            and self._last_code_at is not None
            and now - self._last_code_at < self.repeat_window
        ):
            return None

        self._last_code = code
        self._last_code_at = now
        return code
